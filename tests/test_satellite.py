"""Tests for two-line element sets and SGP4 propagation."""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest

from sky_ephemeris.satellite import ElementSet, read_tle_file
from sky_ephemeris.vectors import is_defined

ISS_LINE1 = '1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991'
ISS_LINE2 = '2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482'


def test_from_lines_and_propagate() -> None:
    """The ISS element set propagates to the reference SGP4 position."""
    iss = ElementSet.from_lines('ISS (ZARYA)', ISS_LINE1, ISS_LINE2)
    assert iss.name == 'ISS (ZARYA)'
    assert iss.norad_number == 25544
    pos, vel = iss.position_velocity(2458827.362605)
    assert pos == pytest.approx([-6102.44, -986.33, -2820.31], abs=0.01)
    assert 7.5 < float(np.linalg.norm(vel)) < 7.8


def test_from_lines_rejects_other_text() -> None:
    """Lines that are not TLE data lines are rejected."""
    with pytest.raises(ValueError):
        ElementSet.from_lines('X', ISS_LINE2, ISS_LINE1)


def test_undefined_time() -> None:
    """Non-finite times give undefined vectors."""
    iss = ElementSet.from_lines('ISS', ISS_LINE1, ISS_LINE2)
    pos, vel = iss.position_velocity(math.inf)
    assert not is_defined(pos)
    assert not is_defined(vel)


def test_read_tle_file_two_and_three_line(tmp_path: Path) -> None:
    """Named, '0 '-prefixed, and unnamed element sets are all read in order."""
    tle = tmp_path / 'stations.txt'
    tle.write_text(
        '\n'.join(
            [
                'ISS (ZARYA)',
                ISS_LINE1,
                ISS_LINE2,
                '0 SPACE STATION',
                ISS_LINE1,
                ISS_LINE2,
                '',
                ISS_LINE1,
                ISS_LINE2,
            ]
        )
        + '\n',
        encoding='utf-8',
    )
    sets = read_tle_file(tle)
    assert [s.name for s in sets] == ['ISS (ZARYA)', 'SPACE STATION', '25544']


def test_read_tle_file_missing_line2(tmp_path: Path) -> None:
    """A line 1 without its line 2 is an error."""
    tle = tmp_path / 'bad.txt'
    tle.write_text(f'BROKEN\n{ISS_LINE1}\n', encoding='utf-8')
    with pytest.raises(ValueError):
        read_tle_file(tle)
