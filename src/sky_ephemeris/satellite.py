"""Earth satellite element sets (TLE) propagated with SGP4/SDP4."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from sgp4.api import Satrec

from sky_ephemeris.vectors import undefined_vector

logger = logging.getLogger(__name__)


@dataclass
class ElementSet:
    """Two-line element set for one satellite.

    Output vectors are in the TEME frame (true equator of date), in km and
    km/s, as produced by sgp4.
    """

    name: str
    satrec: Satrec

    @classmethod
    def from_lines(cls, name: str, line1: str, line2: str) -> ElementSet:
        """Build an element set from the two data lines of a TLE.

        Raises:
            ValueError: If either line is not a TLE data line.
        """
        line1, line2 = line1.rstrip(), line2.rstrip()
        if not line1.startswith('1 ') or not line2.startswith('2 '):
            raise ValueError(f'Not a two-line element set: {line1!r} / {line2!r}')
        return cls(name=name.strip(), satrec=Satrec.twoline2rv(line1, line2))

    @property
    def norad_number(self) -> int:
        """NORAD catalog number."""
        return int(self.satrec.satnum)

    def position_velocity(self, jd: float) -> tuple[np.ndarray, np.ndarray]:
        """Position (km) and velocity (km/s) at civil Julian Date jd.

        Returns undefined vectors if jd is not finite or sgp4 reports an error
        (decayed orbit, eccentricity out of range, etc.).
        """
        if not math.isfinite(jd):
            return undefined_vector(), undefined_vector()
        whole = math.floor(jd)
        error, pos, vel = self.satrec.sgp4(whole, jd - whole)
        if error != 0:
            logger.debug('sgp4 error %d for %s at JD %.6f', error, self.name, jd)
            return undefined_vector(), undefined_vector()
        return np.array(pos, dtype=np.float64), np.array(vel, dtype=np.float64)


def read_tle_file(path: str | Path) -> list[ElementSet]:
    """Read element sets from a file of 2-line or 3-line (named) TLEs.

    Parameters:
        path: TLE text file.

    Returns:
        Element sets in file order.

    Raises:
        ValueError: If a line 1 is not followed by a line 2.
    """
    lines = [line.rstrip() for line in Path(path).read_text().splitlines() if line.strip()]
    result: list[ElementSet] = []
    name = ''
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith('1 '):
            if i + 1 >= len(lines) or not lines[i + 1].startswith('2 '):
                raise ValueError(f'{path}: line 1 without matching line 2: {line!r}')
            result.append(ElementSet.from_lines(name or line[2:7].strip(), line, lines[i + 1]))
            name = ''
            i += 2
            continue
        name = line[2:] if line.startswith('0 ') else line
        i += 1
    return result
