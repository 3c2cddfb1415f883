"""Tests for SPICE kernel loading and the binary ephemeris interpolator."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import numpy as np
import pytest

from sky_ephemeris.constants import (
    EARTH,
    EPHEMERIS_MOON_INDEX,
    J2000,
    KM_PER_AU,
    MARS,
    SECONDS_PER_DAY,
    SUN,
)
from sky_ephemeris.ephemeris import Ephemeris
from sky_ephemeris.orbit import planet_orbit
from sky_ephemeris.spice.common import get_state
from sky_ephemeris.spice.ephemeris import SpkEphemeris, naif_id
from sky_ephemeris.spice.load import clear_kernels, load_ephemeris_kernels


@pytest.fixture(autouse=True)
def _reset_spice_state() -> Iterator[None]:
    get_state().reset()
    yield
    get_state().reset()


def test_load_kernels_from_list(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Version 0 loads every kernel of the first version listed."""
    for name in ('a.bsp', 'b.bsp', 'c.bsp', 'leapseconds.ker'):
        (tmp_path / name).touch()
    (tmp_path / 'SPICE_ephemeris.txt').write_text(
        '! planetary kernels\n2,"a.bsp"\n1,"b.bsp"\n2,"c.bsp"\nbad line\n',
        encoding='utf-8',
    )
    furnished: list[str] = []
    monkeypatch.setenv('SPICE_PATH', str(tmp_path))
    monkeypatch.delenv('SKY_EPHEMERIS_KERNELS', raising=False)
    monkeypatch.setattr('cspyce.furnsh', furnished.append)

    ok, reason = load_ephemeris_kernels()

    assert ok is True
    assert reason is None
    assert [Path(p).name for p in furnished] == ['leapseconds.ker', 'a.bsp', 'c.bsp']
    state = get_state()
    assert state.ephemeris_loaded is True
    assert state.version == 2
    assert SpkEphemeris().is_available()


def test_load_kernels_explicit_version(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """A requested version selects only its kernels."""
    for name in ('a.bsp', 'b.bsp'):
        (tmp_path / name).touch()
    (tmp_path / 'SPICE_ephemeris.txt').write_text('2,"a.bsp"\n1,"b.bsp"\n', encoding='utf-8')
    furnished: list[str] = []
    monkeypatch.setenv('SPICE_PATH', str(tmp_path))
    monkeypatch.setattr('cspyce.furnsh', furnished.append)

    ok, _ = load_ephemeris_kernels(version=1)

    assert ok is True
    assert [Path(p).name for p in furnished] == ['b.bsp']


def test_load_kernels_missing_list(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """A missing kernel list is reported, not raised."""
    monkeypatch.setenv('SPICE_PATH', str(tmp_path))
    ok, reason = load_ephemeris_kernels()
    assert ok is False
    assert reason is not None and 'SPICE_ephemeris.txt' in reason
    assert not SpkEphemeris().is_available()


def test_load_kernels_furnsh_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Kernels that cspyce rejects do not count as loaded."""
    kernel = tmp_path / 'broken.bsp'
    kernel.touch()
    monkeypatch.setenv('SPICE_PATH', str(tmp_path))

    def _fail(path: str) -> None:
        raise RuntimeError(f'bad kernel {path}')

    monkeypatch.setattr('cspyce.furnsh', _fail)
    ok, reason = load_ephemeris_kernels([kernel, tmp_path / 'absent.bsp'])
    assert ok is False
    assert reason is not None


def test_clear_kernels(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clearing unloads the pool and resets the state."""
    cleared: list[bool] = []
    monkeypatch.setattr('cspyce.kclear', lambda: cleared.append(True))
    state = get_state()
    state.ephemeris_loaded = True
    state.kernel_files.append('x.bsp')
    clear_kernels()
    assert cleared == [True]
    assert state.ephemeris_loaded is False
    assert state.kernel_files == []


def test_naif_ids() -> None:
    """Planet ids map to NAIF codes; Earth's Moon has its own index."""
    assert naif_id(SUN) == 10
    assert naif_id(EARTH) == 399
    assert naif_id(MARS) == 4
    assert naif_id(EPHEMERIS_MOON_INDEX) == 301
    assert naif_id(11) is None


def test_compute_without_kernels() -> None:
    """Lookups fail cleanly when nothing is loaded."""
    assert SpkEphemeris().compute(MARS, J2000) == (False, None, None)


def test_compute_converts_units(monkeypatch: pytest.MonkeyPatch) -> None:
    """SPICE km and km/s become AU and AU/day, relative to the Sun."""
    calls: list[tuple[object, ...]] = []

    def _spkez(target: int, et: float, ref: str, abcorr: str, obs: int) -> tuple[list[float], float]:
        calls.append((target, et, ref, abcorr, obs))
        return [KM_PER_AU, 0.0, 0.0, 0.0, KM_PER_AU / SECONDS_PER_DAY, 0.0], 0.0

    monkeypatch.setattr('cspyce.spkez', _spkez)
    get_state().ephemeris_loaded = True

    ok, pos, vel = SpkEphemeris().compute(EARTH, J2000 + 1.0)

    assert ok is True
    assert pos == pytest.approx([1.0, 0.0, 0.0])
    assert vel == pytest.approx([0.0, 1.0, 0.0])
    assert calls == [(399, SECONDS_PER_DAY, 'J2000', 'NONE', 10)]
    ok, pos, _ = SpkEphemeris().compute(SUN, J2000)
    assert ok is True
    assert pos == pytest.approx([0.0, 0.0, 0.0])


def test_compute_outside_coverage(monkeypatch: pytest.MonkeyPatch) -> None:
    """SPICE errors (e.g. insufficient coverage) become a failed lookup."""

    def _spkez(*_args: object) -> None:
        raise OSError('SPICE(SPKINSUFFDATA)')

    monkeypatch.setattr('cspyce.spkez', _spkez)
    get_state().ephemeris_loaded = True
    assert SpkEphemeris().compute(MARS, J2000) == (False, None, None)


@pytest.mark.skipif(not os.environ.get('SPICE_PATH'), reason='SPICE_PATH not set')
def test_mean_elements_agree_with_kernels() -> None:
    """Mean-element and SPK positions of Mars agree to a small fraction of an AU."""
    ok, reason = load_ephemeris_kernels()
    if not ok:
        pytest.skip(reason or 'no kernels')
    jed = J2000 + 7305.0
    engine = Ephemeris()
    spk_pos, _ = engine.planet_position_velocity(MARS, jed, 0.0)
    kepler_pos, _ = engine.keplerian_position_velocity(planet_orbit(MARS, jed), jed)
    assert float(np.linalg.norm(spk_pos - kepler_pos)) < 0.01
