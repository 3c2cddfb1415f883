"""Tests for Keplerian propagation and mean planetary elements."""

from __future__ import annotations

import math

import numpy as np
import pytest

from sky_ephemeris.constants import EARTH, GAUSS_K, J2000, KM_PER_AU, MARS, SUN
from sky_ephemeris.orbit import Orbit, moon_orbit, planet_orbit, solve_kepler
from sky_ephemeris.vectors import is_defined


def _vis_viva(pos: np.ndarray, vel: np.ndarray, a: float, sign: float) -> tuple[float, float]:
    r = float(np.linalg.norm(pos))
    v2 = float(np.dot(vel, vel))
    return v2, GAUSS_K * GAUSS_K * (2.0 / r + sign / a)


def test_circular_orbit_quarter_period() -> None:
    """A circular 1 AU orbit advances 90 degrees in a quarter period."""
    orbit = Orbit(t=J2000, q=1.0, e=0.0, i=0.0, w=0.0, n=0.0, m=0.0, mm=GAUSS_K)
    pos, vel = orbit.to_position_velocity(J2000)
    assert pos == pytest.approx([1.0, 0.0, 0.0])
    assert vel == pytest.approx([0.0, GAUSS_K, 0.0])
    pos, _ = orbit.to_position_velocity(J2000 + 0.5 * math.pi / GAUSS_K)
    assert pos == pytest.approx([0.0, 1.0, 0.0], abs=1e-10)


def test_elliptic_vis_viva() -> None:
    """Speed and distance satisfy the vis-viva equation for an ellipse."""
    a, e = 2.5, 0.6
    orbit = Orbit(t=J2000, q=a * (1.0 - e), e=e, i=0.3, w=1.0, n=2.0, m=0.0, mm=GAUSS_K / a**1.5)
    pos, vel = orbit.to_position_velocity(J2000 + 200.0)
    v2, expected = _vis_viva(pos, vel, a, -1.0)
    assert v2 == pytest.approx(expected, rel=1e-10)


def test_parabolic_perihelion_speed() -> None:
    """A parabolic orbit moves at escape speed at perihelion."""
    q = 0.5
    orbit = Orbit(t=J2000, q=q, e=1.0, i=0.0, w=0.0, n=0.0, m=0.0, mm=GAUSS_K / math.sqrt(2.0 * q**3))
    pos, vel = orbit.to_position_velocity(J2000)
    assert pos == pytest.approx([q, 0.0, 0.0])
    assert float(np.linalg.norm(vel)) == pytest.approx(GAUSS_K * math.sqrt(2.0 / q))
    pos, vel = orbit.to_position_velocity(J2000 + 100.0)
    v2, expected = _vis_viva(pos, vel, math.inf, 0.0)
    assert v2 == pytest.approx(expected, rel=1e-10)


def test_hyperbolic_vis_viva() -> None:
    """Speed and distance satisfy the vis-viva equation for a hyperbola."""
    q, e = 1.2, 1.5
    a = q / (e - 1.0)
    orbit = Orbit(t=J2000, q=q, e=e, i=1.0, w=0.5, n=0.2, m=0.0, mm=GAUSS_K / a**1.5)
    pos, vel = orbit.to_position_velocity(J2000 - 150.0)
    v2, expected = _vis_viva(pos, vel, a, 1.0)
    assert v2 == pytest.approx(expected, rel=1e-10)


def test_solve_kepler_high_eccentricity() -> None:
    """Eccentric anomaly satisfies Kepler's equation."""
    ecc_anomaly = solve_kepler(0.2, 0.95)
    assert ecc_anomaly - 0.95 * math.sin(ecc_anomaly) == pytest.approx(0.2, abs=1e-12)


def test_undefined_orbit_propagates_infinity() -> None:
    """Missing elements give undefined vectors rather than errors."""
    pos, vel = Orbit(t=J2000, q=1.0, e=0.1).to_position_velocity(J2000)
    assert not is_defined(pos)
    assert not is_defined(vel)


def test_planet_orbit_earth_distance() -> None:
    """Earth-Moon barycenter is near perihelion at the start of January."""
    orbit = planet_orbit(EARTH, J2000)
    pos, _ = orbit.to_position_velocity(J2000)
    assert 0.980 < float(np.linalg.norm(pos)) < 0.990


def test_planet_orbit_sun_and_unknown_undefined() -> None:
    """The Sun and unknown ids have no orbit."""
    assert not planet_orbit(SUN, J2000).is_defined()
    assert not planet_orbit(42, J2000).is_defined()
    assert planet_orbit(MARS, J2000).is_defined()


def test_moon_orbit_distance() -> None:
    """Earth's Moon stays between perigee and apogee distances."""
    orbit = moon_orbit(J2000 + 1000.0)
    for days in (0.0, 7.0, 14.0, 21.0):
        pos, _ = orbit.to_position_velocity(J2000 + 1000.0 + days)
        assert 356000.0 < float(np.linalg.norm(pos)) * KM_PER_AU < 407000.0
