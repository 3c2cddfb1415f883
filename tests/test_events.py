"""Tests for rise/transit/set computation."""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import pytest

from sky_ephemeris.bodies import BodyType, CelestialBody, DerivedState, PlanetSource
from sky_ephemeris.constants import RAD_PER_DEG, SIDEREAL_PER_SOLAR, SUN
from sky_ephemeris.ephemeris import Ephemeris
from sky_ephemeris.events import (
    HORIZON_POINT,
    HORIZON_SUN_MOON,
    RISE,
    SET,
    TRANSIT,
    Event,
    rise_transit_set,
    rise_transit_set_search_day,
    rise_transit_set_time,
    semi_diurnal_arc,
)
from sky_ephemeris.frame import Frame, ObserverFrame, mean_sidereal_time
from sky_ephemeris.vectors import from_spherical

MINUTE = 1.0 / 1440.0

# Local noon (UTC) on 2020-03-20 and 2020-06-21
EQUINOX_NOON = 2458929.0
SOLSTICE_NOON = 2459022.0


class _NoSpk:
    def compute(self, body_id: int, jed: float) -> tuple[bool, Any, Any]:
        return (False, None, None)


class _StarEngine:
    """Ephemeris stub: every body is a fixed star, Earth at the origin."""

    def __init__(self, direction: np.ndarray) -> None:
        self.direction = direction
        self.computed = 0

    def planet_position_velocity(self, planet_id: int, jed: float, lt: float) -> Any:
        return np.zeros(3), np.zeros(3)

    def compute_ephemeris(self, body: CelestialBody, frame: ObserverFrame) -> None:
        self.computed += 1
        body.state = DerivedState(jed=frame.jed, direction=self.direction.copy(), distance=1.0e6)


def _star(direction: np.ndarray, lat_deg: float) -> tuple[_StarEngine, ObserverFrame, CelestialBody]:
    engine = _StarEngine(direction)
    frame = ObserverFrame(engine, lat=lat_deg * RAD_PER_DEG, jd=EQUINOX_NOON)  # type: ignore[arg-type]
    body = CelestialBody('Star', BodyType.PLANET, PlanetSource(SUN))
    return engine, frame, body


def test_semi_diurnal_arc_sentinels() -> None:
    """Always-above gives exactly pi, never-above exactly 0."""
    lat = 80.0 * RAD_PER_DEG
    assert semi_diurnal_arc(lat, 30.0 * RAD_PER_DEG, 0.0) == math.pi
    assert semi_diurnal_arc(lat, -30.0 * RAD_PER_DEG, 0.0) == 0.0
    assert semi_diurnal_arc(0.0, 0.0, 0.0) == pytest.approx(math.pi / 2.0)


def test_semi_diurnal_arc_closed_form() -> None:
    """Mid-range arcs match the spherical-triangle arccosine."""
    lat, dec, alt = 0.7, 0.3, HORIZON_POINT
    expected = math.acos(
        (math.sin(alt) - math.sin(dec) * math.sin(lat)) / (math.cos(dec) * math.cos(lat))
    )
    assert semi_diurnal_arc(lat, dec, alt) == pytest.approx(expected)


def test_single_shot_sentinels() -> None:
    """Circumpolar rise/set give +inf; bodies that never rise give -inf."""
    lat = 80.0 * RAD_PER_DEG
    up, down = 30.0 * RAD_PER_DEG, -30.0 * RAD_PER_DEG
    assert rise_transit_set_time(EQUINOX_NOON, 1.0, up, RISE, 0.0, lat, 0.0) == math.inf
    assert rise_transit_set_time(EQUINOX_NOON, 1.0, up, SET, 0.0, lat, 0.0) == math.inf
    assert math.isfinite(rise_transit_set_time(EQUINOX_NOON, 1.0, up, TRANSIT, 0.0, lat, 0.0))
    for sign in (RISE, TRANSIT, SET):
        assert rise_transit_set_time(EQUINOX_NOON, 1.0, down, sign, 0.0, lat, 0.0) == -math.inf


def test_single_shot_transit_time() -> None:
    """A star transits when local sidereal time equals its right ascension."""
    lon = -1.2
    ra = mean_sidereal_time(EQUINOX_NOON, lon) + 0.1
    time = rise_transit_set_time(EQUINOX_NOON, ra, 0.2, TRANSIT, lon, 0.5, 0.0)
    assert time == pytest.approx(EQUINOX_NOON + 0.1 / (2.0 * math.pi) / SIDEREAL_PER_SOLAR)
    assert mean_sidereal_time(time, lon) == pytest.approx(ra % (2.0 * math.pi), abs=1e-6)


def test_single_shot_within_half_day() -> None:
    """Results lie within half a day of the starting time."""
    for ra in np.linspace(0.0, 6.0, 7):
        for sign in (RISE, TRANSIT, SET):
            time = rise_transit_set_time(EQUINOX_NOON, float(ra), 0.1, sign, 0.0, 0.6, 0.0)
            assert abs(time - EQUINOX_NOON) <= 0.5 / SIDEREAL_PER_SOLAR + 1e-9


def test_circumpolar_star_day_search() -> None:
    """A circumpolar star never rises or sets but still transits."""
    direction = from_spherical(1.0, 60.0 * RAD_PER_DEG)
    engine, frame, star = _star(direction, 80.0)
    rise = rise_transit_set_search_day(engine, frame, star, EQUINOX_NOON, RISE, HORIZON_POINT)  # type: ignore[arg-type]
    set_ = rise_transit_set_search_day(engine, frame, star, EQUINOX_NOON, SET, HORIZON_POINT)  # type: ignore[arg-type]
    assert rise == -math.inf
    assert set_ == math.inf
    result = rise_transit_set(engine, frame, star, EQUINOX_NOON)  # type: ignore[arg-type]
    assert not result.rising.occurs
    assert not result.setting.occurs
    assert result.transit.occurs
    assert math.degrees(result.transit.altitude) == pytest.approx(70.0, abs=0.5)


def test_star_that_never_rises() -> None:
    """A star below the horizon all day has no rise, set, or transit."""
    direction = from_spherical(1.0, -60.0 * RAD_PER_DEG)
    engine, frame, star = _star(direction, 80.0)
    result = rise_transit_set(engine, frame, star, EQUINOX_NOON)  # type: ignore[arg-type]
    assert result.rising.time == -math.inf
    assert result.transit.time == math.inf
    assert result.setting.time == math.inf


def test_equatorial_star_up_half_a_day() -> None:
    """An equatorial star seen from the equator is up just over half a day."""
    engine, frame, star = _star(from_spherical(2.0, 0.0), 0.0)
    result = rise_transit_set(engine, frame, star, EQUINOX_NOON)  # type: ignore[arg-type]
    assert result.rising.occurs and result.transit.occurs and result.setting.occurs
    sidereal_day = 1.0 / SIDEREAL_PER_SOLAR
    up = (result.setting.time - result.rising.time) % sidereal_day
    expected = (math.pi + 2.0 * abs(HORIZON_POINT)) / (2.0 * math.pi) * sidereal_day
    assert up == pytest.approx(expected, abs=2.0 / 86400.0)
    assert result.rising.altitude == pytest.approx(HORIZON_POINT, abs=1e-3)
    assert result.setting.altitude == pytest.approx(HORIZON_POINT, abs=1e-3)
    assert math.degrees(result.transit.altitude) == pytest.approx(90.0, abs=0.5)
    assert 0.0 < result.rising.azimuth < math.pi
    assert math.pi < result.setting.azimuth < 2.0 * math.pi


def test_pass_restores_frame_and_state() -> None:
    """The frame's time and the body's state are unchanged by a search."""
    engine, frame, star = _star(from_spherical(2.0, 0.0), 0.0)
    frame.set_time(EQUINOX_NOON - 3.0)
    star.state = DerivedState(jed=123.0)
    rise_transit_set(engine, frame, star, EQUINOX_NOON)  # type: ignore[arg-type]
    assert frame.jd == EQUINOX_NOON - 3.0
    assert star.state.jed == 123.0
    assert engine.computed > 3


def _sun_frame(lat_deg: float) -> tuple[Ephemeris, ObserverFrame, CelestialBody]:
    engine = Ephemeris(spk=_NoSpk())  # type: ignore[arg-type]
    frame = ObserverFrame(engine, lon=0.0, lat=lat_deg * RAD_PER_DEG, jd=EQUINOX_NOON)
    return engine, frame, CelestialBody.planet(SUN)


def test_sun_at_equator_on_equinox() -> None:
    """Sunrise and sunset 2020-03-20 at 0N 0E, with the equation of time."""
    engine, frame, sun = _sun_frame(0.0)
    result = rise_transit_set(engine, frame, sun, EQUINOX_NOON, HORIZON_SUN_MOON)
    midnight = EQUINOX_NOON - 0.5
    assert result.rising.time == pytest.approx(midnight + (6.0 + 4.0 / 60.0) / 24.0, abs=5.0 * MINUTE)
    assert result.transit.time == pytest.approx(midnight + (12.0 + 7.5 / 60.0) / 24.0, abs=3.0 * MINUTE)
    assert result.setting.time == pytest.approx(midnight + (18.0 + 11.0 / 60.0) / 24.0, abs=5.0 * MINUTE)
    assert math.degrees(result.rising.azimuth) == pytest.approx(90.0, abs=1.0)
    assert math.degrees(result.transit.altitude) == pytest.approx(90.0, abs=1.0)


def test_midnight_sun() -> None:
    """At 80N near the June solstice the Sun neither rises nor sets."""
    engine, frame, sun = _sun_frame(80.0)
    result = rise_transit_set(engine, frame, sun, SOLSTICE_NOON, HORIZON_SUN_MOON)
    assert result.rising.time == -math.inf
    assert result.setting.time == math.inf
    assert result.transit.occurs
    assert math.degrees(result.transit.altitude) == pytest.approx(33.4, abs=0.5)


def test_event_defaults() -> None:
    """A default event does not occur."""
    event = Event()
    assert not event.occurs
    assert Event(time=2451545.0).occurs
    assert Event(time=-math.inf).occurs is False


def test_horizon_frame_used_for_events() -> None:
    """Event coordinates agree with a direct horizon transform."""
    engine, frame, star = _star(from_spherical(2.0, 0.3), 30.0)
    result = rise_transit_set(engine, frame, star, EQUINOX_NOON)  # type: ignore[arg-type]
    frame.set_time(result.transit.time)
    x, y, _ = frame.transform(Frame.FUNDAMENTAL, Frame.HORIZON, engine.direction)
    # At transit the star is on the meridian, due south from 30N
    assert abs(y) < 1e-3
    assert x < 0.0
