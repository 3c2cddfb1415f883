"""Rise, transit, and set times and satellite pass searches.

Times are civil Julian Dates. An event that does not happen is reported with
an infinite time: a body that never rises gives a rise time of -inf, and a
body that never sets (or a transit that falls outside the requested day)
gives +inf. Angles are radians, north and east positive.

Horizon altitudes commonly used for rising and setting are provided as
constants: HORIZON_POINT (-0.5 deg of refraction, for stars and planets),
HORIZON_SUN_MOON (-50 arcmin, refraction plus semi-diameter), and the three
twilight limits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sky_ephemeris.angle_utils import mod_pi
from sky_ephemeris.constants import (
    MINUTES_PER_DAY,
    RAD_PER_DEG,
    SECONDS_PER_DAY,
    SIDEREAL_PER_SOLAR,
    TWO_PI,
)
from sky_ephemeris.frame import Frame, ObserverFrame, mean_sidereal_time
from sky_ephemeris.vectors import is_defined, to_spherical

if TYPE_CHECKING:
    from sky_ephemeris.bodies import CelestialBody
    from sky_ephemeris.ephemeris import Ephemeris

logger = logging.getLogger(__name__)

RISE = -1
TRANSIT = 0
SET = 1

HORIZON_POINT = -0.5 * RAD_PER_DEG
HORIZON_SUN_MOON = -50.0 / 60.0 * RAD_PER_DEG
TWILIGHT_CIVIL = -6.0 * RAD_PER_DEG
TWILIGHT_NAUTICAL = -12.0 * RAD_PER_DEG
TWILIGHT_ASTRONOMICAL = -18.0 * RAD_PER_DEG

MAX_ITERATIONS = 10
PRECISION_DAYS = 1.0 / SECONDS_PER_DAY

# Satellite scan steps, and how far below the threshold the fine step starts
COARSE_STEP = 1.0 / MINUTES_PER_DAY
FINE_STEP = 1.0 / SECONDS_PER_DAY
FINE_MARGIN = 1.0 * RAD_PER_DEG


@dataclass
class Event:
    """Time and horizon coordinates of one rise, transit, or set."""

    time: float = math.inf
    azimuth: float = math.inf
    altitude: float = math.inf

    @property
    def occurs(self) -> bool:
        """True if the event happens (its time is finite)."""
        return math.isfinite(self.time)


@dataclass
class Pass:
    """Rise, transit (peak), and set of one period above a horizon altitude."""

    rising: Event = field(default_factory=Event)
    transit: Event = field(default_factory=Event)
    setting: Event = field(default_factory=Event)


def _never(sign: int) -> float:
    return -math.inf if sign == RISE else math.inf


def semi_diurnal_arc(lat: float, dec: float, alt: float) -> float:
    """Hour angle at which a body of declination dec crosses altitude alt.

    Parameters:
        lat: Observer latitude, radians.
        dec: Body declination, radians.
        alt: Target altitude, radians.

    Returns:
        The hour angle in [0, pi]. Exactly pi if the body is always above
        alt; exactly 0 if it never reaches alt.
    """
    cos_ha = (math.sin(alt) - math.sin(dec) * math.sin(lat)) / (math.cos(dec) * math.cos(lat))
    if cos_ha >= 1.0:
        return 0.0
    if cos_ha <= -1.0:
        return math.pi
    return math.acos(cos_ha)


def rise_transit_set_time(
    time: float, ra: float, dec: float, sign: int, lon: float, lat: float, alt: float
) -> float:
    """Single-shot rise, transit, or set time nearest to `time` for fixed (ra, dec).

    Ignores the body's motion during the day, so it is exact for stars and a
    first estimate for solar-system bodies. (ra, dec) must refer to the
    equator and equinox of date.

    Parameters:
        time: Civil Julian Date to start from.
        ra: Right ascension, radians.
        dec: Declination, radians.
        sign: RISE, TRANSIT, or SET.
        lon: Observer east longitude, radians.
        lat: Observer latitude, radians.
        alt: Horizon altitude for rising and setting, radians.

    Returns:
        A time within half a day of `time`; +inf if the body never sets
        (rise and set only), -inf if it never rises.
    """
    ha = semi_diurnal_arc(lat, dec, alt)
    if ha == math.pi and sign != TRANSIT:
        return math.inf
    if ha == 0.0:
        return -math.inf
    lst = mean_sidereal_time(time, lon)
    theta = mod_pi(ra - lst + sign * ha)
    return time + theta / TWO_PI / SIDEREAL_PER_SOLAR


def body_rise_transit_set_time(
    time: float, frame: ObserverFrame, body: CelestialBody, sign: int, alt: float
) -> float:
    """rise_transit_set_time using the body's current direction and the frame's location."""
    if not is_defined(body.direction):
        logger.debug('No direction for %s; event treated as not occurring', body.name)
        return _never(sign)
    lon, lat = frame.location
    ra, dec, _ = to_spherical(frame.transform(Frame.FUNDAMENTAL, Frame.EQUATORIAL, body.direction))
    return rise_transit_set_time(time, ra, dec, sign, lon, lat, alt)


def rise_transit_set_search(
    engine: Ephemeris,
    frame: ObserverFrame,
    body: CelestialBody,
    time: float,
    sign: int,
    alt: float,
) -> float:
    """Rise, transit, or set time nearest `time`, following the body's motion.

    Iterates the single-shot estimate, recomputing the body's ephemeris at
    each new estimate, until two estimates agree within one second or after
    MAX_ITERATIONS. Returns an infinite time as soon as one is produced.
    Leaves the frame and the body at the last estimate. Unsuitable for
    bodies that cross the horizon more than once a day; use
    find_satellite_passes for those.
    """
    for _ in range(MAX_ITERATIONS):
        last = time
        frame.set_time(time)
        engine.compute_ephemeris(body, frame)
        time = body_rise_transit_set_time(time, frame, body, sign, alt)
        if math.isinf(time) or abs(time - last) <= PRECISION_DAYS:
            return time
    logger.debug(
        'Event search for %s (sign %d) stopped after %d iterations', body.name, sign, MAX_ITERATIONS
    )
    return time


def rise_transit_set_search_day(
    engine: Ephemeris,
    frame: ObserverFrame,
    body: CelestialBody,
    today: float,
    sign: int,
    alt: float,
) -> float:
    """Rise, transit, or set time within the local day containing `today`.

    Searches from the middle of the day. A result after the day is searched
    again from the middle of the previous day, one before it from the middle
    of the next day. Returns -inf (rise) or +inf (transit, set) if the event
    does not occur that day.
    """
    start = frame.local_midnight(today)
    end = start + 1.0
    time = rise_transit_set_search(engine, frame, body, start + 0.5, sign, alt)
    if time > end:
        time = rise_transit_set_search(engine, frame, body, start - 0.5, sign, alt)
    elif time < start:
        time = rise_transit_set_search(engine, frame, body, end + 0.5, sign, alt)
    if time > end or time < start:
        return _never(sign)
    return time


def _event_at(
    engine: Ephemeris,
    frame: ObserverFrame,
    body: CelestialBody,
    today: float,
    sign: int,
    alt: float,
) -> Event:
    time = rise_transit_set_search_day(engine, frame, body, today, sign, alt)
    if math.isinf(time):
        return Event(time=time)
    # The search leaves the frame and the body at the event time.
    azimuth, altitude = frame.horizon_coordinates(body.direction)
    return Event(time, azimuth, altitude)


def rise_transit_set(
    engine: Ephemeris,
    frame: ObserverFrame,
    body: CelestialBody,
    today: float,
    alt: float = HORIZON_POINT,
) -> Pass:
    """Rise, transit, and set of a body on the local day containing `today`.

    Parameters:
        engine: Ephemeris engine used to recompute the body.
        frame: Observer frame; its time is restored before returning.
        body: Body to search for; its derived state is restored.
        today: Any civil Julian Date within the local day of interest.
        alt: Horizon altitude for rising and setting, radians.

    Returns:
        Pass whose events carry azimuth and altitude where they occur.
    """
    saved_jd = frame.jd
    saved_state = body.state.copy()
    try:
        return Pass(
            rising=_event_at(engine, frame, body, today, RISE, alt),
            transit=_event_at(engine, frame, body, today, TRANSIT, 0.0),
            setting=_event_at(engine, frame, body, today, SET, alt),
        )
    finally:
        frame.set_time(saved_jd)
        body.state = saved_state


def find_satellite_passes(
    engine: Ephemeris,
    frame: ObserverFrame,
    satellite: CelestialBody,
    start: float,
    stop: float,
    min_alt: float,
    passes: list[Pass],
) -> int:
    """Scan [start, stop] for passes of a satellite above min_alt.

    Steps one minute at a time while the satellite is more than one degree
    below min_alt, and one second at a time otherwise. A satellite that rises
    through the whole one-degree band within a single coarse step is caught
    above min_alt; that step is then scanned again one second at a time, so
    rise times are good to a second. A pass starts when the altitude rises
    through min_alt and is appended to `passes` when it falls back through
    it; its transit is the highest sampled point in between. A pass already
    in progress at `start` or still in progress at `stop` is not reported.

    Returns:
        Total number of passes in `passes`, including any it held on entry.
    """
    saved_jd = frame.jd
    saved_state = satellite.state.copy()
    current: Pass | None = None
    was_above: bool | None = None
    refining = False
    time = start
    last_time = start
    step = COARSE_STEP
    try:
        while time <= stop:
            frame.set_time(time)
            engine.compute_ephemeris(satellite, frame)
            azimuth, altitude = frame.horizon_coordinates(satellite.direction)
            defined = math.isfinite(altitude)
            above = defined and altitude > min_alt
            event = Event(time, azimuth, altitude)

            if was_above is False and above and step == COARSE_STEP:
                # Rise crossed inside a coarse step; rescan it finely
                refining = True
                step = FINE_STEP
                time = last_time + step
                continue

            if was_above is not None:
                if above and not was_above:
                    refining = False
                    current = Pass(rising=event, transit=event)
                elif above and current is not None and altitude > current.transit.altitude:
                    current.transit = event
                elif was_above and not above and current is not None:
                    current.setting = event
                    passes.append(current)
                    logger.debug(
                        'Pass of %s: rise %.6f, peak %.2f deg, set %.6f',
                        satellite.name,
                        current.rising.time,
                        math.degrees(current.transit.altitude),
                        time,
                    )
                    current = None
            was_above = above
            last_time = time

            if refining or (defined and altitude > min_alt - FINE_MARGIN):
                step = FINE_STEP
            else:
                step = COARSE_STEP
            time += step
    finally:
        frame.set_time(saved_jd)
        satellite.state = saved_state
    return len(passes)
