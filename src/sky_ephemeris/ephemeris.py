"""Ephemeris engine: body positions, light time, aberration, and magnitudes.

All vectors are heliocentric, in the fundamental (J2000 equatorial) frame,
in AU and AU/day. Times are Julian Ephemeris Dates in dynamical time; the
light time `lt` (days) antedates the computed state and may be zero for a
first approximation.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from sky_ephemeris import time_utils
from sky_ephemeris.bodies import (
    CelestialBody,
    DerivedState,
    MinorPlanetSource,
    MoonSource,
    PlanetSource,
    SatelliteSource,
)
from sky_ephemeris.cache import EpochCache
from sky_ephemeris.constants import (
    EARTH,
    EPHEMERIS_MOON_INDEX,
    J2000_OBLIQUITY,
    KM_PER_AU,
    LIGHT_AU_PER_DAY,
    LUNA,
    SECONDS_PER_DAY,
    SUN,
)
from sky_ephemeris.frame import ObserverFrame
from sky_ephemeris.orbit import Orbit, planet_orbit
from sky_ephemeris.photometry import compute_magnitude, phase_angle
from sky_ephemeris.satellite import ElementSet
from sky_ephemeris.spice.ephemeris import SpkEphemeris
from sky_ephemeris.vectors import normalize

logger = logging.getLogger(__name__)

# Ecliptic of J2000 to fundamental frame; the J2000 obliquity is constant.
J2000_ECLIPTIC_MATRIX = ObserverFrame.ecliptic_matrix(J2000_OBLIQUITY)

_EARTH_KEY = 'earth'

Vectors = tuple[np.ndarray, np.ndarray]


class Ephemeris:
    """Computes positions and apparent ephemerides of solar-system bodies.

    Owns the binary ephemeris interpolator and two last-value caches: one
    slot per primary planet (for moons) and one for Earth (for satellites).
    A slot is recomputed only when the requested epoch differs from the
    cached one, so many moons of one planet at one epoch share a single
    primary computation. Not thread-safe.

    Parameters:
        spk: Binary ephemeris interpolator; a default SpkEphemeris if None.
    """

    def __init__(self, spk: SpkEphemeris | None = None) -> None:
        self.spk = spk if spk is not None else SpkEphemeris()
        self.primary_cache = EpochCache()
        self.earth_cache = EpochCache()

    def compute_ephemeris(self, body: CelestialBody, frame: ObserverFrame) -> None:
        """Recompute a body's derived state for the frame's current epoch and observer.

        Light time is corrected in a single pass: the state is computed once
        without light time, and once more antedated by the light time implied
        by the first distance. Bodies whose source is not recognized are left
        unchanged.
        """
        jed = frame.jed
        with np.errstate(invalid='ignore', divide='ignore', over='ignore'):
            first = self.position_velocity(body, jed, 0.0)
            if first is None:
                logger.debug('No propagation path for %s (%r)', body.name, body.source)
                return
            lt = float(np.linalg.norm(first[0] - frame.obs_pos)) / LIGHT_AU_PER_DAY
            second = self.position_velocity(body, jed, lt)
            if second is None:
                return
            position, velocity = second
            direction, distance = normalize(position - frame.obs_pos)
            direction = frame.add_aberration(direction)
            phase = phase_angle(position, direction)
            body.state = DerivedState(
                jed=jed,
                position=position,
                velocity=velocity,
                direction=direction,
                distance=distance,
                phase=phase if math.isfinite(phase) else None,
            )
            body.state.magnitude = compute_magnitude(
                body, float(np.linalg.norm(position)), distance, phase
            )

    def position_velocity(self, body: CelestialBody, jed: float, lt: float) -> Vectors | None:
        """Heliocentric position and velocity of a body antedated by light time.

        Returns None if the body's source is not one of the known kinds.
        """
        source = body.source
        if isinstance(source, PlanetSource):
            return self.planet_position_velocity(source.planet_id, jed, lt)
        if isinstance(source, MoonSource):
            return self.moon_position_velocity(source, jed, lt)
        if isinstance(source, MinorPlanetSource):
            return self.minor_planet_position_velocity(source.orbit, jed, lt)
        if isinstance(source, SatelliteSource):
            return self.satellite_position_velocity(source.elements, jed, lt)
        return None

    def planet_position_velocity(self, planet_id: int, jed: float, lt: float) -> Vectors:
        """Major planet (or Sun) state from the binary ephemeris, else mean elements."""
        ok, pos, vel = self.spk.compute(planet_id, jed - lt)
        if ok and pos is not None and vel is not None:
            return pos, vel
        if planet_id == SUN:
            return np.zeros(3), np.zeros(3)
        return self.keplerian_position_velocity(planet_orbit(planet_id, jed - lt), jed - lt)

    def minor_planet_position_velocity(self, orbit: Orbit, jed: float, lt: float) -> Vectors:
        """Asteroid or comet state by two-body propagation of its own elements."""
        return self.keplerian_position_velocity(orbit, jed - lt)

    def keplerian_position_velocity(self, orbit: Orbit, jed: float) -> Vectors:
        """Propagate J2000-ecliptic elements and rotate into the fundamental frame."""
        pos, vel = orbit.to_position_velocity(jed)
        return J2000_ECLIPTIC_MATRIX @ pos, J2000_ECLIPTIC_MATRIX @ vel

    def moon_position_velocity(self, source: MoonSource, jed: float, lt: float) -> Vectors:
        """Natural satellite state: primary-relative orbit plus the primary's state.

        Earth's Moon comes straight from the binary ephemeris when available.
        The primary's position is antedated for the moon's light time while
        its velocity is added unchanged.
        """
        if source.moon_id == LUNA:
            ok, pos, vel = self.spk.compute(EPHEMERIS_MOON_INDEX, jed - lt)
            if ok and pos is not None and vel is not None:
                return pos, vel
        pos, vel = self.minor_planet_position_velocity(source.orbit, jed, lt)
        p = source.primary_id
        primary_pos, primary_vel = self.primary_cache.get(
            p, jed, lambda: self.planet_position_velocity(p, jed, 0.0)
        )
        return pos + primary_pos - primary_vel * lt, vel + primary_vel

    def _earth_state(self, jed: float) -> tuple[np.ndarray, np.ndarray, np.ndarray, float]:
        earth_pos, earth_vel = self.planet_position_velocity(EARTH, jed, 0.0)
        delta_t = jed - time_utils.jd_from_jed(jed)
        return earth_pos, earth_vel, ObserverFrame.precession_matrix(jed).T, delta_t

    def satellite_position_velocity(self, elements: ElementSet, jed: float, lt: float) -> Vectors:
        """Earth satellite state from its element set plus Earth's state.

        Element sets run on civil time and refer to the equator of date, so
        the propagation time is corrected by delta-T and the result rotated
        back to J2000. Earth's position is antedated for light time; its
        velocity is added unchanged.
        """
        earth_pos, earth_vel, earth_mat, delta_t = self.earth_cache.get(
            _EARTH_KEY, jed, lambda: self._earth_state(jed)
        )
        pos_km, vel_km_s = elements.position_velocity(jed - delta_t - lt)
        pos = earth_mat @ (pos_km / KM_PER_AU)
        vel = earth_mat @ (vel_km_s * SECONDS_PER_DAY / KM_PER_AU)
        return pos + earth_pos - earth_vel * lt, vel + earth_vel
