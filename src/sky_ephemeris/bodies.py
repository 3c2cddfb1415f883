"""Solar-system body model: identity, propagation source, and derived state."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

import numpy as np

from sky_ephemeris.constants import KM_PER_AU, LUNA, NUM_PLANETS, PLANET_NAMES, SUN
from sky_ephemeris.orbit import Orbit
from sky_ephemeris.satellite import ElementSet
from sky_ephemeris.vectors import undefined_vector

if TYPE_CHECKING:
    from sky_ephemeris.frame import ObserverFrame


class BodyType(enum.Enum):
    """Body category; selects the photometric model."""

    PLANET = 'planet'
    MOON = 'moon'
    ASTEROID = 'asteroid'
    COMET = 'comet'
    SATELLITE = 'satellite'


@dataclass(frozen=True)
class PlanetSource:
    """Major planet (or the Sun) identified by id 0..9."""

    planet_id: int


@dataclass(frozen=True)
class MoonSource:
    """Natural satellite with elements relative to its primary planet."""

    moon_id: int
    orbit: Orbit

    @property
    def primary_id(self) -> int:
        """Primary planet id (moon_id // 100); the Sun for out-of-range ids."""
        p = self.moon_id // 100
        return p if 0 <= p < NUM_PLANETS else SUN


@dataclass(frozen=True)
class MinorPlanetSource:
    """Asteroid or comet with heliocentric elements."""

    orbit: Orbit


@dataclass(frozen=True)
class SatelliteSource:
    """Earth satellite propagated from a two-line element set."""

    elements: ElementSet


BodySource = Union[PlanetSource, MoonSource, MinorPlanetSource, SatelliteSource]


@dataclass
class DerivedState:
    """Per-epoch computed state of a body; valid only at epoch `jed`.

    Positions and velocities are heliocentric J2000 equatorial (AU, AU/day).
    `phase` and `magnitude` are None when undefined.
    """

    jed: float = math.inf
    position: np.ndarray = field(default_factory=undefined_vector)
    velocity: np.ndarray = field(default_factory=undefined_vector)
    direction: np.ndarray = field(default_factory=undefined_vector)
    distance: float = math.inf
    phase: float | None = None
    magnitude: float | None = None

    @property
    def distance_km(self) -> float:
        """Distance from observer in kilometers."""
        return self.distance * KM_PER_AU

    def is_current(self, frame: ObserverFrame) -> bool:
        """Return True if this state was computed at the frame's current epoch."""
        return self.jed == frame.jed

    def copy(self) -> DerivedState:
        """Independent copy (arrays are duplicated)."""
        return DerivedState(
            jed=self.jed,
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            direction=self.direction.copy(),
            distance=self.distance,
            phase=self.phase,
            magnitude=self.magnitude,
        )


@dataclass
class CelestialBody:
    """A planet, moon, asteroid, comet, or artificial satellite.

    Identity, source and photometric parameters belong to the catalog; the
    ephemeris engine only rewrites `state`. For comets `g_mag` holds the
    brightness slope K; for satellites `h_mag` is the standard magnitude at
    1000 km range and 50% illumination.
    """

    name: str
    body_type: BodyType
    source: BodySource
    h_mag: float = math.inf
    g_mag: float = math.inf
    radius_km: float = math.inf
    state: DerivedState = field(default_factory=DerivedState)

    @classmethod
    def planet(cls, planet_id: int, radius_km: float = math.inf) -> CelestialBody:
        """Sun (0) or major planet (1..9)."""
        if not 0 <= planet_id < NUM_PLANETS:
            raise ValueError(f'Invalid planet id {planet_id}; expected 0..{NUM_PLANETS - 1}')
        return cls(PLANET_NAMES[planet_id], BodyType.PLANET, PlanetSource(planet_id), radius_km=radius_km)

    @classmethod
    def moon(
        cls,
        name: str,
        moon_id: int,
        orbit: Orbit,
        h_mag: float = math.inf,
        g_mag: float = math.inf,
        radius_km: float = math.inf,
    ) -> CelestialBody:
        """Natural satellite; moon_id is 100 * primary + n (301 = Earth's Moon)."""
        return cls(name, BodyType.MOON, MoonSource(moon_id, orbit), h_mag, g_mag, radius_km)

    @classmethod
    def asteroid(
        cls, name: str, orbit: Orbit, h_mag: float = math.inf, g_mag: float = math.inf
    ) -> CelestialBody:
        """Asteroid with absolute magnitude H and slope parameter G."""
        return cls(name, BodyType.ASTEROID, MinorPlanetSource(orbit), h_mag, g_mag)

    @classmethod
    def comet(
        cls, name: str, orbit: Orbit, h_mag: float = math.inf, k_mag: float = math.inf
    ) -> CelestialBody:
        """Comet with absolute magnitude H and brightness slope K."""
        return cls(name, BodyType.COMET, MinorPlanetSource(orbit), h_mag, k_mag)

    @classmethod
    def satellite(cls, elements: ElementSet, std_mag: float = math.inf) -> CelestialBody:
        """Earth satellite with optional standard magnitude."""
        return cls(elements.name, BodyType.SATELLITE, SatelliteSource(elements), h_mag=std_mag)

    @property
    def planet_id(self) -> int | None:
        """Planet id if this body is a major planet, else None."""
        return self.source.planet_id if isinstance(self.source, PlanetSource) else None

    @property
    def moon_id(self) -> int | None:
        """Moon id if this body is a natural satellite, else None."""
        return self.source.moon_id if isinstance(self.source, MoonSource) else None

    @property
    def direction(self) -> np.ndarray:
        """Apparent unit direction from the observer (fundamental frame)."""
        return self.state.direction


def luna(orbit: Orbit, radius_km: float = 1737.4) -> CelestialBody:
    """Earth's Moon with its fixed photometric parameters."""
    return CelestialBody.moon('Moon', LUNA, orbit, h_mag=0.21, g_mag=0.25, radius_km=radius_km)
