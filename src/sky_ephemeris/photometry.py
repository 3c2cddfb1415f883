"""Phase angle, illumination, and visual magnitude models.

Major planet formulae are from Jean Meeus, "Astronomical Algorithms",
pp. 269-270; asteroid (H, G) and comet (H, K) models from pp. 216-217;
satellite standard magnitudes after the McCants convention (1000 km range,
50% illumination).

The model functions return math.inf for an undefined magnitude (missing H or
G, undefined geometry, or a logarithm of a non-positive value).
compute_magnitude converts that to None at the module boundary.
"""

from __future__ import annotations

import math

import numpy as np

from sky_ephemeris.bodies import BodyType, CelestialBody
from sky_ephemeris.constants import (
    EARTH,
    HALF_PI,
    JUPITER,
    KM_PER_AU,
    LUNA,
    MARS,
    MERCURY,
    NEPTUNE,
    PLUTO,
    RAD_PER_DEG,
    SATURN,
    SUN,
    URANUS,
    VENUS,
)
from sky_ephemeris.vectors import from_spherical

UNDEFINED = math.inf

# Saturn's north pole direction, J2000 equatorial unit vector
SATURN_POLE = from_spherical(40.589 * RAD_PER_DEG, 83.537 * RAD_PER_DEG)

DEFAULT_MOON_G = 0.15


def _log10(x: float) -> float:
    """log10 that yields -inf/NaN instead of raising for non-positive input."""
    with np.errstate(divide='ignore', invalid='ignore'):
        return float(np.log10(x))


def _defined(mag: float) -> float:
    return mag if math.isfinite(mag) else UNDEFINED


def phase_angle(position: np.ndarray, direction: np.ndarray) -> float:
    """Sun-body-observer phase angle in radians.

    Parameters:
        position: Body's heliocentric position (any units).
        direction: Apparent unit direction from observer to body.

    Returns:
        Phase angle; NaN if either vector is undefined or position is zero.
    """
    with np.errstate(invalid='ignore', divide='ignore'):
        cosine = np.dot(position, direction) / np.linalg.norm(position)
        return float(np.arccos(np.clip(cosine, -1.0, 1.0)))


def illumination(phase: float) -> float:
    """Illuminated fraction of the disk (1.0 full, 0.0 new) for a phase angle."""
    return (1.0 + math.cos(phase)) / 2.0


def asteroid_magnitude(rad: float, dist: float, phase: float, h: float, g: float) -> float:
    """Visual magnitude from the (H, G) phase function.

    Parameters:
        rad: Distance from Sun, AU.
        dist: Distance from observer, AU.
        phase: Phase angle, radians.
        h: Absolute magnitude (1 AU from Sun and observer, zero phase).
        g: Slope parameter.
    """
    with np.errstate(invalid='ignore', over='ignore'):
        tan_half = float(np.tan(phase / 2.0))
        phi1 = float(np.exp(-3.33 * np.power(tan_half, 0.63)))
        phi2 = float(np.exp(-1.87 * np.power(tan_half, 1.22)))
    phase_function = (1.0 - g) * phi1 + g * phi2
    if not phase_function > 0.0:
        return UNDEFINED
    return _defined(h + 5.0 * _log10(rad * dist) - 2.5 * _log10(phase_function))


def comet_magnitude(rad: float, dist: float, h: float, k: float) -> float:
    """Visual magnitude of a comet with absolute magnitude h and slope k."""
    return _defined(h + 5.0 * _log10(dist) + 2.5 * k * _log10(rad))


def satellite_magnitude(dist_km: float, phase: float, std_mag: float) -> float:
    """Visual magnitude of an Earth satellite.

    Parameters:
        dist_km: Range from observer, km.
        phase: Phase angle, radians; must be below pi.
        std_mag: Magnitude at 1000 km range and 50% illumination.
    """
    if not phase < math.pi:
        return UNDEFINED
    return _defined(std_mag - 15.75 + 2.5 * _log10(dist_km * dist_km / illumination(phase)))


def planet_magnitude(
    planet_id: int, rad: float, dist: float, phase: float, direction: np.ndarray
) -> float:
    """Visual magnitude of the Sun or a major planet.

    Parameters:
        planet_id: 0 (Sun) .. 9 (Pluto).
        rad: Distance from Sun, AU.
        dist: Distance from observer, AU.
        phase: Phase angle, radians.
        direction: Apparent unit direction (only used for Saturn's rings).
    """
    b = math.degrees(phase)
    b2, b3 = b * b, b * b * b
    if planet_id == SUN:
        return _defined(-26.72 + 5.0 * _log10(dist))
    r = 5.0 * _log10(rad * dist)
    if planet_id == MERCURY:
        mag = -0.42 + r + 0.0380 * b - 0.000273 * b2 + 0.000002 * b3
    elif planet_id == VENUS:
        mag = -4.40 + r + 0.0009 * b + 0.000239 * b2 - 0.00000065 * b3
    elif planet_id == EARTH:
        mag = -3.86 + r
    elif planet_id == MARS:
        mag = -1.52 + r + 0.016 * b
    elif planet_id == JUPITER:
        mag = -9.40 + r + 0.005 * b
    elif planet_id == SATURN:
        with np.errstate(invalid='ignore'):
            rinc = HALF_PI - float(np.arccos(np.clip(np.dot(direction, SATURN_POLE), -1.0, 1.0)))
        mag = -8.88 + r + 0.044 * b - 2.60 * abs(rinc) + 1.25 * rinc * rinc
    elif planet_id == URANUS:
        mag = -7.19 + r + 0.0028 * b
    elif planet_id == NEPTUNE:
        mag = -6.87 + r
    elif planet_id == PLUTO:
        mag = -1.01 + r + 0.041 * b
    else:
        mag = UNDEFINED
    return _defined(mag)


def compute_magnitude(body: CelestialBody, rad: float, dist: float, phase: float) -> float | None:
    """Visual magnitude of a body, or None if undefined.

    Parameters:
        body: Body whose state.direction is already computed (Saturn needs it).
        rad: Distance from Sun, AU.
        dist: Distance from observer, AU.
        phase: Phase angle, radians.
    """
    mag = UNDEFINED
    planet_id = body.planet_id
    if planet_id is not None:
        mag = planet_magnitude(planet_id, rad, dist, phase, body.state.direction)
    elif body.moon_id == LUNA:
        mag = asteroid_magnitude(rad, dist, phase, 0.21, 0.25)
    elif body.body_type == BodyType.MOON:
        g = DEFAULT_MOON_G if math.isinf(body.g_mag) else body.g_mag
        mag = asteroid_magnitude(rad, dist, phase, body.h_mag, g)
    elif body.body_type == BodyType.ASTEROID:
        mag = asteroid_magnitude(rad, dist, phase, body.h_mag, body.g_mag)
    elif body.body_type == BodyType.COMET:
        mag = comet_magnitude(rad, dist, body.h_mag, body.g_mag)
    elif body.body_type == BodyType.SATELLITE:
        mag = satellite_magnitude(dist * KM_PER_AU, phase, body.h_mag)
    return mag if math.isfinite(mag) else None
