"""Keplerian orbital elements and two-body propagation.

Elements are referred to the ecliptic and equinox of J2000 (heliocentric for
planets, asteroids and comets; planetocentric for moons). Angles are radians,
distances AU, times Julian Ephemeris Dates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from sky_ephemeris.constants import (
    DAYS_PER_CENTURY,
    EARTH,
    J2000,
    JUPITER,
    KM_PER_AU,
    MARS,
    MERCURY,
    NEPTUNE,
    PLUTO,
    RAD_PER_ARCSEC,
    RAD_PER_DEG,
    SATURN,
    SUN,
    URANUS,
    VENUS,
)
from sky_ephemeris.vectors import undefined_vector

logger = logging.getLogger(__name__)

KEPLER_MAX_ITERATIONS = 50
KEPLER_TOLERANCE = 1.0e-14

# Mean elements and rates per Julian century, from E. M. Standish,
# "Keplerian Elements for Approximate Positions of the Major Planets",
# table 1 (1800 AD - 2050 AD). Columns: a (AU), e, I, L, long. peri., long. node
# (degrees); the Earth row is the Earth-Moon barycenter.
_PLANET_ELEMENTS: dict[int, tuple[tuple[float, float], ...]] = {
    MERCURY: (
        (0.38709927, 0.00000037),
        (0.20563593, 0.00001906),
        (7.00497902, -0.00594749),
        (252.25032350, 149472.67411175),
        (77.45779628, 0.16047689),
        (48.33076593, -0.12534081),
    ),
    VENUS: (
        (0.72333566, 0.00000390),
        (0.00677672, -0.00004107),
        (3.39467605, -0.00078890),
        (181.97909950, 58517.81538729),
        (131.60246718, 0.00268329),
        (76.67984255, -0.27769418),
    ),
    EARTH: (
        (1.00000261, 0.00000562),
        (0.01671123, -0.00004392),
        (-0.00001531, -0.01294668),
        (100.46457166, 35999.37244981),
        (102.93768193, 0.32327364),
        (0.0, 0.0),
    ),
    MARS: (
        (1.52371034, 0.00001847),
        (0.09339410, 0.00007882),
        (1.84969142, -0.00813131),
        (-4.55343205, 19140.30268499),
        (-23.94362959, 0.44441088),
        (49.55953891, -0.29257343),
    ),
    JUPITER: (
        (5.20288700, -0.00011607),
        (0.04838624, -0.00013253),
        (1.30439695, -0.00183714),
        (34.39644051, 3034.74612775),
        (14.72847983, 0.21252668),
        (100.47390909, 0.20469106),
    ),
    SATURN: (
        (9.53667594, -0.00125060),
        (0.05386179, -0.00050991),
        (2.48599187, 0.00193609),
        (49.95424423, 1222.49362201),
        (92.59887831, -0.41897216),
        (113.66242448, -0.28867794),
    ),
    URANUS: (
        (19.18916464, -0.00196176),
        (0.04725744, -0.00004397),
        (0.77263783, -0.00242939),
        (313.23810451, 428.48202785),
        (170.95427630, 0.40805281),
        (74.01692503, 0.04240589),
    ),
    NEPTUNE: (
        (30.06992276, 0.00026291),
        (0.00859048, 0.00005105),
        (1.77004347, 0.00035372),
        (-55.12002969, 218.45945325),
        (44.96476227, -0.32241464),
        (131.78422574, -0.00508664),
    ),
    PLUTO: (
        (39.48211675, -0.00031596),
        (0.24882730, 0.00005170),
        (17.14001206, 0.00004818),
        (238.92903833, 145.20780515),
        (224.06891629, -0.04062942),
        (110.30393684, -0.01183482),
    ),
}

# General precession in longitude, arcsec per Julian century
_GENERAL_PRECESSION = 5029.0966


@dataclass(frozen=True)
class Orbit:
    """Keplerian elements at epoch t.

    Any element left at infinity marks the orbit as undefined; propagating an
    undefined orbit yields infinite vectors instead of raising.
    """

    t: float = math.inf  # epoch, JED
    q: float = math.inf  # periapse distance, AU
    e: float = math.inf  # eccentricity
    i: float = math.inf  # inclination
    w: float = math.inf  # argument of periapse
    n: float = math.inf  # longitude of ascending node
    m: float = math.inf  # mean anomaly at epoch
    mm: float = math.inf  # mean motion, rad/day

    def is_defined(self) -> bool:
        """Return True if every element is finite."""
        return all(
            math.isfinite(v)
            for v in (self.t, self.q, self.e, self.i, self.w, self.n, self.m, self.mm)
        )

    def to_position_velocity(self, jed: float) -> tuple[np.ndarray, np.ndarray]:
        """Position (AU) and velocity (AU/day) at jed, in the elements' frame.

        Parameters:
            jed: Julian Ephemeris Date.

        Returns:
            (position, velocity); both undefined vectors if any element is missing.
        """
        if not self.is_defined() or not math.isfinite(jed):
            return undefined_vector(), undefined_vector()
        mean_anomaly = self.m + self.mm * (jed - self.t)
        if self.e < 1.0:
            x, y, vx, vy = _elliptic(self.q, self.e, self.mm, mean_anomaly)
        elif self.e == 1.0:
            x, y, vx, vy = _parabolic(self.q, self.mm, mean_anomaly)
        else:
            x, y, vx, vy = _hyperbolic(self.q, self.e, self.mm, mean_anomaly)
        p, q = self._orientation()
        return x * p + y * q, vx * p + vy * q

    def _orientation(self) -> tuple[np.ndarray, np.ndarray]:
        """Unit vectors toward periapse (P) and 90 degrees ahead of it (Q)."""
        cw, sw = math.cos(self.w), math.sin(self.w)
        cn, sn = math.cos(self.n), math.sin(self.n)
        ci, si = math.cos(self.i), math.sin(self.i)
        p = np.array([cw * cn - sw * sn * ci, cw * sn + sw * cn * ci, sw * si])
        q = np.array([-sw * cn - cw * sn * ci, -sw * sn + cw * cn * ci, cw * si])
        return p, q


def solve_kepler(mean_anomaly: float, e: float) -> float:
    """Eccentric anomaly for an elliptic orbit by Newton iteration."""
    m = math.remainder(mean_anomaly, 2.0 * math.pi)
    ecc_anomaly = m if e < 0.8 else math.copysign(math.pi, m)
    for _ in range(KEPLER_MAX_ITERATIONS):
        delta = (ecc_anomaly - e * math.sin(ecc_anomaly) - m) / (1.0 - e * math.cos(ecc_anomaly))
        ecc_anomaly -= delta
        if abs(delta) < KEPLER_TOLERANCE:
            break
    else:
        logger.debug('Kepler iteration did not converge (M=%r, e=%r)', mean_anomaly, e)
    return ecc_anomaly


def _elliptic(q: float, e: float, mm: float, mean_anomaly: float) -> tuple[float, ...]:
    a = q / (1.0 - e)
    ecc_anomaly = solve_kepler(mean_anomaly, e)
    cos_e, sin_e = math.cos(ecc_anomaly), math.sin(ecc_anomaly)
    root = math.sqrt(1.0 - e * e)
    rate = mm / (1.0 - e * cos_e)
    return (
        a * (cos_e - e),
        a * root * sin_e,
        -a * sin_e * rate,
        a * root * cos_e * rate,
    )


def _parabolic(q: float, mm: float, mean_anomaly: float) -> tuple[float, ...]:
    # Barker's equation s + s^3/3 = M with s = tan(v/2), closed-form root.
    w = 1.5 * mean_anomaly
    y = (w + math.sqrt(w * w + 1.0)) ** (1.0 / 3.0)
    s = y - 1.0 / y
    rate = mm / (1.0 + s * s)
    return (q * (1.0 - s * s), 2.0 * q * s, -2.0 * q * s * rate, 2.0 * q * rate)


def _hyperbolic(q: float, e: float, mm: float, mean_anomaly: float) -> tuple[float, ...]:
    a = q / (e - 1.0)
    m = mean_anomaly
    h = math.copysign(math.log(2.0 * abs(m) / e + 1.8), m)
    for _ in range(KEPLER_MAX_ITERATIONS):
        delta = (e * math.sinh(h) - h - m) / (e * math.cosh(h) - 1.0)
        h -= delta
        if abs(delta) < KEPLER_TOLERANCE:
            break
    else:
        logger.debug('Hyperbolic Kepler iteration did not converge (M=%r, e=%r)', m, e)
    root = math.sqrt(e * e - 1.0)
    rate = mm / (e * math.cosh(h) - 1.0)
    return (
        a * (e - math.cosh(h)),
        a * root * math.sinh(h),
        -a * math.sinh(h) * rate,
        a * root * math.cosh(h) * rate,
    )


def planet_orbit(planet_id: int, jed: float) -> Orbit:
    """Low-precision heliocentric mean elements of a major planet at jed.

    Parameters:
        planet_id: 1 (Mercury) .. 9 (Pluto); the Earth orbit is the Earth-Moon
            barycenter's.
        jed: Julian Ephemeris Date.

    Returns:
        Orbit with epoch jed; undefined Orbit for the Sun or unknown ids.
    """
    if planet_id == SUN or planet_id not in _PLANET_ELEMENTS:
        return Orbit()
    t = (jed - J2000) / DAYS_PER_CENTURY
    a, e, inc, mean_lon, peri_lon, node = (v + rate * t for v, rate in _PLANET_ELEMENTS[planet_id])
    mean_lon_rate = _PLANET_ELEMENTS[planet_id][3][1]
    return Orbit(
        t=jed,
        q=a * (1.0 - e),
        e=e,
        i=inc * RAD_PER_DEG,
        w=(peri_lon - node) * RAD_PER_DEG,
        n=node * RAD_PER_DEG,
        m=(mean_lon - peri_lon) * RAD_PER_DEG,
        mm=mean_lon_rate / DAYS_PER_CENTURY * RAD_PER_DEG,
    )


def moon_orbit(jed: float) -> Orbit:
    """Mean geocentric elements of Earth's Moon at jed (Meeus, ch. 47).

    Node and perigee longitudes are reduced from the equinox of date to J2000
    by removing general precession. Accuracy is of order a degree.
    """
    t = (jed - J2000) / DAYS_PER_CENTURY
    mean_lon = 218.3164477 + 481267.88123421 * t
    mean_anomaly = 134.9633964 + 477198.8675055 * t
    node = 125.0445479 - 1934.1362891 * t
    precession = _GENERAL_PRECESSION * t * RAD_PER_ARCSEC
    a = 384400.0 / KM_PER_AU
    e = 0.0549
    return Orbit(
        t=jed,
        q=a * (1.0 - e),
        e=e,
        i=5.145 * RAD_PER_DEG,
        w=(mean_lon - mean_anomaly - node) * RAD_PER_DEG,
        n=node * RAD_PER_DEG - precession,
        m=mean_anomaly * RAD_PER_DEG,
        mm=477198.8675055 / DAYS_PER_CENTURY * RAD_PER_DEG,
    )
