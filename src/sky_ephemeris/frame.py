"""Observer frame: current time, observer state, and reference-frame transforms."""

from __future__ import annotations

import enum
import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from sky_ephemeris import time_utils
from sky_ephemeris.angle_utils import mod_2pi
from sky_ephemeris.constants import (
    DAYS_PER_CENTURY,
    EARTH,
    EARTH_FLATTENING,
    J2000,
    KM_PER_AU,
    KM_PER_EARTH_RADII,
    LIGHT_AU_PER_DAY,
    RAD_PER_ARCSEC,
    RAD_PER_DEG,
    SIDEREAL_PER_SOLAR,
    TWO_PI,
)
from sky_ephemeris.vectors import is_defined, normalize, rotation_x

if TYPE_CHECKING:
    from sky_ephemeris.ephemeris import Ephemeris

logger = logging.getLogger(__name__)

# Earth rotation rate in radians per day of civil time
EARTH_ROTATION_RAD_PER_DAY = TWO_PI * SIDEREAL_PER_SOLAR


class Frame(enum.Enum):
    """Reference frames understood by ObserverFrame.transform."""

    FUNDAMENTAL = 'fundamental'  # J2000 mean equator and equinox
    EQUATORIAL = 'equatorial'  # mean equator and equinox of date
    ECLIPTIC = 'ecliptic'  # mean ecliptic and equinox of date
    HORIZON = 'horizon'  # local horizon: x north, y east, z zenith


def geodetic_to_geocentric(lon: float, lat: float, height_km: float) -> np.ndarray:
    """Earth-fixed rectangular position (km) of a geodetic location on WGS 84."""
    f = EARTH_FLATTENING
    e2 = f * (2.0 - f)
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    n = KM_PER_EARTH_RADII / math.sqrt(1.0 - e2 * sin_lat * sin_lat)
    return np.array(
        [
            (n + height_km) * cos_lat * math.cos(lon),
            (n + height_km) * cos_lat * math.sin(lon),
            (n * (1.0 - e2) + height_km) * sin_lat,
        ]
    )


def mean_sidereal_time(jd: float, lon: float = 0.0) -> float:
    """Mean sidereal time in radians at civil Julian Date jd and east longitude lon.

    Greenwich mean sidereal time from Meeus, "Astronomical Algorithms", eq. 12.4.
    """
    t = (jd - J2000) / DAYS_PER_CENTURY
    gmst = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + 0.000387933 * t * t
        - t * t * t / 38710000.0
    )
    return mod_2pi(gmst * RAD_PER_DEG + lon)


class ObserverFrame:
    """Time, location, and orientation state for one observer on Earth.

    Holds the civil Julian Date (jd) and matching Julian Ephemeris Date (jed),
    the observer's heliocentric J2000 position and velocity (AU, AU/day), the
    precession matrix and obliquity of date, and the local sidereal time.
    One instance is shared by reference; changing its time invalidates every
    body's derived state until recomputed.

    Parameters:
        ephemeris: Engine used to obtain Earth's heliocentric state.
        lon: East longitude, radians.
        lat: Geodetic latitude, radians.
        height_m: Height above the WGS 84 ellipsoid, meters.
        zone: Local time zone, hours east of Greenwich.
        jd: Initial civil Julian Date.
    """

    def __init__(
        self,
        ephemeris: Ephemeris,
        lon: float = 0.0,
        lat: float = 0.0,
        height_m: float = 0.0,
        zone: float = 0.0,
        jd: float = J2000,
    ) -> None:
        self._ephemeris = ephemeris
        self.lon = lon
        self.lat = lat
        self.height_m = height_m
        self.zone = zone
        self.jd = jd
        self.jed = jd
        self.delta_t = 0.0
        self.lst = 0.0
        self.obliquity = 0.0
        self.obs_pos = np.zeros(3)
        self.obs_vel = np.zeros(3)
        self._matrices: dict[Frame, np.ndarray] = {}
        self.set_time(jd)

    @property
    def location(self) -> tuple[float, float]:
        """Observer (longitude, latitude) in radians."""
        return (self.lon, self.lat)

    @property
    def precession(self) -> np.ndarray:
        """Matrix from the fundamental frame to the mean equator of date."""
        return self._matrices[Frame.EQUATORIAL]

    def set_location(self, lon: float, lat: float, height_m: float = 0.0) -> None:
        """Move the observer and recompute the observer state at the current time."""
        self.lon = lon
        self.lat = lat
        self.height_m = height_m
        self.set_time(self.jd)

    def set_time(self, jd: float) -> None:
        """Set the civil Julian Date and rebuild every time-dependent quantity."""
        self.jd = jd
        self.jed = time_utils.jed_from_jd(jd)
        self.delta_t = self.jed - jd
        self.obliquity = self.obliquity_at(self.jed)
        precession = self.precession_matrix(self.jed)
        self.lst = self.sidereal_time(jd)
        gmst = self.lst - self.lon
        self._matrices = {
            Frame.FUNDAMENTAL: np.eye(3),
            Frame.EQUATORIAL: precession,
            Frame.ECLIPTIC: self.ecliptic_matrix(self.obliquity).T @ precession,
            Frame.HORIZON: self._horizon_matrix(self.lst, self.lat) @ precession,
        }

        earth_pos, earth_vel = self._ephemeris.planet_position_velocity(EARTH, self.jed, 0.0)
        site = geodetic_to_geocentric(self.lon, self.lat, self.height_m / 1000.0)
        cos_g, sin_g = math.cos(gmst), math.sin(gmst)
        site_date = np.array(
            [site[0] * cos_g - site[1] * sin_g, site[0] * sin_g + site[1] * cos_g, site[2]]
        ) / KM_PER_AU
        site_vel_date = EARTH_ROTATION_RAD_PER_DAY * np.array([-site_date[1], site_date[0], 0.0])
        self.obs_pos = earth_pos + precession.T @ site_date
        self.obs_vel = earth_vel + precession.T @ site_vel_date

    def sidereal_time(self, jd: float) -> float:
        """Local mean sidereal time in radians at civil Julian Date jd."""
        return mean_sidereal_time(jd, self.lon)

    def local_midnight(self, jd: float) -> float:
        """Civil Julian Date of local midnight starting the local day containing jd."""
        return time_utils.local_midnight(jd, self.zone)

    def transform(self, from_frame: Frame, to_frame: Frame, vec: np.ndarray) -> np.ndarray:
        """Rotate a vector between reference frames at the current time."""
        if from_frame == to_frame:
            return vec
        return self._matrices[to_frame] @ (self._matrices[from_frame].T @ vec)

    def horizon_coordinates(self, direction: np.ndarray) -> tuple[float, float]:
        """(azimuth, altitude) in radians of a fundamental-frame direction.

        Azimuth is measured from north through east; undefined directions
        give infinite values.
        """
        if not is_defined(direction):
            return (math.inf, math.inf)
        x, y, z = self.transform(Frame.FUNDAMENTAL, Frame.HORIZON, direction)
        return (mod_2pi(math.atan2(y, x)), math.atan2(z, math.hypot(x, y)))

    def add_aberration(self, direction: np.ndarray) -> np.ndarray:
        """Apparent direction from a geometric unit direction (stellar aberration)."""
        apparent, _ = normalize(direction + self.obs_vel / LIGHT_AU_PER_DAY)
        return apparent

    def subtract_aberration(self, direction: np.ndarray) -> np.ndarray:
        """Geometric direction from an apparent unit direction."""
        geometric, _ = normalize(direction - self.obs_vel / LIGHT_AU_PER_DAY)
        return geometric

    @staticmethod
    def obliquity_at(jed: float) -> float:
        """Mean obliquity of the ecliptic in radians (IAU 1976)."""
        t = (jed - J2000) / DAYS_PER_CENTURY
        arcsec = 84381.448 - 46.8150 * t - 0.00059 * t * t + 0.001813 * t * t * t
        return arcsec * RAD_PER_ARCSEC

    @staticmethod
    def ecliptic_matrix(obliquity: float) -> np.ndarray:
        """Matrix from ecliptic to equatorial coordinates for an obliquity."""
        return rotation_x(-obliquity)

    @staticmethod
    def precession_matrix(jed: float) -> np.ndarray:
        """IAU 1976 precession matrix from J2000 to the mean equator of jed (Lieske)."""
        t = (jed - J2000) / DAYS_PER_CENTURY
        zeta = (2306.2181 * t + 0.30188 * t * t + 0.017998 * t * t * t) * RAD_PER_ARCSEC
        z = (2306.2181 * t + 1.09468 * t * t + 0.018203 * t * t * t) * RAD_PER_ARCSEC
        theta = (2004.3109 * t - 0.42665 * t * t - 0.041833 * t * t * t) * RAD_PER_ARCSEC
        cx, sx = math.cos(zeta), math.sin(zeta)
        cz, sz = math.cos(z), math.sin(z)
        ct, st = math.cos(theta), math.sin(theta)
        return np.array(
            [
                [cx * ct * cz - sx * sz, -sx * ct * cz - cx * sz, -st * cz],
                [cx * ct * sz + sx * cz, -sx * ct * sz + cx * cz, -st * sz],
                [cx * st, -sx * st, ct],
            ]
        )

    @staticmethod
    def _horizon_matrix(lst: float, lat: float) -> np.ndarray:
        """Matrix from equatorial of date to horizon (north, east, zenith)."""
        cl, sl = math.cos(lst), math.sin(lst)
        cp, sp = math.cos(lat), math.sin(lat)
        return np.array(
            [
                [-sp * cl, -sp * sl, cp],
                [-sl, cl, 0.0],
                [cp * cl, cp * sl, sp],
            ]
        )
