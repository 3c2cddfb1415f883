"""Fixed constants: body ids, planet names, physical and time constants."""

import math

# Major planet ids (index into the primary-body cache)
SUN = 0
MERCURY = 1
VENUS = 2
EARTH = 3
MARS = 4
JUPITER = 5
SATURN = 6
URANUS = 7
NEPTUNE = 8
PLUTO = 9

# Moon ids are 100 * primary + n
LUNA = 301

NUM_PLANETS = 10

PLANET_NAMES = (
    'Sun',
    'Mercury',
    'Venus',
    'Earth',
    'Mars',
    'Jupiter',
    'Saturn',
    'Uranus',
    'Neptune',
    'Pluto',
)

# NAIF body codes used for each planet id in the binary ephemeris.
# Outer planets use system barycenters, which DE kernels always carry.
PLANET_NAIF_IDS = (10, 199, 299, 399, 4, 5, 6, 7, 8, 9)
NAIF_SUN = 10
NAIF_MOON = 301

# Index of Earth's Moon in the binary ephemeris body list
EPHEMERIS_MOON_INDEX = 10

# Time
J2000 = 2451545.0  # JD of 2000-01-01 12:00 TT
J2000_MIDNIGHT = 2451544.5  # JD of 2000-01-01 00:00, day zero of rms-julian
SECONDS_PER_DAY = 86400.0
MINUTES_PER_DAY = 1440.0
DAYS_PER_CENTURY = 36525.0
SIDEREAL_PER_SOLAR = 1.00273790935

# Distance and light
KM_PER_AU = 149597870.7
KM_PER_EARTH_RADII = 6378.137
EARTH_FLATTENING = 1.0 / 298.257223563  # WGS 84
LIGHT_KM_PER_SEC = 299792.458
LIGHT_AU_PER_DAY = LIGHT_KM_PER_SEC * SECONDS_PER_DAY / KM_PER_AU
ARCSEC_PER_RAD = 180.0 * 3600.0 / math.pi
AU_PER_PARSEC = ARCSEC_PER_RAD
AU_PER_LIGHT_YEAR = LIGHT_AU_PER_DAY * 365.25

# Gaussian gravitational constant (rad/day for 1 AU orbit of massless body)
GAUSS_K = 0.01720209895

# Angle
TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi
RAD_PER_DEG = math.pi / 180.0
RAD_PER_ARCSEC = RAD_PER_DEG / 3600.0

# Obliquity of the ecliptic at J2000 (IAU 1976), radians
J2000_OBLIQUITY = 23.4392911 * RAD_PER_DEG


def planet_id_from_name(name: str) -> int | None:
    """Return planet id (0=Sun .. 9=Pluto) for a name or number string.

    Parameters:
        name: Planet name (case-insensitive) or integer string.

    Returns:
        Planet id or None if not recognized.
    """
    token = name.strip()
    if token.isdigit():
        pid = int(token)
        return pid if 0 <= pid < NUM_PLANETS else None
    for i, pname in enumerate(PLANET_NAMES):
        if pname.lower() == token.lower():
            return i
    return None
