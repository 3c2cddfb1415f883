"""Civil and dynamical time conversions around rms-julian."""

from __future__ import annotations

import logging
import math
import re

import julian

from sky_ephemeris.config import get_leapsecs_path
from sky_ephemeris.constants import J2000, J2000_MIDNIGHT, SECONDS_PER_DAY

logger = logging.getLogger(__name__)

# Leap seconds loaded once at first use.
_leapsecs_loaded = False


def _ensure_leapsecs() -> None:
    """Load the leap seconds kernel if not already loaded.

    rms-julian requires a NAIF LSK (e.g. naif0012.tls). If the configured file
    is missing or not in LSK format, falls back to rms-julian's bundled LSK.
    """
    global _leapsecs_loaded
    if _leapsecs_loaded:
        return
    julian.set_ut_model('SPICE')
    path = get_leapsecs_path()
    try:
        julian.load_lsk(path)
    except (OSError, KeyError, ValueError) as e:
        logger.info('Leap seconds from %s not used (%s); using rms-julian bundled LSK.', path, e)
        julian.load_lsk()
    _leapsecs_loaded = True


def day_sec_from_jd(jd: float) -> tuple[int, float]:
    """Split a civil Julian Date into (days since 2000-01-01, seconds of day)."""
    offset = jd - J2000_MIDNIGHT
    day = math.floor(offset)
    return (int(day), (offset - day) * SECONDS_PER_DAY)


def jd_from_day_sec(day: int, sec: float) -> float:
    """Civil Julian Date from (days since 2000-01-01, seconds of day)."""
    return J2000_MIDNIGHT + day + sec / SECONDS_PER_DAY


def jed_from_jd(jd: float) -> float:
    """Convert a civil (UTC) Julian Date to a Julian Ephemeris Date (TDB).

    Parameters:
        jd: Julian Date in UTC.

    Returns:
        Julian Ephemeris Date.
    """
    _ensure_leapsecs()
    day, sec = day_sec_from_jd(jd)
    tai = float(julian.tai_from_day_sec(day, sec))
    tdb = float(julian.tdb_from_tai(tai))
    return J2000 + tdb / SECONDS_PER_DAY


def jd_from_jed(jed: float) -> float:
    """Convert a Julian Ephemeris Date (TDB) to a civil (UTC) Julian Date."""
    _ensure_leapsecs()
    tai = float(julian.tai_from_tdb((jed - J2000) * SECONDS_PER_DAY))
    day, sec = julian.day_sec_from_tai(tai)
    return jd_from_day_sec(int(day), float(sec))


def delta_t(jd: float) -> float:
    """Return dynamical minus civil time, in days, at civil Julian Date jd."""
    return jed_from_jd(jd) - jd


def parse_datetime(string: str) -> float | None:
    """Parse a date/time string to a civil Julian Date.

    Accepts any format rms-julian understands, plus a trailing 'Z' and a bare
    Julian Date written as "JD 2451545.0".

    Parameters:
        string: Date/time string.

    Returns:
        Julian Date (UTC), or None on parse failure.
    """
    _ensure_leapsecs()
    stripped = string.strip()
    jd_match = re.fullmatch(r'(?i)jd\s*([0-9]+(?:\.[0-9]*)?)', stripped)
    if jd_match is not None:
        return float(jd_match.group(1))
    candidates = [stripped]
    if stripped.endswith(('Z', 'z')):
        candidates.append(stripped[:-1])
    for candidate in candidates:
        try:
            day, sec = julian.day_sec_from_string(candidate)[:2]
        except (ValueError, TypeError, LookupError, OSError):
            continue
        return jd_from_day_sec(int(day), float(sec))
    return None


def format_jd(jd: float) -> str:
    """Format a civil Julian Date as an ISO-like UTC string (or '---' if infinite)."""
    if not math.isfinite(jd):
        return '---'
    _ensure_leapsecs()
    day, sec = day_sec_from_jd(jd)
    tai = julian.tai_from_day_sec(day, round(sec))
    return str(julian.format_tai(tai))


def local_midnight(jd: float, zone: float) -> float:
    """Julian Date of the local midnight that starts the day containing jd.

    Parameters:
        jd: Civil Julian Date.
        zone: Local time zone in hours east of Greenwich.

    Returns:
        Julian Date of local 00:00 on the same local calendar day.
    """
    offset = zone / 24.0
    return math.floor(jd + 0.5 + offset) - 0.5 - offset
