"""Angle reduction, sexagesimal parsing and formatting."""

from __future__ import annotations

import math
import re

from sky_ephemeris.constants import TWO_PI


def mod_2pi(angle: float) -> float:
    """Reduce an angle in radians to the range [0, 2*pi)."""
    result = angle - TWO_PI * math.floor(angle / TWO_PI)
    return 0.0 if result >= TWO_PI else result


def mod_pi(angle: float) -> float:
    """Reduce an angle in radians to the range (-pi, pi]."""
    result = mod_2pi(angle)
    if result > math.pi:
        result -= TWO_PI
    return result


def parse_angle(string: str) -> float | None:
    """Parse an angle given as degrees (or hours), minutes, and seconds.

    Accepts one to three whitespace- or colon-separated numbers. Minutes and
    seconds must be non-negative; a leading minus sign negates the whole
    angle (so "-0 30" is half a unit below zero).

    Parameters:
        string: Text such as "40 26 46", "-73:59:24.5", or "12.5".

    Returns:
        Angle in the units of the first field, or None on parse failure.
    """
    s = string.strip()
    if not s:
        return None
    parts = [p for p in re.split(r'[\s:]+', s) if p]
    if not 1 <= len(parts) <= 3:
        return None
    try:
        values = [float(p) for p in parts]
    except ValueError:
        return None
    if any(v < 0 for v in values[1:]):
        return None
    angle = abs(values[0])
    for i, v in enumerate(values[1:], start=1):
        angle += v / 60.0**i
    return -angle if s.startswith('-') else angle


def dms_string(value: float, separators: str = 'dms', ndecimal: int = 1) -> str:
    """Format an angle as degrees (or hours), minutes, and seconds.

    Parameters:
        value: Angle in degrees or hours.
        separators: Three characters placed after each field (e.g. 'hms').
        ndecimal: Decimal places for seconds.

    Returns:
        Formatted string, e.g. "+40d 26m 46.0s". Non-finite values give "---".
    """
    if not math.isfinite(value):
        return '---'
    sign = '-' if value < 0 else '+'
    scale = 10**ndecimal
    total = round(abs(value) * 3600.0 * scale)
    whole_sec, frac = divmod(total, scale)
    minutes, sec = divmod(whole_sec, 60)
    degrees, minutes = divmod(minutes, 60)
    s1, s2, s3 = (separators + '   ')[:3]
    sec_str = f'{sec:02d}' if ndecimal == 0 else f'{sec:02d}.{frac:0{ndecimal}d}'
    return f'{sign}{degrees:d}{s1} {minutes:02d}{s2} {sec_str}{s3}'.rstrip()
