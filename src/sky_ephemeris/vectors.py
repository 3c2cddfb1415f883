"""Small numpy helpers for 3-vectors and rotation matrices."""

from __future__ import annotations

import math

import numpy as np

from sky_ephemeris.angle_utils import mod_2pi


def undefined_vector() -> np.ndarray:
    """Return a vector whose components are all infinite (undefined marker)."""
    return np.full(3, np.inf)


def is_defined(vec: np.ndarray) -> bool:
    """Return True if every component of vec is finite."""
    return bool(np.all(np.isfinite(vec)))


def normalize(vec: np.ndarray) -> tuple[np.ndarray, float]:
    """Return (unit vector, magnitude) of vec.

    Undefined or zero-length input yields an undefined unit vector; the
    magnitude is returned as computed.
    """
    mag = float(np.linalg.norm(vec))
    if mag == 0.0 or not math.isfinite(mag):
        return undefined_vector(), mag
    return vec / mag, mag


def from_spherical(lon: float, lat: float, rad: float = 1.0) -> np.ndarray:
    """Rectangular vector from longitude, latitude (radians) and radius."""
    clat = math.cos(lat)
    return np.array(
        [rad * clat * math.cos(lon), rad * clat * math.sin(lon), rad * math.sin(lat)],
        dtype=np.float64,
    )


def to_spherical(vec: np.ndarray) -> tuple[float, float, float]:
    """Longitude in [0, 2*pi), latitude, and radius of a rectangular vector.

    Undefined input yields infinite longitude, latitude, and radius.
    """
    if not is_defined(vec):
        return (math.inf, math.inf, math.inf)
    x, y, z = (float(c) for c in vec)
    rad = math.sqrt(x * x + y * y + z * z)
    if rad == 0.0:
        return (0.0, 0.0, 0.0)
    lon = mod_2pi(math.atan2(y, x))
    lat = math.asin(max(-1.0, min(1.0, z / rad)))
    return (lon, lat, rad)


def angular_separation(a: np.ndarray, b: np.ndarray) -> float:
    """Angle in radians between two vectors (NaN if either is undefined)."""
    ua, _ = normalize(a)
    ub, _ = normalize(b)
    with np.errstate(invalid='ignore'):
        return float(np.arccos(np.clip(np.dot(ua, ub), -1.0, 1.0)))


def rotation_x(angle: float) -> np.ndarray:
    """Matrix rotating coordinates (not the vector) by angle about the x axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]])


def rotation_z(angle: float) -> np.ndarray:
    """Matrix rotating coordinates (not the vector) by angle about the z axis."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]])
