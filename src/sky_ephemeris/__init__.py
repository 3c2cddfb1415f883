"""Ephemeris and event engine for solar-system bodies.

This package computes positions, apparent directions, distances, and visual
magnitudes of planets, moons, asteroids, comets, and Earth satellites, and
searches for the times at which they rise, transit, and set:
- Ephemeris engine: light-time and aberration corrected state of any body
- Event engine: rise/transit/set circumstances and satellite pass scanning

High-precision positions come from SPICE kernels via cspyce when loaded, with
Keplerian mean elements as a fallback; time scales use rms-julian.
"""

__all__: list[str] = []
