"""Binary planetary ephemeris lookups through SPICE SPK kernels."""

from __future__ import annotations

import logging
import math

import cspyce
import numpy as np

from sky_ephemeris.constants import (
    EPHEMERIS_MOON_INDEX,
    J2000,
    KM_PER_AU,
    NAIF_MOON,
    NAIF_SUN,
    PLANET_NAIF_IDS,
    SECONDS_PER_DAY,
)
from sky_ephemeris.spice.common import get_state

logger = logging.getLogger(__name__)

_KM_PER_SEC_TO_AU_PER_DAY = SECONDS_PER_DAY / KM_PER_AU


def naif_id(body_id: int) -> int | None:
    """NAIF code for a planet id 0..9 or Earth's Moon index 10; None otherwise."""
    if 0 <= body_id < len(PLANET_NAIF_IDS):
        return PLANET_NAIF_IDS[body_id]
    if body_id == EPHEMERIS_MOON_INDEX:
        return NAIF_MOON
    return None


class SpkEphemeris:
    """Heliocentric J2000 states of the Sun, planets, and Earth's Moon from SPK kernels.

    Lookups fail (rather than raise) when no kernels are loaded, the body is
    not covered, or the time is outside the tabulated range; callers then fall
    back to lower-precision models.
    """

    def is_available(self) -> bool:
        """Return True if planetary kernels have been loaded."""
        return get_state().ephemeris_loaded

    def compute(
        self, body_id: int, jed: float
    ) -> tuple[bool, np.ndarray | None, np.ndarray | None]:
        """Return (ok, position AU, velocity AU/day) of body at jed.

        Parameters:
            body_id: 0 (Sun) .. 9 (Pluto), or 10 for Earth's Moon.
            jed: Julian Ephemeris Date (TDB).
        """
        target = naif_id(body_id)
        if target is None or not self.is_available() or not math.isfinite(jed):
            return (False, None, None)
        if target == NAIF_SUN:
            return (True, np.zeros(3), np.zeros(3))
        et = (jed - J2000) * SECONDS_PER_DAY
        try:
            state, _ = cspyce.spkez(target, et, 'J2000', 'NONE', NAIF_SUN)
        except Exception as e:
            logger.debug('SPK lookup failed for body %d at JED %.5f: %s', target, jed, e)
            return (False, None, None)
        pv = np.array(state, dtype=np.float64)
        return (True, pv[:3] / KM_PER_AU, pv[3:6] * _KM_PER_SEC_TO_AU_PER_DAY)
