"""Shared state for the SPICE layer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SpiceState:
    """Which kernels are furnished in the cspyce kernel pool.

    Modified by load_ephemeris_kernels and clear_kernels; read by the
    interpolator to skip SPICE entirely when nothing is loaded.
    """

    pool_loaded: bool = False
    ephemeris_loaded: bool = False
    version: int = 0
    kernel_files: list[str] = field(default_factory=list)

    def reset(self) -> None:
        """Forget every loaded kernel."""
        self.pool_loaded = False
        self.ephemeris_loaded = False
        self.version = 0
        self.kernel_files = []


# Module-level singleton mirroring the process-wide cspyce kernel pool
_state = SpiceState()


def get_state() -> SpiceState:
    """Return the global SpiceState instance."""
    return _state
