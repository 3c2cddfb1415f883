"""Last-value memoization of per-body states keyed by epoch."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any


class EpochCache:
    """One slot per key holding the value computed at the most recent epoch.

    A lookup at the slot's epoch reuses the stored value; any other epoch
    recomputes and overwrites the slot. Not thread-safe.
    """

    def __init__(self) -> None:
        self._slots: dict[Hashable, tuple[float, Any]] = {}
        self.misses = 0

    def get(self, key: Hashable, jed: float, compute: Callable[[], Any]) -> Any:
        """Return the value for key at jed, calling compute() if the slot is stale.

        Parameters:
            key: Slot identifier (e.g. primary planet id).
            jed: Epoch the value is wanted for.
            compute: Zero-argument function producing the value at jed.
        """
        slot = self._slots.get(key)
        if slot is not None and slot[0] == jed:
            return slot[1]
        value = compute()
        self._slots[key] = (jed, value)
        self.misses += 1
        return value

    def epoch(self, key: Hashable) -> float | None:
        """Epoch of the value stored for key, or None if the slot is empty."""
        slot = self._slots.get(key)
        return None if slot is None else slot[0]

    def invalidate(self, key: Hashable | None = None) -> None:
        """Empty one slot, or every slot when key is None."""
        if key is None:
            self._slots.clear()
        else:
            self._slots.pop(key, None)

    def __len__(self) -> int:
        return len(self._slots)
