"""Per-identity placement cooldown."""
from __future__ import annotations

import threading
from typing import Hashable

from place_core.errors import RateLimited
from place_core.protocol import DEFAULT_COOLDOWN_SECS


class RateLimiter:
    """Maps identity keys to the epoch time of their last accepted placement.

    Entries live for the process lifetime; a restart resets every cooldown.
    """

    def __init__(self, cooldown: float = DEFAULT_COOLDOWN_SECS):
        self.cooldown = cooldown
        self._last: dict[Hashable, float] = {}
        self._lock = threading.Lock()

    def check_and_record(self, key: Hashable, now: float) -> None:
        """Record ``now`` for ``key`` or raise RateLimited with the remaining wait."""
        with self._lock:
            last = self._last.get(key)
            if last is not None and last + self.cooldown > now:
                raise RateLimited(int(last + self.cooldown - now))
            self._last[key] = now

    def last_placement(self, key: Hashable) -> float | None:
        with self._lock:
            return self._last.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)
