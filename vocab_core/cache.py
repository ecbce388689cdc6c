"""
Time-bounded cache with an injectable clock.

Holds per-collection statistics between planner calls. The clock is a
callable returning seconds, so expiry can be driven from tests.
"""

from __future__ import annotations

from collections import OrderedDict
import time
from typing import Callable, Generic, Hashable, Optional, TypeVar


V = TypeVar("V")

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_SIZE = 50


class TTLCache(Generic[V]):
    """
    Insertion-ordered cache whose entries expire after `ttl_seconds`.

    When more than `max_size` entries are stored, the oldest is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, V]] = OrderedDict()

    def get(self, key: Hashable) -> Optional[V]:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return value

    def put(self, key: Hashable, value: V) -> None:
        """Store a value, evicting the oldest entry when over capacity."""
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    def evict(self, key: Optional[Hashable] = None) -> None:
        """Drop one entry, or every entry when `key` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
