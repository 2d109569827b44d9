"""Injectable in-memory cache with TTL eviction."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class TTLCache:
    """Time-bounded cache keyed by request identity.

    Entries older than ``ttl_seconds`` are treated as absent and dropped on
    access. When ``max_entries`` is exceeded the oldest entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 512,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._max_entries = max(1, int(max_entries))
        self._clock = clock or time.monotonic
        self._entries: OrderedDict[Hashable, CacheEntry] = OrderedDict()
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: Hashable, default: Any = None) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if now - entry.stored_at >= self._ttl:
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            self._entries[key] = CacheEntry(value=value, stored_at=now)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def evict_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now - entry.stored_at >= self._ttl]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
