"""In-process TTL cache shared across concurrent resolutions."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any


class _CacheEntry:
    __slots__ = ("value", "expires_at")

    def __init__(self, value: Any, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at


class TtlCache:
    """Thread-safe dict cache with per-entry expiry and a size cap.

    When full, the oldest inserted entry is evicted first.

    Args:
        ttl_seconds: Default lifetime for entries set without ``ttl``.
        max_size: Maximum number of live entries.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 300.0,
        max_size: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be > 0")
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, *, ttl: float | None = None) -> None:
        lifetime = self._ttl if ttl is None else ttl
        if lifetime <= 0:
            return
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = _CacheEntry(value, self._clock() + lifetime)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def evict_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
