"""Cache port for short-lived, TTL-bounded values."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Key-value cache with per-entry TTL.

    Implementations must be safe for concurrent use and take their notion
    of time from an injectable clock.
    """

    def get(self, key: str) -> Any:
        """Return the cached value, or None when missing/expired."""
        ...

    def set(self, key: str, value: Any, *, ttl: float | None = None) -> None:
        """Store *value* for *ttl* seconds (default TTL when None)."""
        ...

    def delete(self, key: str) -> bool:
        """Delete key. True = deleted, False = did not exist."""
        ...

    def clear(self) -> None:
        """Drop all entries."""
        ...
