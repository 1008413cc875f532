"""
TTL Cache.

Small in-memory cache with explicit timestamps. Callers pass `now` so the
clock stays injectable; an entry is served only while now < expiry.
Expired entries are dropped when read and swept on every write.
"""

from __future__ import annotations

from typing import Final, Generic, TypeVar

V = TypeVar("V")

DEFAULT_TTL_SECONDS: Final[float] = 300.0


class TTLCache(Generic[V]):
    """Key -> (value, expiry) map with lazy expiry."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, tuple[V, float]] = {}

    def get(self, key: str, now: float) -> V | None:
        """Return the cached value, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if now >= expiry:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: V, now: float) -> None:
        """Store a value that expires ttl_seconds after now."""
        self.prune(now)
        self._entries[key] = (value, now + self.ttl_seconds)

    def prune(self, now: float) -> int:
        """Drop every expired entry; returns how many were removed."""
        expired = [key for key, (_, expiry) in self._entries.items() if now >= expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
