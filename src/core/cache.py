"""Bounded in-memory TTL cache.

Store values with a monotonic expiration timestamp, check expiry lazily on
every read, and evict the oldest entry (by creation time) when an insert
would exceed max_size. A periodic sweep may also drop expired entries, but
reads never depend on it.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar

from core.errors import ValidationError

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    # Stores value + monotonic creation/expiration times
    value: T
    created_at: float  # time.monotonic()
    expires_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    total_entries: int
    valid_entries: int
    expired_entries: int
    max_size: int
    ttl: float

    def to_dict(self) -> dict:
        return {
            "total_entries": self.total_entries,
            "valid_entries": self.valid_entries,
            "expired_entries": self.expired_entries,
            "max_size": self.max_size,
            "ttl": self.ttl,
        }


def _check_ttl(ttl_seconds: float) -> float:
    ttl = float(ttl_seconds)
    if ttl <= 0:
        raise ValidationError("ttl_seconds must be positive")
    return ttl


class MemoryCache(Generic[T]):
    """Process-local key -> value cache bounded in size and time.

    Key behavior:
      - get/has treat an entry as live while now <= expires_at and delete it
        lazily otherwise.
      - Inserting a new key into a full cache first evicts the entry with the
        smallest created_at. Overwriting an existing key never evicts.
      - stats() reports the default TTL; per-entry TTLs are not reflected.
    """

    def __init__(self, *, ttl_seconds: float, max_size: int, name: str = "cache") -> None:
        if int(max_size) < 1:
            raise ValidationError("max_size must be at least 1")
        self._ttl = _check_ttl(ttl_seconds)
        self._max_size = int(max_size)
        self.name = name
        self._store: Dict[str, CacheEntry[T]] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def max_size(self) -> int:
        return self._max_size

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._ttl if ttl_seconds is None else _check_ttl(ttl_seconds)
        now = time.monotonic()

        if key in self._store:
            # Re-insert so dict order keeps matching creation order
            del self._store[key]
        elif len(self._store) >= self._max_size:
            self._evict_oldest()

        self._store[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl)

    def get(self, key: str) -> Optional[T]:
        entry = self._live_entry(key)
        return None if entry is None else entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def size(self) -> int:
        return len(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> CacheStats:
        now = time.monotonic()
        expired = sum(1 for entry in self._store.values() if now > entry.expires_at)
        return CacheStats(
            total_entries=len(self._store),
            valid_entries=len(self._store) - expired,
            expired_entries=expired,
            max_size=self._max_size,
            ttl=self._ttl,
        )

    def sweep(self) -> int:
        """Drop every entry whose expiration time has passed. Returns the count removed."""
        now = time.monotonic()
        stale = [key for key, entry in self._store.items() if entry.expires_at < now]
        for key in stale:
            del self._store[key]
        return len(stale)

    def _live_entry(self, key: str) -> Optional[CacheEntry[T]]:
        entry = self._store.get(key)
        if entry is None:
            return None

        if time.monotonic() > entry.expires_at:
            self._store.pop(key, None)
            return None

        return entry

    def _evict_oldest(self) -> None:
        if not self._store:
            return
        # min() keeps the first key found on equal created_at
        oldest = min(self._store, key=lambda k: self._store[k].created_at)
        del self._store[oldest]
