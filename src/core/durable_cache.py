"""Durable cache tier scoped under a namespace prefix.

Entries are serialized as JSON envelopes

    {"value": <any JSON>, "created_at": <epoch s>, "expires_at": <epoch s>}

under the storage key "<prefix>-<key>". Reads check expiry lazily and treat
corrupt or foreign payloads as misses. Writes never raise: set() reports a
WriteResult instead. With no storage attached every operation is a no-op.
"""

from __future__ import annotations

import enum
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from core.errors import StorageError, ValidationError
from core.interfaces import KeyValueStorage

logger = logging.getLogger(__name__)


class WriteResult(enum.Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"  # no storage in this process
    FAILED = "failed"  # quota, serialization or OS error


@dataclass(frozen=True, slots=True)
class DurableEntry:
    value: Any
    created_at: float  # time.time()
    expires_at: float


def _decode(raw: str) -> Optional[DurableEntry]:
    # Returns None for anything that is not a well-formed envelope
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict) or "value" not in data:
        return None
    created_at = data.get("created_at")
    expires_at = data.get("expires_at")
    if not isinstance(created_at, (int, float)) or not isinstance(expires_at, (int, float)):
        return None
    return DurableEntry(value=data["value"], created_at=float(created_at), expires_at=float(expires_at))


class DurableCache:
    def __init__(
        self,
        storage: Optional[KeyValueStorage],
        *,
        prefix: str = "eco-tracker-cache",
        default_ttl_seconds: float = 300.0,
    ) -> None:
        if float(default_ttl_seconds) <= 0:
            raise ValidationError("default_ttl_seconds must be positive")
        self._storage = storage
        self._prefix = prefix
        self._default_ttl = float(default_ttl_seconds)

    @property
    def available(self) -> bool:
        return self._storage is not None

    @property
    def prefix(self) -> str:
        return self._prefix

    def storage_key(self, key: str) -> str:
        return f"{self._prefix}-{key}"

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> WriteResult:
        if self._storage is None:
            return WriteResult.SKIPPED

        ttl = self._default_ttl if ttl_seconds is None else float(ttl_seconds)
        if ttl <= 0:
            logger.warning("Refusing to cache %r with non-positive ttl %s", key, ttl)
            return WriteResult.FAILED

        now = time.time()
        try:
            payload = json.dumps({"value": value, "created_at": now, "expires_at": now + ttl})
        except (TypeError, ValueError) as e:
            logger.warning("Cannot serialize cache entry %r: %s", key, e)
            return WriteResult.FAILED

        try:
            self._storage.set_item(self.storage_key(key), payload)
        except StorageError as e:
            logger.warning("Failed to persist cache entry %r: %s", key, e)
            return WriteResult.FAILED

        return WriteResult.WRITTEN

    def get(self, key: str) -> Any:
        entry = self.get_entry(key)
        return None if entry is None else entry.value

    def get_entry(self, key: str) -> Optional[DurableEntry]:
        if self._storage is None:
            return None

        skey = self.storage_key(key)
        raw = self._read(skey)
        if raw is None:
            return None

        entry = _decode(raw)
        if entry is None:
            logger.warning("Dropping corrupt cache entry %r", key)
            self._remove(skey)
            return None

        if time.time() > entry.expires_at:
            self._remove(skey)
            return None

        return entry

    def delete(self, key: str) -> None:
        if self._storage is None:
            return
        self._remove(self.storage_key(key))

    def clear(self) -> int:
        """Remove every namespaced entry. Keys outside the namespace are left alone."""
        if self._storage is None:
            return 0
        removed = 0
        for skey in self._namespaced_keys():
            self._remove(skey)
            removed += 1
        return removed

    def cleanup(self) -> int:
        """Remove expired or unparseable namespaced entries. Returns the count removed."""
        if self._storage is None:
            return 0
        now = time.time()
        removed = 0
        for skey in self._namespaced_keys():
            raw = self._read(skey)
            if raw is None:
                continue
            entry = _decode(raw)
            if entry is None or now > entry.expires_at:
                self._remove(skey)
                removed += 1
        return removed

    def size_bytes(self) -> int:
        if self._storage is None:
            return 0
        total = 0
        for skey in self._namespaced_keys():
            raw = self._read(skey)
            if raw is not None:
                total += len(raw)
        return total

    def _namespaced_keys(self) -> list:
        marker = f"{self._prefix}-"
        try:
            keys = self._storage.keys()
        except StorageError as e:
            logger.warning("Failed to list cache entries: %s", e)
            return []
        return [k for k in keys if k.startswith(marker)]

    def _read(self, skey: str) -> Optional[str]:
        try:
            return self._storage.get_item(skey)
        except StorageError as e:
            logger.warning("Failed to read cache entry %r: %s", skey, e)
            return None

    def _remove(self, skey: str) -> None:
        try:
            self._storage.remove_item(skey)
        except StorageError as e:
            logger.warning("Failed to remove cache entry %r: %s", skey, e)
