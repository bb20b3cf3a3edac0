"""Key-value persistence primitives for the durable cache.

Two backends implement core.interfaces.KeyValueStorage:
- MemoryStorage keeps items in a dict (non-persistent; handy in tests).
- JsonFileStorage keeps one JSON object on disk and survives restarts.

Both enforce an optional byte quota and raise StorageQuotaError instead of
writing past it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from core.errors import StorageError, StorageQuotaError
from core.interfaces import KeyValueStorage

logger = logging.getLogger(__name__)


def _payload_size(items: Dict[str, str]) -> int:
    return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in items.items())


class MemoryStorage:
    def __init__(self, *, max_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self._max_bytes = max_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        candidate = {**self._items, key: value}
        if self._max_bytes is not None and _payload_size(candidate) > self._max_bytes:
            raise StorageQuotaError(f"Storage quota of {self._max_bytes} bytes exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class JsonFileStorage:
    """File-backed storage holding a single JSON object of string values.

    The file is read lazily on first access. Every mutation rewrites it
    atomically (temp file + os.replace) so a crash never leaves a torn file.
    A missing file reads as empty; an unreadable one is logged and treated
    as empty too.
    """

    def __init__(self, path: Path, *, max_bytes: Optional[int] = None) -> None:
        self._path = Path(path)
        self._max_bytes = max_bytes
        self._items: Optional[Dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        candidate = {**self._load(), key: value}
        if self._max_bytes is not None and _payload_size(candidate) > self._max_bytes:
            raise StorageQuotaError(f"Storage quota of {self._max_bytes} bytes exceeded")
        self._flush(candidate)
        self._items = candidate

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key not in items:
            return
        remaining = {k: v for k, v in items.items() if k != key}
        self._flush(remaining)
        self._items = remaining

    def keys(self) -> List[str]:
        return list(self._load())

    def _load(self) -> Dict[str, str]:
        if self._items is not None:
            return self._items

        items: Dict[str, str] = {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raw = ""
        except OSError as e:
            logger.warning("Cannot read cache file %s: %s", self._path, e)
            raw = ""

        if raw.strip():
            try:
                data = json.loads(raw)
            except ValueError as e:
                logger.warning("Ignoring corrupt cache file %s: %s", self._path, e)
                data = {}
            if isinstance(data, dict):
                items = {str(k): v for k, v in data.items() if isinstance(v, str)}

        self._items = items
        return items

    def _flush(self, items: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(items, fh)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e


def open_storage(path: Optional[str], *, max_bytes: Optional[int] = None) -> Optional[KeyValueStorage]:
    # Blank path means persistence is unavailable in this process
    raw = (path or "").strip()
    if not raw:
        return None
    return JsonFileStorage(Path(raw).expanduser(), max_bytes=max_bytes)
