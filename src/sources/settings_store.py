"""Two-tier cached access to per-user settings.

Reads go memory cache -> durable cache -> backend, promoting whatever tier
answered into the faster ones. Saves are optimistic: both tiers are updated
before the backend call and rewritten with the backend's copy afterwards.
If the backend rejects the save, the user's entries are dropped from both
tiers and reloaded from the backend.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from core.cache import MemoryCache
from core.durable_cache import DurableCache
from core.errors import EcoTrackerError, ValidationError
from core.interfaces import SettingsBackend
from core.keys import generate_key
from core.models import UserSettings, default_settings

logger = logging.getLogger(__name__)

SETTINGS_DURABLE_TTL = 30 * 60.0

LOAD_ERROR = "Failed to load settings"
SAVE_ERROR = "Failed to save settings"


def settings_key(user_id: str) -> str:
    return generate_key("user-settings", {"userId": user_id})


@dataclass(frozen=True)
class SettingsResult:
    settings: UserSettings
    error: Optional[str] = None
    source: str = "default"  # default | memory | durable | backend

    def to_dict(self) -> dict:
        return {"settings": self.settings.to_dict(), "error": self.error, "source": self.source}


class SettingsStore:
    def __init__(
        self,
        *,
        backend: SettingsBackend,
        memory_cache: MemoryCache,
        durable_cache: DurableCache,
        durable_ttl_seconds: float = SETTINGS_DURABLE_TTL,
    ) -> None:
        self._backend = backend
        self._memory = memory_cache
        self._durable = durable_cache
        self._durable_ttl = float(durable_ttl_seconds)

    async def load(self, user_id: Optional[str]) -> SettingsResult:
        if not user_id:
            return SettingsResult(settings=default_settings())

        key = settings_key(user_id)

        cached = self._memory.get(key)
        if cached is not None:
            return SettingsResult(settings=cached, source="memory")

        durable = self._read_durable(key)
        if durable is not None:
            self._memory.set(key, durable)
            return SettingsResult(settings=durable, source="durable")

        try:
            settings = await self._backend.fetch(user_id=user_id)
        except EcoTrackerError as e:
            logger.error("Error loading settings for %s: %s", user_id, e)
            return SettingsResult(settings=default_settings(), error=LOAD_ERROR)

        self._remember(key, settings)
        return SettingsResult(settings=settings, source="backend")

    async def refresh(self, user_id: Optional[str]) -> SettingsResult:
        if user_id:
            self.clear(user_id)
        return await self.load(user_id)

    async def save(self, user_id: Optional[str], changes: Mapping[str, Any]) -> bool:
        if not user_id:
            return False

        current = (await self.load(user_id)).settings
        updated = current.merged(changes)

        key = settings_key(user_id)
        self._remember(key, updated)

        try:
            stored = await self._backend.store(user_id=user_id, settings=updated)
        except EcoTrackerError as e:
            logger.error("Error saving settings for %s: %s", user_id, e)
            # Roll back the optimistic write before re-reading the server copy
            await self.refresh(user_id)
            return False

        self._remember(key, stored)
        return True

    async def update_threshold(self, user_id: Optional[str], parameter: str, value: float) -> bool:
        name = (parameter or "").strip()
        if not name:
            raise ValidationError("Missing threshold parameter")

        current = (await self.load(user_id)).settings
        thresholds = {**current.thresholds, name: float(value)}
        return await self.save(user_id, {"thresholds": thresholds})

    def clear(self, user_id: str) -> None:
        key = settings_key(user_id)
        self._memory.delete(key)
        self._durable.delete(key)

    def _remember(self, key: str, settings: UserSettings) -> None:
        self._memory.set(key, settings)
        self._durable.set(key, settings.to_dict(), self._durable_ttl)

    def _read_durable(self, key: str) -> Optional[UserSettings]:
        raw = self._durable.get(key)
        if raw is None:
            return None
        try:
            return UserSettings.from_dict(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable settings entry %r: %r", key, e)
            self._durable.delete(key)
            return None


class InMemorySettingsBackend:
    """Process-local settings backend used when no remote API is configured.

    Mirrors the dashboard running without a database: users get defaults
    until they save, and saves are echoed back.
    """

    def __init__(self) -> None:
        self._rows: Dict[str, UserSettings] = {}

    async def fetch(self, *, user_id: str) -> UserSettings:
        return self._rows.get(user_id) or default_settings()

    async def store(self, *, user_id: str, settings: UserSettings) -> UserSettings:
        self._rows[user_id] = settings
        return settings
