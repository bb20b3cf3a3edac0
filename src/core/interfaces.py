"""Core protocol and interface definitions.

Defines the persistence primitive consumed by the durable cache, the
settings backend contract used by the settings store, and the sweep hook
used by the background sweeper.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from core.models import UserSettings


class KeyValueStorage(Protocol):
    """Contract for string key -> string value persistence."""
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class SettingsBackend(Protocol):
    """Source of truth for user settings (remote API or in-process store)."""
    async def fetch(self, *, user_id: str) -> "UserSettings":
        ...

    async def store(self, *, user_id: str, settings: "UserSettings") -> "UserSettings":
        ...


class SupportsSweep(Protocol):
    name: str

    def sweep(self) -> int:
        ...
