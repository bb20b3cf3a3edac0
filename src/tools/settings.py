"""MCP tools for per-user notification settings.

Registers 'get_user_settings', 'save_user_settings', 'update_threshold'
and 'clear_settings_cache', all backed by a SettingsStore.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.settings_store import SettingsStore


def _user(user_id: str) -> str:
    uid = (user_id or "").strip()
    if not uid:
        raise ValidationError("Missing user_id")
    return uid


def register(mcp: FastMCP, *, store: SettingsStore) -> None:
    @mcp.tool(name="get_user_settings")
    async def get_user_settings(user_id: str = "", refresh: bool = False) -> dict:
        """Return a user's settings; anonymous callers (blank user_id) get defaults.

        The result carries `error` when the backend could not be reached and
        defaults were substituted, and `source` naming the tier that answered.
        """
        uid = (user_id or "").strip() or None
        result = await (store.refresh(uid) if refresh else store.load(uid))
        return result.to_dict()

    @mcp.tool(name="save_user_settings")
    async def save_user_settings(user_id: str, settings: Dict[str, Any]) -> dict:
        """Merge `settings` into the user's saved settings.

        Returns {"saved": bool, "settings": {...}} where settings reflect what
        the backend holds after the call (rolled back on failure).
        """
        uid = _user(user_id)
        saved = await store.save(uid, settings or {})
        current = await store.load(uid)
        return {"saved": saved, "settings": current.settings.to_dict()}

    @mcp.tool(name="update_threshold")
    async def update_threshold(user_id: str, parameter: str, value: float) -> dict:
        """Set the alert threshold for one parameter (e.g. "pm25" -> 35)."""
        uid = _user(user_id)
        saved = await store.update_threshold(uid, parameter, value)
        current = await store.load(uid)
        return {"saved": saved, "thresholds": dict(current.settings.thresholds)}

    @mcp.tool(name="clear_settings_cache")
    async def clear_settings_cache(user_id: str) -> dict:
        """Drop the user's cached settings from memory and durable tiers."""
        uid = _user(user_id)
        store.clear(uid)
        return {"cleared": True, "user_id": uid}
