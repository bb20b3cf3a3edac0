"""Factory for selecting the settings backend.

Exposes get_settings_backend which returns either the remote SettingsClient
or the in-process InMemorySettingsBackend.
"""

from __future__ import annotations

from typing import Optional

from clients.settings_client import SettingsClient
from core.interfaces import SettingsBackend
from sources.settings_store import InMemorySettingsBackend


def get_settings_backend(
    base_url: Optional[str] = None,
    *,
    token: Optional[str] = None,
    timeout: float = 10.0,
    http_verify: bool = True,
    client: Optional[SettingsClient] = None,
) -> SettingsBackend:
    """
    Priority Logic:
    1. An injected client wins.
    2. A non-blank base_url -> SettingsClient.
    3. Default -> InMemorySettingsBackend.
    """
    if client is not None:
        return client

    if base_url and base_url.strip():
        return SettingsClient(base_url=base_url.strip(), token=token or None, timeout=timeout, verify=http_verify)

    return InMemorySettingsBackend()
