"""Remote user-settings API client.

Talks to the dashboard's `/api/user/settings` endpoint, which wraps its
payload in `{"data": ..., "success": true}`. The endpoint is the source of
truth for settings; the caching around it lives in sources.settings_store.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from core.errors import AccessDeniedError, ExternalServiceError, ValidationError
from core.models import UserSettings, default_settings


class SettingsClient:
    PATH = "/api/user/settings"
    USER_HEADER = "X-User-Id"

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        verify: bool = True,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        if not self._base_url:
            raise ValidationError("Missing settings API base URL")
        self._timeout = float(timeout)
        self._verify = bool(verify)

        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _create_client(self, user_id: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={**self._headers, self.USER_HEADER: user_id},
            timeout=self._timeout,
            verify=self._verify,
        )

    async def fetch(self, *, user_id: str) -> UserSettings:
        data = await self._request(user_id, "GET")
        # Backend answers without data when the user has never saved settings
        if not data:
            return default_settings()
        return self._parse(data)

    async def store(self, *, user_id: str, settings: UserSettings) -> UserSettings:
        data = await self._request(user_id, "POST", json=settings.to_dict())
        if not data:
            raise ExternalServiceError("Settings API returned no data after save")
        return self._parse(data)

    @staticmethod
    def _parse(data: Any) -> UserSettings:
        try:
            return UserSettings.from_dict(data)
        except ValidationError as e:
            raise ExternalServiceError(f"Settings API returned malformed settings: {e}") from e

    async def _request(self, user_id: str, method: str, *, json: Any = None) -> Any:
        try:
            async with self._create_client(user_id) as client:
                r = await client.request(method, self.PATH, json=json)
                if r.status_code in (401, 403):
                    raise AccessDeniedError("Settings API rejected the user")
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Settings API returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to call settings API: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"Settings API returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ExternalServiceError("Settings API returned an unexpected payload")
        data = payload.get("data")
        if data is not None and not isinstance(data, dict):
            raise ExternalServiceError("Settings API returned malformed settings")
        return data
