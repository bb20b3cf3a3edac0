"""OpenAQ API client.

A thin async wrapper over the two OpenAQ endpoints the server needs:
nearby monitoring locations and the latest measurements for a parameter.
Responses are returned as the raw `results` list; reshaping is left to
sources.air_quality.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from core.errors import ExternalServiceError


class OpenAQClient:
    API_KEY_HEADER = "X-API-Key"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        verify: bool = True,
    ) -> None:
        self._base_url = (base_url or "").rstrip("/")
        self._api_key = (api_key or "").strip()
        self._timeout = float(timeout)
        self._verify = bool(verify)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={self.API_KEY_HEADER: self._api_key, "Accept": "application/json"},
            timeout=self._timeout,
            verify=self._verify,
        )

    async def fetch_locations(self, *, latitude: float, longitude: float, radius: int) -> List[Dict[str, Any]]:
        params = {
            "coordinates": f"{latitude},{longitude}",
            "radius": str(radius),
            "limit": "10",
        }
        return await self._get_results("/locations", params)

    async def fetch_measurements(self, *, parameter: str, limit: int) -> List[Dict[str, Any]]:
        params = {
            "parameter": parameter,
            "limit": str(limit),
            "sort": "desc",
            "order_by": "datetime",
        }
        return await self._get_results("/measurements", params)

    async def _get_results(self, path: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            async with self._create_client() as client:
                r = await client.get(path, params=params)
                r.raise_for_status()
                payload = r.json()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"OpenAQ returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to call OpenAQ: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"OpenAQ returned invalid JSON: {e}") from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise ExternalServiceError("OpenAQ response is missing 'results'")
        return results
