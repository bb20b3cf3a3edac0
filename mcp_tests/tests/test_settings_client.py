import json

import httpx
import pytest

from clients.settings_client import SettingsClient
from core.cache import MemoryCache
from core.errors import AccessDeniedError, ExternalServiceError, ValidationError
from core.models import UserSettings
from sources.settings_store import SettingsStore


def patch_settings_transport(monkeypatch, client: SettingsClient, handler):
    transport = httpx.MockTransport(handler)

    def _create_client(user_id):
        return httpx.AsyncClient(
            base_url=client._base_url,
            headers={**client._headers, client.USER_HEADER: user_id},
            timeout=client._timeout,
            verify=client._verify,
            transport=transport,
        )

    monkeypatch.setattr(client, "_create_client", _create_client)


def test_settings_client_requires_base_url():
    with pytest.raises(ValidationError):
        SettingsClient(base_url="  ")


@pytest.mark.asyncio
async def test_fetch_parses_envelope_and_sends_identity(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["user"] = request.headers.get("X-User-Id")
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={"data": {"user_id": "u1", "notification_frequency": "weekly"}, "success": True},
        )

    client = SettingsClient(base_url="https://dash.example/", token="tkn")
    patch_settings_transport(monkeypatch, client, handler)

    settings = await client.fetch(user_id="u1")

    assert settings.notification_frequency == "weekly"
    assert settings.thresholds["pm25"] == 35
    assert seen == {"method": "GET", "path": "/api/user/settings", "user": "u1", "auth": "Bearer tkn"}


@pytest.mark.asyncio
async def test_fetch_without_data_returns_defaults(monkeypatch):
    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(monkeypatch, client, lambda r: httpx.Response(200, json={"success": True}))

    assert await client.fetch(user_id="u1") == UserSettings()


@pytest.mark.asyncio
async def test_store_posts_settings(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        body = json.loads(request.content)
        seen["body"] = body
        return httpx.Response(200, json={"data": {**body, "updated_at": "now"}, "success": True})

    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(monkeypatch, client, handler)

    out = await client.store(user_id="u1", settings=UserSettings(notifications_push=True))

    assert seen["method"] == "POST"
    assert seen["body"]["notifications_push"] is True
    assert out.notifications_push is True


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 403])
async def test_rejected_user_raises_access_denied(monkeypatch, status):
    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(monkeypatch, client, lambda r: httpx.Response(status, json={"error": "no"}))

    with pytest.raises(AccessDeniedError):
        await client.fetch(user_id="u1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "db"}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=["not", "an", "envelope"]),
        httpx.Response(200, json={"data": "oops"}),
    ],
)
async def test_backend_failures_raise_external_service_error(monkeypatch, response):
    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(monkeypatch, client, lambda r: response)

    with pytest.raises(ExternalServiceError):
        await client.fetch(user_id="u1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "row",
    [
        {"thresholds": "abc"},
        {"thresholds": {"pm25": "lots"}},
    ],
)
async def test_malformed_settings_row_raises_external_service_error(monkeypatch, row):
    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(monkeypatch, client, lambda r: httpx.Response(200, json={"data": row}))

    with pytest.raises(ExternalServiceError):
        await client.fetch(user_id="u1")
    with pytest.raises(ExternalServiceError):
        await client.store(user_id="u1", settings=UserSettings())


@pytest.mark.asyncio
async def test_malformed_settings_row_degrades_to_defaults_in_store(monkeypatch, durable):
    client = SettingsClient(base_url="https://dash.example")
    patch_settings_transport(
        monkeypatch, client, lambda r: httpx.Response(200, json={"data": {"thresholds": "abc"}})
    )
    store = SettingsStore(
        backend=client,
        memory_cache=MemoryCache(ttl_seconds=1800, max_size=20),
        durable_cache=durable,
    )

    result = await store.load("u1")

    assert result.settings == UserSettings()
    assert result.error == "Failed to load settings"
