"""Server bootstrap for the Eco Tracker MCP service.

Composition root: builds the cache registry, durable storage, clients and
services once, wires them into the tools, and ties the background cache
sweeper to the server lifespan. Starts the MCP server over stdio.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from mcp.server.fastmcp import FastMCP

import config
from clients.openaq_client import OpenAQClient
from core.durable_cache import DurableCache
from core.interfaces import KeyValueStorage
from core.registry import AIR_QUALITY, MEASUREMENTS, USER_SETTINGS, CacheRegistry, build_registry
from core.storage import open_storage
from core.sweeper import CacheSweeper
from sources.air_quality import AirQualityService
from sources.feed import AirQualityFeed
from sources.settings_factory import get_settings_backend
from sources.settings_store import SettingsStore

from tools.air_quality import register as register_air_quality
from tools.cache_admin import register as register_cache_admin
from tools.settings import register as register_settings

SERVER_NAME = "eco-tracker-mcp"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Components:
    registry: CacheRegistry
    sweeper: CacheSweeper
    feed: AirQualityFeed
    settings_store: SettingsStore


def build_components(*, storage: Optional[KeyValueStorage] = None) -> Components:
    if storage is None:
        storage = open_storage(config.DURABLE_CACHE_PATH, max_bytes=config.DURABLE_CACHE_MAX_BYTES)
    if storage is None:
        logger.info("Durable cache disabled (DURABLE_CACHE_PATH is blank)")

    durable = DurableCache(storage, prefix=config.DURABLE_CACHE_PREFIX)
    registry = build_registry(
        durable=durable,
        air_quality_ttl=config.AIR_QUALITY_TTL,
        air_quality_max_size=config.AIR_QUALITY_MAX_SIZE,
        measurements_ttl=config.MEASUREMENTS_TTL,
        measurements_max_size=config.MEASUREMENTS_MAX_SIZE,
        user_settings_ttl=config.USER_SETTINGS_TTL,
        user_settings_max_size=config.USER_SETTINGS_MAX_SIZE,
    )

    openaq = OpenAQClient(
        base_url=config.OPENAQ_BASE_URL,
        api_key=config.OPENAQ_API_KEY,
        timeout=config.OPENAQ_TIMEOUT,
        verify=config.HTTP_VERIFY,
    )
    service = AirQualityService(
        client=openaq,
        air_quality_cache=registry.memory(AIR_QUALITY),
        measurements_cache=registry.memory(MEASUREMENTS),
        air_quality_ttl=config.AIR_QUALITY_TTL,
        measurements_ttl=config.MEASUREMENTS_TTL,
    )

    backend = get_settings_backend(
        config.SETTINGS_API_URL,
        token=config.SETTINGS_API_TOKEN,
        timeout=config.SETTINGS_TIMEOUT,
        http_verify=config.HTTP_VERIFY,
    )

    return Components(
        registry=registry,
        sweeper=CacheSweeper(registry.memory_caches(), interval_seconds=config.CACHE_SWEEP_INTERVAL),
        feed=AirQualityFeed(service=service, durable_cache=durable),
        settings_store=SettingsStore(
            backend=backend,
            memory_cache=registry.memory(USER_SETTINGS),
            durable_cache=durable,
        ),
    )


def make_lifespan(sweeper: CacheSweeper) -> Callable[[FastMCP], AbstractAsyncContextManager[None]]:
    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()

    return lifespan


def create_server(components: Components) -> FastMCP:
    mcp = FastMCP(SERVER_NAME, lifespan=make_lifespan(components.sweeper))

    register_air_quality(mcp, feed=components.feed)
    register_settings(mcp, store=components.settings_store)
    register_cache_admin(mcp, registry=components.registry)
    return mcp


components = build_components()
mcp = create_server(components)


def main() -> None:
    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
