"""MCP tools to inspect and clear the cache tiers."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from core.registry import ALL_TARGET, CacheRegistry


def register(mcp: FastMCP, *, registry: CacheRegistry) -> None:
    @mcp.tool(name="cache_stats")
    async def cache_stats() -> dict:
        """Entry counts per memory cache role plus durable tier size in bytes."""
        return registry.stats()

    @mcp.tool(name="clear_cache")
    async def clear_cache(target: str = ALL_TARGET) -> dict:
        """Clear one cache role ("air_quality", "measurements", "user_settings"),
        the persisted tier ("durable"), or everything ("all")."""
        cleared = registry.clear(target)
        return {"cleared": cleared, "stats": registry.stats()}

    @mcp.tool(name="cleanup_cache")
    async def cleanup_cache() -> dict:
        """Remove expired and corrupt entries from every tier."""
        removed = registry.cleanup()
        return {"removed": removed, "stats": registry.stats()}
