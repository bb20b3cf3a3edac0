"""MCP tools for air-quality lookups.

Registers 'get_air_quality' (readings near a coordinate) and
'get_latest_measurements' (recent readings for one parameter). Both
validate inputs and delegate to an AirQualityFeed.
"""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from core.errors import ValidationError
from sources.air_quality import DEFAULT_LIMIT, DEFAULT_RADIUS
from sources.feed import AirQualityFeed

MAX_LIMIT = 1000


def _validate_coordinates(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValidationError("Invalid coordinates")


def register(mcp: FastMCP, *, feed: AirQualityFeed) -> None:
    @mcp.tool(name="get_air_quality")
    async def get_air_quality(
        latitude: float,
        longitude: float,
        radius: int = DEFAULT_RADIUS,
        force: bool = False,
    ) -> dict:
        """Return air-quality readings from monitoring stations near a point.

        Params:
          - latitude, longitude: decimal degrees (required).
          - radius: search radius in meters (default: 10000).
          - force: bypass the persisted snapshot and refetch (default: False).

        Returns:
          {"data": [location...], "last_updated": ISO-8601, "from_cache": bool}.
          Demo data is returned when OpenAQ is unreachable or unconfigured.

        Raises:
          ValidationError for out-of-range coordinates or non-positive radius.
        """
        _validate_coordinates(latitude, longitude)
        if radius <= 0:
            raise ValidationError("radius must be positive")

        snapshot = await feed.location_snapshot(latitude, longitude, radius=radius, force=force)
        return snapshot.to_dict()

    @mcp.tool(name="get_latest_measurements")
    async def get_latest_measurements(
        parameter: str,
        limit: int = DEFAULT_LIMIT,
        force: bool = False,
    ) -> dict:
        """Return the most recent measurements for one parameter (e.g. "pm25").

        Params:
          - parameter: pollutant or metric id (required).
          - limit: number of readings, 1..1000 (default: 100).
          - force: bypass the persisted snapshot and refetch (default: False).

        Raises:
          ValidationError for a blank parameter or out-of-range limit.
        """
        name = (parameter or "").strip().lower()
        if not name:
            raise ValidationError("Missing parameter")
        if not 0 < limit <= MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")

        snapshot = await feed.measurements_snapshot(name, limit, force=force)
        return snapshot.to_dict()
