"""Durable snapshots of air-quality lookups.

Sits in front of AirQualityService and keeps the last result per location or
parameter in the durable cache, so a restarted process can answer with the
previous snapshot (and its original timestamp) before hitting the network.
`force=True` skips the durable read but still refreshes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Sequence

from core.durable_cache import DurableCache
from core.keys import generate_key
from core.models import AirQualityData, MeasurementRecord
from sources.air_quality import DEFAULT_LIMIT, DEFAULT_RADIUS, AirQualityService

logger = logging.getLogger(__name__)

LOCATION_SNAPSHOT_TTL = 10 * 60.0
MEASUREMENTS_SNAPSHOT_TTL = 5 * 60.0


@dataclass(frozen=True)
class Snapshot:
    data: Sequence[Any]
    last_updated: datetime
    from_cache: bool

    def to_dict(self) -> dict:
        return {
            "data": [item.to_dict() for item in self.data],
            "last_updated": self.last_updated.isoformat(),
            "from_cache": self.from_cache,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AirQualityFeed:
    def __init__(
        self,
        *,
        service: AirQualityService,
        durable_cache: DurableCache,
        enable_durable: bool = True,
        location_ttl: float = LOCATION_SNAPSHOT_TTL,
        measurements_ttl: float = MEASUREMENTS_SNAPSHOT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._service = service
        self._durable = durable_cache
        self._enable_durable = bool(enable_durable)
        self._location_ttl = float(location_ttl)
        self._measurements_ttl = float(measurements_ttl)
        self._clock = clock

    async def location_snapshot(
        self,
        latitude: float,
        longitude: float,
        *,
        radius: int = DEFAULT_RADIUS,
        force: bool = False,
    ) -> Snapshot:
        params = {"lat": latitude, "lng": longitude}
        if radius != DEFAULT_RADIUS:
            params["radius"] = radius
        key = generate_key("air-quality-hook", params)

        cached = self._read(key, AirQualityData.from_dict, force=force)
        if cached is not None:
            return cached

        data = await self._service.get_air_quality_by_location(latitude, longitude, radius)
        return self._write(key, data, self._location_ttl)

    async def measurements_snapshot(
        self,
        parameter: str,
        limit: int = DEFAULT_LIMIT,
        *,
        force: bool = False,
    ) -> Snapshot:
        key = generate_key("measurements-hook", {"parameter": parameter, "limit": limit})

        cached = self._read(key, MeasurementRecord.from_dict, force=force)
        if cached is not None:
            return cached

        data = await self._service.get_latest_measurements(parameter, limit)
        return self._write(key, data, self._measurements_ttl)

    def _read(self, key: str, load: Callable[[Any], Any], *, force: bool) -> Optional[Snapshot]:
        if force or not self._enable_durable:
            return None

        entry = self._durable.get_entry(key)
        if entry is None:
            return None

        try:
            data = [load(item) for item in entry.value]
        except (KeyError, TypeError, AttributeError) as e:
            # Payload from an older layout; refetch and overwrite it
            logger.warning("Discarding unreadable snapshot %r: %r", key, e)
            self._durable.delete(key)
            return None

        return Snapshot(
            data=data,
            last_updated=datetime.fromtimestamp(entry.created_at, tz=timezone.utc),
            from_cache=True,
        )

    def _write(self, key: str, data: List[Any], ttl: float) -> Snapshot:
        if self._enable_durable:
            self._durable.set(key, [item.to_dict() for item in data], ttl)
        return Snapshot(data=list(data), last_updated=self._clock(), from_cache=False)
