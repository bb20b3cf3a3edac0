"""Air-quality fetchers with memory caching and synthetic fallback.

Both public lookups go through core.decorators.with_cache, so equal
arguments within the TTL are answered from the role's MemoryCache. A
missing API key or any OpenAQ failure falls back to demo data instead of
raising; the fallback result is cached like a real one.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from clients.openaq_client import OpenAQClient
from core.cache import MemoryCache
from core.decorators import with_cache
from core.errors import ExternalServiceError
from core.keys import generate_key
from core.models import AirQualityData, Coordinates, Measurement, MeasurementRecord, parameter_unit
from sources.demo_data import DemoDataGenerator

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 10_000
DEFAULT_LIMIT = 100
AIR_QUALITY_TTL = 10 * 60.0
MEASUREMENTS_TTL = 5 * 60.0
UNKNOWN = "Unknown"


def air_quality_key(latitude: float, longitude: float, radius: int = DEFAULT_RADIUS) -> str:
    return generate_key("air-quality", {"latitude": latitude, "longitude": longitude, "radius": radius})


def measurements_key(parameter: str, limit: int = DEFAULT_LIMIT) -> str:
    return generate_key("measurements", {"parameter": parameter, "limit": limit})


def _reshape_location(raw: Dict[str, Any]) -> AirQualityData:
    coords = raw["coordinates"]
    return AirQualityData(
        location=raw["name"],
        city=raw.get("city") or UNKNOWN,
        country=raw.get("country") or UNKNOWN,
        coordinates=Coordinates(latitude=coords["latitude"], longitude=coords["longitude"]),
        measurements=tuple(
            Measurement(
                parameter=p["parameter"],
                value=p["lastValue"],
                unit=p["unit"],
                last_updated=p["lastUpdated"],
            )
            for p in raw.get("parameters", ())
        ),
    )


def _reshape_measurement(raw: Dict[str, Any]) -> MeasurementRecord:
    parameter = raw["parameter"]
    date = raw.get("date") or {}
    return MeasurementRecord(
        parameter=parameter,
        value=raw["value"],
        unit=raw.get("unit") or parameter_unit(parameter),
        date_utc=date.get("utc", ""),
        location=raw.get("location") or UNKNOWN,
        city=raw.get("city") or UNKNOWN,
        country=raw.get("country") or UNKNOWN,
    )


class AirQualityService:
    """Location and parameter lookups against OpenAQ.

    Purpose:
      - get_air_quality_by_location(latitude, longitude, radius=10000) -> List[AirQualityData]
      - get_latest_measurements(parameter, limit=100) -> List[MeasurementRecord]

    The caches are injected by the composition root; this class never
    creates them.
    """

    def __init__(
        self,
        *,
        client: OpenAQClient,
        air_quality_cache: MemoryCache,
        measurements_cache: MemoryCache,
        demo: Optional[DemoDataGenerator] = None,
        air_quality_ttl: float = AIR_QUALITY_TTL,
        measurements_ttl: float = MEASUREMENTS_TTL,
    ) -> None:
        self._client = client
        self._demo = demo or DemoDataGenerator()

        self.get_air_quality_by_location = with_cache(
            self._fetch_air_quality, air_quality_cache, air_quality_key, air_quality_ttl
        )
        self.get_latest_measurements = with_cache(
            self._fetch_measurements, measurements_cache, measurements_key, measurements_ttl
        )

    async def _fetch_air_quality(
        self,
        latitude: float,
        longitude: float,
        radius: int = DEFAULT_RADIUS,
    ) -> List[AirQualityData]:
        if not self._client.configured:
            logger.warning("OpenAQ API key not configured, using demo data")
            return self._demo.locations(latitude, longitude)

        try:
            results = await self._client.fetch_locations(latitude=latitude, longitude=longitude, radius=radius)
            return [_reshape_location(item) for item in results]
        except ExternalServiceError as e:
            logger.warning("OpenAQ location lookup failed, using demo data: %s", e)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected OpenAQ location payload, using demo data: %r", e)
        return self._demo.locations(latitude, longitude)

    async def _fetch_measurements(self, parameter: str, limit: int = DEFAULT_LIMIT) -> List[MeasurementRecord]:
        if not self._client.configured:
            logger.warning("OpenAQ API key not configured, using demo data")
            return self._demo.measurements(parameter, limit)

        try:
            results = await self._client.fetch_measurements(parameter=parameter, limit=limit)
            return [_reshape_measurement(item) for item in results]
        except ExternalServiceError as e:
            logger.warning("OpenAQ measurements lookup failed, using demo data: %s", e)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning("Unexpected OpenAQ measurements payload, using demo data: %r", e)
        return self._demo.measurements(parameter, limit)
