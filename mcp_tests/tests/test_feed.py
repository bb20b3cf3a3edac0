from datetime import datetime, timezone

import pytest

import core.durable_cache as durable_mod
from core.durable_cache import DurableCache
from core.models import AirQualityData, Coordinates, Measurement, MeasurementRecord
from sources.feed import AirQualityFeed

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

LOCATION = AirQualityData(
    location="Center",
    city="Moscow",
    country="RU",
    coordinates=Coordinates(latitude=55.75, longitude=37.61),
    measurements=(Measurement(parameter="pm25", value=12.0, unit="µg/m³", last_updated="t"),),
)

RECORD = MeasurementRecord(
    parameter="pm25",
    value=1.0,
    unit="µg/m³",
    date_utc="t",
    location="Center",
    city="Moscow",
    country="RU",
)


class FakeService:
    def __init__(self):
        self.calls = []

    async def get_air_quality_by_location(self, latitude, longitude, radius=10000):
        self.calls.append(("aq", latitude, longitude, radius))
        return [LOCATION]

    async def get_latest_measurements(self, parameter, limit=100):
        self.calls.append(("m", parameter, limit))
        return [RECORD]


@pytest.fixture
def wall(monkeypatch):
    t = {"now": FIXED_NOW.timestamp() - 60}
    monkeypatch.setattr(durable_mod.time, "time", lambda: t["now"])
    return t


def _feed(durable, **kwargs):
    service = FakeService()
    return AirQualityFeed(service=service, durable_cache=durable, clock=lambda: FIXED_NOW, **kwargs), service


@pytest.mark.asyncio
async def test_location_snapshot_fetches_then_serves_durable_copy(durable, storage, wall):
    feed, service = _feed(durable)

    fresh = await feed.location_snapshot(55.75, 37.61)
    assert fresh.from_cache is False
    assert fresh.last_updated == FIXED_NOW
    assert "eco-tracker-cache-air-quality-hook:lat=55.75&lng=37.61" in storage.keys()

    again = await feed.location_snapshot(55.75, 37.61)
    assert again.from_cache is True
    assert again.data == [LOCATION]
    assert again.last_updated == datetime.fromtimestamp(wall["now"], tz=timezone.utc)
    assert len(service.calls) == 1


@pytest.mark.asyncio
async def test_force_skips_durable_read_but_refreshes_it(durable, wall):
    feed, service = _feed(durable)

    await feed.measurements_snapshot("pm25", 5)
    forced = await feed.measurements_snapshot("pm25", 5, force=True)

    assert forced.from_cache is False
    assert service.calls == [("m", "pm25", 5), ("m", "pm25", 5)]
    assert durable.get("measurements-hook:limit=5&parameter=pm25") == [RECORD.to_dict()]


@pytest.mark.asyncio
async def test_snapshot_expires_with_ttl(durable, wall):
    feed, service = _feed(durable, measurements_ttl=300)

    await feed.measurements_snapshot("pm25", 5)
    wall["now"] += 301
    snap = await feed.measurements_snapshot("pm25", 5)

    assert snap.from_cache is False
    assert len(service.calls) == 2


@pytest.mark.asyncio
async def test_disabled_durable_tier_always_calls_service(durable, storage):
    feed, service = _feed(durable, enable_durable=False)

    await feed.location_snapshot(1.0, 2.0)
    await feed.location_snapshot(1.0, 2.0)

    assert len(service.calls) == 2
    assert storage.keys() == []


@pytest.mark.asyncio
async def test_unreadable_snapshot_is_discarded(durable):
    feed, service = _feed(durable)
    durable.set("air-quality-hook:lat=1.0&lng=2.0", [{"legacy": True}])

    snap = await feed.location_snapshot(1.0, 2.0)

    assert snap.from_cache is False
    assert len(service.calls) == 1


@pytest.mark.asyncio
async def test_works_without_persistent_storage():
    feed, service = _feed(DurableCache(None))

    snap = await feed.location_snapshot(1.0, 2.0)

    assert snap.to_dict()["data"][0]["location"] == "Center"
    assert snap.to_dict()["last_updated"] == FIXED_NOW.isoformat()
