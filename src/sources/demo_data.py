"""Synthetic air-quality data used when OpenAQ is unavailable."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from core.models import AirQualityData, Coordinates, Measurement, MeasurementRecord, parameter_unit

DEMO_CITY = "Demo City"
DEMO_COUNTRY = "Russia"
DEMO_STATION = "Demo Station"

# parameter -> (low, span) so value = low + random() * span
_LOCATION_RANGES = (
    ("pm25", 10.0, 50.0),
    ("pm10", 20.0, 80.0),
    ("co2", 400.0, 200.0),
    ("no2", 10.0, 50.0),
    ("o3", 20.0, 60.0),
    ("so2", 5.0, 30.0),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DemoDataGenerator:
    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock

    def locations(self, latitude: float, longitude: float) -> List[AirQualityData]:
        stamp = self._clock().isoformat()
        measurements = tuple(
            Measurement(
                parameter=name,
                value=low + self._rng.random() * span,
                unit=parameter_unit(name),
                last_updated=stamp,
            )
            for name, low, span in _LOCATION_RANGES
        )
        return [
            AirQualityData(
                location=f"Station {latitude:.2f}, {longitude:.2f}",
                city=DEMO_CITY,
                country=DEMO_COUNTRY,
                coordinates=Coordinates(latitude=latitude, longitude=longitude),
                measurements=measurements,
            )
        ]

    def measurements(self, parameter: str, limit: int) -> List[MeasurementRecord]:
        # One reading per hour going back from now, newest first
        now = self._clock()
        return [
            MeasurementRecord(
                parameter=parameter,
                value=10.0 + self._rng.random() * 100.0,
                unit=parameter_unit(parameter),
                date_utc=(now - timedelta(hours=i)).isoformat(),
                location=DEMO_STATION,
                city=DEMO_CITY,
                country=DEMO_COUNTRY,
            )
            for i in range(max(0, int(limit)))
        ]
