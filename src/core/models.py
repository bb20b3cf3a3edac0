"""Immutable dataclasses for the air-quality and settings payloads.

Includes the reshaped OpenAQ results (AirQualityData, MeasurementRecord),
the per-user settings model and its defaults, plus helpers converting
them to and from the plain dicts stored in caches and returned by tools.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Tuple

from core.errors import ValidationError


PARAMETER_UNITS: Dict[str, str] = {
    "pm25": "µg/m³",
    "pm10": "µg/m³",
    "co2": "ppm",
    "no2": "ppb",
    "o3": "ppb",
    "so2": "ppb",
    "voc": "ppb",
    "temperature": "°C",
    "humidity": "%",
    "pressure": "hPa",
}


def parameter_unit(parameter: str) -> str:
    return PARAMETER_UNITS.get(parameter, "unit")


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Measurement:
    parameter: str
    value: float
    unit: str
    last_updated: str


@dataclass(frozen=True)
class AirQualityData:
    """One monitoring location with its most recent value per parameter."""

    location: str
    city: str
    country: str
    coordinates: Coordinates
    measurements: Tuple[Measurement, ...] = ()

    def to_dict(self) -> dict:
        out = asdict(self)
        out["measurements"] = [asdict(m) for m in self.measurements]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AirQualityData":
        coords = data["coordinates"]
        return cls(
            location=data["location"],
            city=data["city"],
            country=data["country"],
            coordinates=Coordinates(latitude=coords["latitude"], longitude=coords["longitude"]),
            measurements=tuple(Measurement(**m) for m in data.get("measurements", ())),
        )


@dataclass(frozen=True)
class MeasurementRecord:
    """A single timestamped reading of one parameter."""

    parameter: str
    value: float
    unit: str
    date_utc: str
    location: str
    city: str
    country: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MeasurementRecord":
        return cls(**{f.name: data[f.name] for f in fields(cls)})


DEFAULT_THRESHOLDS: Dict[str, float] = {
    "co2": 1000,
    "pm25": 35,
    "pm10": 50,
    "voc": 100,
    "temperature": 30,
    "humidity": 70,
    "pressure": 1030,
    "o3": 70,
    "no2": 100,
    "so2": 75,
}


@dataclass(frozen=True)
class UserSettings:
    notifications_email: bool = True
    notifications_push: bool = False
    notification_frequency: str = "daily"
    default_location: str = "moscow"
    thresholds: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))

    def to_dict(self) -> dict:
        out = asdict(self)
        out["thresholds"] = dict(self.thresholds)
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserSettings":
        # Server rows carry extra columns (user_id, updated_at); keep only ours
        if not isinstance(data, Mapping):
            raise ValidationError(f"Settings must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "thresholds" in values:
            thresholds = values["thresholds"] or {}
            if not isinstance(thresholds, Mapping):
                raise ValidationError("Settings thresholds must be an object")
            try:
                values["thresholds"] = {str(k): float(v) for k, v in thresholds.items()}
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Invalid threshold value: {e}") from e
        return cls(**values)

    def merged(self, changes: Mapping[str, Any]) -> "UserSettings":
        """Return a copy with `changes` applied. Unknown fields are rejected."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValidationError(f"Unknown settings fields: {unknown}")
        return UserSettings.from_dict({**self.to_dict(), **changes})


def default_settings() -> UserSettings:
    return UserSettings()
