"""Canonical data models for weather and thermostat snapshots."""

from src.shared.models.thermostat import (
    ThermostatMode,
    ThermostatSnapshotData,
    ThermostatsResponse,
)
from src.shared.models.weather import (
    DailyExtremes,
    LightningStrike,
    WeatherObservationData,
    WeatherReading,
    WeatherResponse,
    WeatherSnapshotData,
)

__all__ = [
    "WeatherReading",
    "WeatherObservationData",
    "WeatherSnapshotData",
    "WeatherResponse",
    "DailyExtremes",
    "LightningStrike",
    "ThermostatMode",
    "ThermostatSnapshotData",
    "ThermostatsResponse",
]
