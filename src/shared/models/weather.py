"""Canonical weather data types.

All values use the canonical unit system: Fahrenheit, mph, inHg, miles,
inches. Optional fields mean "not reported" and are never zero-filled.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PressureTrend = Literal["rising", "falling", "steady"]


class WeatherReading(BaseModel):
    """One normalized upstream weather fetch for a station.

    Produced by the weather adapter; carries the instantaneous fields, the
    provider's day aggregates and, when the provider supplied it, its own
    pressure trend.
    """

    station_id: str
    station_name: str
    timestamp: datetime = Field(..., description="Observation instant (UTC)")
    temperature: float
    feels_like: float | None = None
    dew_point: float | None = None
    humidity: float | None = Field(None, ge=0, le=100)
    wind_speed: float | None = Field(None, ge=0)
    wind_gust: float | None = Field(None, ge=0)
    wind_direction: float | None = Field(None, ge=0, le=360)
    pressure: float | None = None
    provider_pressure_trend: PressureTrend | None = None
    uv_index: float | None = Field(None, ge=0)
    rain_interval: float | None = Field(None, ge=0, description="Rain over the interval")
    rain_today: float | None = Field(None, ge=0)
    rain_yesterday: float | None = Field(None, ge=0)
    lightning_strike_count: int | None = Field(None, ge=0)
    lightning_strike_distance: float | None = Field(None, ge=0)

    def to_observation(self) -> "WeatherObservationData":
        """Subset persisted to the observation store."""
        return WeatherObservationData(
            station_id=self.station_id,
            timestamp=self.timestamp,
            temperature=self.temperature,
            humidity=self.humidity,
            pressure=self.pressure,
            wind_speed=self.wind_speed,
            wind_gust=self.wind_gust,
            wind_direction=self.wind_direction,
            uv_index=self.uv_index,
            dew_point=self.dew_point,
            rain_accumulation=self.rain_interval,
            lightning_strike_count=self.lightning_strike_count,
            lightning_strike_distance=self.lightning_strike_distance,
        )


class WeatherObservationData(BaseModel):
    """One immutable observation in the time series."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    station_id: str
    timestamp: datetime
    temperature: float
    humidity: float | None = None
    pressure: float | None = None
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_direction: float | None = None
    uv_index: float | None = None
    dew_point: float | None = None
    rain_accumulation: float | None = None
    lightning_strike_count: int | None = None
    lightning_strike_distance: float | None = None
    created_at: datetime | None = None


class DailyExtremes(BaseModel):
    """Daily temperature high/low with the instant each occurred."""

    high: float
    low: float
    high_time: datetime
    low_time: datetime


class LightningStrike(BaseModel):
    """Most recent strike within the lookback window."""

    distance: float | None = Field(None, description="Miles; None if not reported")
    timestamp: datetime


class WeatherSnapshotData(BaseModel):
    """Latest known state for one station, replaced on every refresh."""

    model_config = ConfigDict(from_attributes=True)

    station_id: str
    station_name: str
    timestamp: datetime
    temperature: float
    feels_like: float | None = None
    temperature_high: float
    temperature_low: float
    temperature_high_time: datetime
    temperature_low_time: datetime
    wind_speed: float | None = None
    wind_gust: float | None = None
    wind_direction: float | None = None
    wind_direction_cardinal: str | None = None
    pressure: float | None = None
    pressure_trend: PressureTrend | None = None
    humidity: float | None = None
    uv_index: float | None = None
    dew_point: float | None = None
    rain_today: float | None = None
    rain_yesterday: float | None = None
    lightning_strike_distance: float | None = None
    lightning_strike_time: datetime | None = None
    last_updated: datetime


class WeatherResponse(BaseModel):
    """Current weather as served to the presentation layer."""

    weather: WeatherSnapshotData
    cached: bool = False
    stale: bool = False
    error_message: str | None = None
