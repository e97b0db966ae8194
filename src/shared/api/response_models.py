"""Response models for upstream provider APIs.

Pydantic models for parsing and validating WeatherFlow and Beestat payloads
at the adapter boundary. Unknown extra fields are ignored; missing required
fields or wrong types fail validation instead of being defaulted.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationInfo,
    field_validator,
    model_validator,
)


def epoch_to_datetime(epoch: int | float) -> datetime:
    """Convert provider epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(epoch, tz=timezone.utc)


# ============================================================================
# WeatherFlow Response Models
# ============================================================================


class WeatherFlowStatus(BaseModel):
    """WeatherFlow request status block."""

    model_config = ConfigDict(extra="ignore")

    status_code: int = Field(..., description="0 on success")
    status_message: str | None = Field(None, description="Status text")


class WeatherFlowStationMeta(BaseModel):
    """Station metadata entry from ``/stations/{id}``."""

    model_config = ConfigDict(extra="ignore")

    station_id: int
    name: str | None = None
    public_name: str | None = None
    timezone: str | None = None

    @property
    def display_name(self) -> str | None:
        """Prefer the public name over the private station name."""
        return self.public_name or self.name


class WeatherFlowStation(BaseModel):
    """Response of the station metadata endpoint."""

    model_config = ConfigDict(extra="ignore")

    stations: list[WeatherFlowStationMeta] = Field(default_factory=list)
    status: WeatherFlowStatus | None = None


class WeatherFlowObservationRecord(BaseModel):
    """One discrete station observation in metric provider units.

    Temperatures in °C, wind in m/s, pressure in mb, rain in mm,
    lightning distance in km.
    """

    model_config = ConfigDict(extra="ignore")

    timestamp: int = Field(..., description="Observation epoch seconds")
    air_temperature: float = Field(..., description="Air temperature in Celsius")
    feels_like: float | None = None
    dew_point: float | None = None
    barometric_pressure: float | None = None
    station_pressure: float | None = None
    sea_level_pressure: float | None = None
    pressure_trend: str | None = None
    relative_humidity: float | None = None
    wind_avg: float | None = None
    wind_direction: float | None = None
    wind_gust: float | None = None
    uv: float | None = None
    precip: float | None = Field(None, description="Rain over the interval in mm")
    rain_accumulation: float | None = None
    precip_accum_local_day: float | None = None
    precip_accum_local_yesterday: float | None = None
    lightning_strike_count: int | None = None
    lightning_strike_avg_distance: float | None = None
    lightning_strike_last_distance: float | None = None
    lightning_strike_last_epoch: int | None = None

    @property
    def observed_at(self) -> datetime:
        """Observation time as aware UTC datetime."""
        return epoch_to_datetime(self.timestamp)

    @property
    def interval_rain(self) -> float | None:
        """Rain accumulated over this observation interval (mm)."""
        return self.precip if self.precip is not None else self.rain_accumulation

    @property
    def lightning_distance(self) -> float | None:
        """Average strike distance for the interval, else last strike distance (km)."""
        if self.lightning_strike_avg_distance is not None:
            return self.lightning_strike_avg_distance
        return self.lightning_strike_last_distance


class WeatherFlowStationObservation(BaseModel):
    """Response of ``/observations/station/{id}``."""

    model_config = ConfigDict(extra="ignore")

    station_id: int
    station_name: str | None = None
    timezone: str | None = None
    obs: list[WeatherFlowObservationRecord] = Field(default_factory=list)
    status: WeatherFlowStatus | None = None

    @field_validator("obs", mode="before")
    @classmethod
    def null_obs_is_empty(cls, v: Any) -> Any:
        """Offline stations report ``obs: null``."""
        return [] if v is None else v

    @property
    def latest(self) -> WeatherFlowObservationRecord | None:
        """Most recent observation, if any."""
        if not self.obs:
            return None
        return max(self.obs, key=lambda record: record.timestamp)


class CurrentConditions(BaseModel):
    """Forecast-derived current conditions block of ``/better_forecast``."""

    model_config = ConfigDict(extra="ignore")

    time: int = Field(..., description="Epoch seconds")
    conditions: str | None = None
    air_temperature: float | None = None
    feels_like: float | None = None
    dew_point: float | None = None
    sea_level_pressure: float | None = None
    station_pressure: float | None = None
    pressure_trend: str | None = None
    relative_humidity: float | None = None
    wind_avg: float | None = None
    wind_direction: float | None = None
    wind_gust: float | None = None
    uv: float | None = None
    precip_accum_local_day: float | None = None
    precip_accum_local_yesterday: float | None = None
    lightning_strike_count_last_1hr: int | None = None
    lightning_strike_last_distance: float | None = None
    lightning_strike_last_epoch: int | None = None


class DailyForecast(BaseModel):
    """One day of the daily forecast."""

    model_config = ConfigDict(extra="ignore")

    day_start_local: int
    day_num: int | None = None
    month_num: int | None = None
    conditions: str | None = None
    air_temp_high: float | None = None
    air_temp_low: float | None = None
    precip_probability: float | None = None


class ForecastBlock(BaseModel):
    """Forecast container."""

    model_config = ConfigDict(extra="ignore")

    daily: list[DailyForecast] = Field(default_factory=list)


class WeatherFlowForecast(BaseModel):
    """Response of ``/better_forecast``."""

    model_config = ConfigDict(extra="ignore")

    station_id: int | None = None
    timezone: str | None = None
    current_conditions: CurrentConditions | None = None
    forecast: ForecastBlock | None = None
    status: WeatherFlowStatus | None = None


# ============================================================================
# Beestat Response Models
# ============================================================================


class BeestatClimate(BaseModel):
    """Ecobee comfort profile; setpoints are tenths of a degree Fahrenheit."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    climate_ref: str | None = Field(None, alias="climateRef")
    heat_temp: float | None = Field(None, alias="heatTemp")
    cool_temp: float | None = Field(None, alias="coolTemp")
    is_occupied: bool | None = Field(None, alias="isOccupied")


class BeestatProgram(BaseModel):
    """Ecobee program with the currently active climate reference."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    current_climate_ref: str | None = Field(None, alias="currentClimateRef")
    climates: list[BeestatClimate] = Field(default_factory=list)

    @property
    def current_climate(self) -> BeestatClimate | None:
        """The climate matching ``currentClimateRef``."""
        if not self.current_climate_ref:
            return None
        for climate in self.climates:
            if climate.climate_ref == self.current_climate_ref:
                return climate
        return None


class BeestatSettings(BaseModel):
    """Subset of ecobee settings exposed by Beestat."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    hvac_mode: str | None = Field(None, alias="hvacMode")


class BeestatThermostat(BaseModel):
    """A thermostat record from Beestat ``thermostat.read_id``.

    Temperatures and setpoints are already in Fahrenheit.
    """

    model_config = ConfigDict(extra="ignore")

    ecobee_thermostat_id: int
    identifier: str | None = None
    name: str | None = None
    temperature: float | None = None
    actual_temperature: float | None = None
    indoor_temperature: float | None = None
    setpoint_heat: float | None = None
    setpoint_cool: float | None = None
    humidity: float | None = None
    hvac_mode: str | None = None
    settings: BeestatSettings | None = None
    running_equipment: list[str] = Field(default_factory=list)
    program: BeestatProgram | None = None

    @field_validator("running_equipment", mode="before")
    @classmethod
    def null_equipment_is_empty(cls, v: Any) -> Any:
        """Beestat reports ``null`` when nothing is running."""
        return [] if v is None else v

    @property
    def display_name(self) -> str:
        """Provider name used for allow-list matching."""
        return self.name or self.identifier or ""


class BeestatResponse(BaseModel):
    """Generic Beestat envelope."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Any = None


class BeestatThermostatResponse(BaseModel):
    """Beestat envelope for ``thermostat.read_id``; data keyed by Beestat id."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: dict[str, BeestatThermostat]

    _raw_devices: dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def keep_raw_devices(self, info: ValidationInfo) -> "BeestatThermostatResponse":
        """Keep the unparsed device payloads for the debug log."""
        raw = info.context.get("raw_devices") if info.context else None
        if isinstance(raw, dict):
            self._raw_devices = raw
        return self

    def raw_device(self, key: str) -> dict[str, Any]:
        """Unparsed payload of one device, as received."""
        return self._raw_devices.get(key, {})

    @field_validator("data", mode="before")
    @classmethod
    def empty_list_is_empty_map(cls, v: Any) -> Any:
        """An account without devices is serialized as ``[]``."""
        return {} if v == [] else v
