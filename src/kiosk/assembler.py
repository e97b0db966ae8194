"""Snapshot assembly.

Pure composition of normalized readings, derived metrics and cache
provenance into the canonical objects served to the presentation layer.
No I/O.
"""

from datetime import datetime

from src.analytics.weather_metrics import DerivedWeatherMetrics
from src.kiosk.orchestrator import CachedResult
from src.shared.models.thermostat import ThermostatSnapshotData, ThermostatsResponse
from src.shared.models.weather import WeatherReading, WeatherResponse, WeatherSnapshotData


def build_weather_snapshot(
    reading: WeatherReading,
    metrics: DerivedWeatherMetrics,
    now: datetime,
) -> WeatherSnapshotData:
    """Compose a weather snapshot from a reading and its derived metrics.

    Args:
        reading: Normalized reading
        metrics: Derived metrics for the reading
        now: Refresh instant, recorded as ``last_updated``

    Returns:
        Snapshot replacing the station's previous one
    """
    lightning = metrics.lightning
    return WeatherSnapshotData(
        station_id=reading.station_id,
        station_name=reading.station_name,
        timestamp=reading.timestamp,
        temperature=reading.temperature,
        feels_like=reading.feels_like,
        temperature_high=metrics.extremes.high,
        temperature_low=metrics.extremes.low,
        temperature_high_time=metrics.extremes.high_time,
        temperature_low_time=metrics.extremes.low_time,
        wind_speed=reading.wind_speed,
        wind_gust=reading.wind_gust,
        wind_direction=reading.wind_direction,
        wind_direction_cardinal=metrics.wind_direction_cardinal,
        pressure=reading.pressure,
        pressure_trend=metrics.pressure_trend,
        humidity=reading.humidity,
        uv_index=reading.uv_index,
        dew_point=reading.dew_point,
        rain_today=reading.rain_today,
        rain_yesterday=reading.rain_yesterday,
        lightning_strike_distance=lightning.distance if lightning else None,
        lightning_strike_time=lightning.timestamp if lightning else None,
        last_updated=now,
    )


def build_weather_response(result: CachedResult[WeatherSnapshotData]) -> WeatherResponse:
    """Wrap a weather snapshot with its cache provenance."""
    return WeatherResponse(
        weather=result.value,
        cached=result.cached,
        stale=result.stale,
        error_message=result.error_message,
    )


def build_thermostats_response(
    result: CachedResult[list[ThermostatSnapshotData]],
) -> ThermostatsResponse:
    """Wrap the thermostat set with its cache provenance.

    ``last_updated`` is the newest device update, else the cache instant.
    """
    thermostats = list(result.value)
    last_updated = max(
        (t.last_updated for t in thermostats),
        default=result.last_updated,
    )
    return ThermostatsResponse(
        thermostats=thermostats,
        cached=result.cached,
        stale=result.stale,
        last_updated=last_updated,
        error_message=result.error_message,
    )
