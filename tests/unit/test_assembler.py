"""Unit tests for snapshot assembly."""

from datetime import datetime, timedelta, timezone

from src.analytics.weather_metrics import DerivedWeatherMetrics
from src.kiosk.assembler import (
    build_thermostats_response,
    build_weather_response,
    build_weather_snapshot,
)
from src.kiosk.orchestrator import CachedResult, CacheState
from src.shared.models.thermostat import ThermostatMode, ThermostatSnapshotData
from src.shared.models.weather import DailyExtremes, LightningStrike, WeatherReading

NOW = datetime(2024, 7, 1, 16, 0, tzinfo=timezone.utc)


def _reading() -> WeatherReading:
    return WeatherReading(
        station_id="38335",
        station_name="Corner Rock Wx",
        timestamp=NOW - timedelta(minutes=1),
        temperature=84.0,
        humidity=50.0,
        wind_direction=90.0,
        pressure=29.92,
        rain_today=0.25,
    )


def _metrics(lightning: LightningStrike | None = None) -> DerivedWeatherMetrics:
    return DerivedWeatherMetrics(
        extremes=DailyExtremes(
            high=88.0,
            low=66.0,
            high_time=NOW - timedelta(hours=2),
            low_time=NOW - timedelta(hours=10),
        ),
        pressure_trend="rising",
        lightning=lightning,
        wind_direction_cardinal="E",
    )


def _thermostat(name: str, updated: datetime) -> ThermostatSnapshotData:
    return ThermostatSnapshotData(
        thermostat_id=f"beestat-{name}",
        name=name,
        temperature=72.0,
        mode=ThermostatMode.OFF,
        timestamp=updated,
        last_updated=updated,
    )


class TestBuildWeatherSnapshot:
    """Tests for weather snapshot composition."""

    def test_composes_reading_and_metrics(self) -> None:
        snapshot = build_weather_snapshot(_reading(), _metrics(), NOW)

        assert snapshot.temperature_high == 88.0
        assert snapshot.temperature_low == 66.0
        assert snapshot.wind_direction_cardinal == "E"
        assert snapshot.pressure_trend == "rising"
        assert snapshot.rain_today == 0.25
        assert snapshot.last_updated == NOW
        assert snapshot.timestamp == NOW - timedelta(minutes=1)

    def test_no_lightning_is_null(self) -> None:
        snapshot = build_weather_snapshot(_reading(), _metrics(), NOW)

        assert snapshot.lightning_strike_distance is None
        assert snapshot.lightning_strike_time is None

    def test_lightning(self) -> None:
        strike = LightningStrike(distance=3.1, timestamp=NOW - timedelta(minutes=4))

        snapshot = build_weather_snapshot(_reading(), _metrics(strike), NOW)

        assert snapshot.lightning_strike_distance == 3.1
        assert snapshot.lightning_strike_time == strike.timestamp


class TestResponses:
    """Tests for response wrappers."""

    def test_weather_response_carries_provenance(self) -> None:
        snapshot = build_weather_snapshot(_reading(), _metrics(), NOW)
        result = CachedResult(
            value=snapshot,
            state=CacheState.STALE_TRIGGER_REFRESH,
            cached=True,
            stale=True,
            last_updated=NOW,
            error_message="Failed to establish connection",
        )

        response = build_weather_response(result)

        assert response.stale is True
        assert response.cached is True
        assert response.error_message == "Failed to establish connection"
        assert response.weather.station_id == "38335"

    def test_thermostats_last_updated_is_newest_device(self) -> None:
        older = _thermostat("Home", NOW - timedelta(minutes=5))
        newer = _thermostat("Lake", NOW - timedelta(minutes=1))
        result = CachedResult(
            value=[older, newer],
            state=CacheState.FRESH,
            cached=True,
            stale=False,
            last_updated=NOW - timedelta(minutes=10),
        )

        response = build_thermostats_response(result)

        assert response.last_updated == NOW - timedelta(minutes=1)
        assert [t.name for t in response.thermostats] == ["Home", "Lake"]

    def test_empty_thermostats_use_cache_instant(self) -> None:
        result = CachedResult(
            value=[],
            state=CacheState.EMPTY_TRIGGER_REFRESH,
            cached=False,
            stale=False,
            last_updated=NOW,
        )

        response = build_thermostats_response(result)

        assert response.thermostats == []
        assert response.last_updated == NOW
