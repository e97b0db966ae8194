"""SQLAlchemy ORM models for the kiosk store.

Defines tables for the latest weather snapshot per station, the weather
observation time series, the latest thermostat snapshot per device, and
the raw thermostat payload debug log.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    SQLite drops tzinfo on read; values come back tagged as UTC on every
    backend so comparisons against aware datetimes stay valid.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("Naive datetime cannot be stored; attach a timezone")
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# ============================================================================
# Weather
# ============================================================================


class WeatherSnapshot(Base):
    """Latest weather state for a station (one row per station)."""

    __tablename__ = "weather_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    station_name: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    feels_like: Mapped[float | None] = mapped_column(Float, nullable=True)
    temperature_high: Mapped[float] = mapped_column(Float, nullable=False)
    temperature_low: Mapped[float] = mapped_column(Float, nullable=False)
    temperature_high_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    temperature_low_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    wind_speed: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_gust: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_direction: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_direction_cardinal: Mapped[str | None] = mapped_column(String(3), nullable=True)
    pressure: Mapped[float | None] = mapped_column(Float, nullable=True)
    pressure_trend: Mapped[str | None] = mapped_column(String(10), nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    uv_index: Mapped[float | None] = mapped_column(Float, nullable=True)
    dew_point: Mapped[float | None] = mapped_column(Float, nullable=True)
    rain_today: Mapped[float | None] = mapped_column(Float, nullable=True)
    rain_yesterday: Mapped[float | None] = mapped_column(Float, nullable=True)
    lightning_strike_distance: Mapped[float | None] = mapped_column(Float, nullable=True)
    lightning_strike_time: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_utc_now
    )


class WeatherObservation(Base):
    """One immutable station observation; insert-only."""

    __tablename__ = "weather_observations"
    __table_args__ = (Index("idx_observation_station_ts", "station_id", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station_id: Mapped[str] = mapped_column(String(32), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    pressure: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_speed: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_gust: Mapped[float | None] = mapped_column(Float, nullable=True)
    wind_direction: Mapped[float | None] = mapped_column(Float, nullable=True)
    uv_index: Mapped[float | None] = mapped_column(Float, nullable=True)
    dew_point: Mapped[float | None] = mapped_column(Float, nullable=True)
    rain_accumulation: Mapped[float | None] = mapped_column(Float, nullable=True)
    lightning_strike_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lightning_strike_distance: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=_utc_now)


# ============================================================================
# Thermostats
# ============================================================================


class ThermostatSnapshot(Base):
    """Latest resolved state for a thermostat (one row per device)."""

    __tablename__ = "thermostat_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thermostat_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    target_temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)
    mode: Mapped[str] = mapped_column(String(10), nullable=False)
    hvac_state: Mapped[str | None] = mapped_column(String(255), nullable=True)
    occupied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_utc_now
    )


class ThermostatPayload(Base):
    """Raw provider payload kept for diagnosis; purged after a short window."""

    __tablename__ = "thermostat_payloads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thermostat_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    captured_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=_utc_now, index=True
    )
