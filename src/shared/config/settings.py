"""Application settings and environment configuration.

Uses pydantic-settings to load and validate configuration from environment
variables with type safety and validation.
"""

from typing import Literal

import pytz
from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Provider credentials are optional: a missing WeatherFlow token fails
    weather requests fast, a missing Beestat key disables thermostats.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    # Database
    database_url: str = Field(
        default="postgresql://localhost/weather_kiosk",
        description="Database connection URL (PostgreSQL or SQLite)",
    )
    db_pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Database connection pool size",
    )
    db_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum overflow connections beyond pool size",
    )
    db_pool_timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Connection pool timeout in seconds",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )

    # WeatherFlow (Tempest) weather station
    weatherflow_api_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("weatherflow_api_token", "tempest_api_token"),
        description="WeatherFlow personal access token",
    )
    weatherflow_api_url: str = Field(
        default="https://swd.weatherflow.com/swd/rest",
        description="WeatherFlow REST API base URL",
    )
    weatherflow_station_id: str = Field(
        default="38335",
        min_length=1,
        description="Default WeatherFlow station identifier",
    )
    weatherflow_station_name: str = Field(
        default="Corner Rock Wx",
        description="Fallback station display name",
    )

    # Beestat (ecobee) thermostats
    beestat_api_key: str | None = Field(
        default=None,
        description="Beestat API key; thermostats are disabled when unset",
    )
    beestat_api_url: str = Field(
        default="https://api.beestat.io/",
        description="Beestat API base URL",
    )
    target_thermostat_names: str = Field(
        default="Downstairs:Home,809 Sailors Cove:Lake",
        description="Comma-separated allow-list of 'name substring[:label]' entries",
    )

    # Time zone used for calendar-day computations
    display_timezone: str = Field(
        default="America/New_York",
        description="IANA time zone for daily extremes",
    )

    # HTTP behaviour
    http_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    http_max_retries: int = Field(default=2, ge=0, le=5)
    http_backoff_factor: float = Field(default=0.5, ge=0.0, le=10.0)

    # Cache and refresh cadence
    weather_cache_ttl_seconds: int = Field(
        default=300,
        ge=10,
        description="How long a weather snapshot is served without refreshing",
    )
    thermostat_cache_ttl_seconds: int = Field(
        default=600,
        ge=10,
        description="How long thermostat data is served without refreshing",
    )
    beestat_min_sync_interval_seconds: int = Field(
        default=180,
        ge=0,
        description="Minimum interval Beestat tolerates between syncs",
    )
    thermostat_refresh_interval_seconds: int = Field(
        default=900,
        ge=30,
        description="Background thermostat refresh interval",
    )
    beestat_sync_settle_seconds: int = Field(
        default=120,
        ge=0,
        le=600,
        description="Wait between requesting a Beestat sync and reading data",
    )
    enable_background_refresh: bool = Field(
        default=True,
        description="Run the background thermostat refresh loop",
    )

    # Derived metrics
    observation_retention_days: int = Field(default=7, ge=1, le=30)
    lightning_lookback_minutes: int = Field(default=30, ge=1, le=24 * 60)
    pressure_trend_window_hours: float = Field(default=3.0, gt=0, le=24)
    pressure_trend_threshold_inhg: float = Field(default=0.03, gt=0, le=1)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL uses a supported scheme."""
        if not v.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite://")):
            raise ValueError("Database URL must use postgresql:// or sqlite:// scheme")
        return v

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, v: str) -> str:
        """Ensure the time zone is a known IANA identifier."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @model_validator(mode="after")
    def validate_thermostat_cadence(self) -> "Settings":
        """Keep thermostat caching consistent with the provider sync limit."""
        if self.thermostat_cache_ttl_seconds < self.beestat_min_sync_interval_seconds:
            raise ValueError(
                "thermostat_cache_ttl_seconds must not be shorter than "
                "beestat_min_sync_interval_seconds"
            )
        if self.thermostat_cache_ttl_seconds >= self.thermostat_refresh_interval_seconds:
            raise ValueError(
                "thermostat_cache_ttl_seconds must be shorter than "
                "thermostat_refresh_interval_seconds"
            )
        if self.thermostat_refresh_interval_seconds < self.beestat_min_sync_interval_seconds:
            raise ValueError(
                "thermostat_refresh_interval_seconds must not be shorter than "
                "beestat_min_sync_interval_seconds"
            )
        return self


# Global settings instance - lazily created
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
