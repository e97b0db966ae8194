"""Kiosk read API for the presentation layer.

Wires adapters, the observation store, derived metrics and the refresh
orchestrator into the read operations the dashboard polls. Can be used
directly or wrapped in an HTTP framework.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from src.adapters.thermostat import ThermostatAdapter
from src.adapters.weather import WeatherAdapter
from src.analytics.weather_metrics import WeatherMetricsEngine
from src.kiosk.assembler import (
    build_thermostats_response,
    build_weather_response,
    build_weather_snapshot,
)
from src.kiosk.orchestrator import RefreshOrchestrator
from src.shared.api.cache import TTLCache
from src.shared.api.errors import KioskError, StoreUnavailableError
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import THERMOSTAT_CACHE_KEY, WEATHER_CACHE_PREFIX
from src.shared.db import get_kiosk_repositories
from src.shared.db.connection import DatabaseManager
from src.shared.db.repositories.observation import WeatherObservationRepository
from src.shared.db.repositories.thermostat import ThermostatRepository
from src.shared.db.repositories.weather import WeatherSnapshotRepository
from src.shared.models.thermostat import ThermostatSnapshotData, ThermostatsResponse
from src.shared.models.weather import WeatherResponse, WeatherSnapshotData

logger = get_logger(__name__)


def weather_cache_key(station_id: str) -> str:
    """Cache key of a station's weather snapshot."""
    return f"{WEATHER_CACHE_PREFIX}:{station_id}"


@dataclass
class APIResponse:
    """Standard API response wrapper."""

    success: bool
    data: Any = None
    error: str | None = None
    timestamp: datetime = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


class KioskAPI:
    """Read operations for the weather/thermostat dashboard.

    ``current_weather`` and ``current_thermostats`` return canonical models
    and raise typed errors; the ``get_*`` methods wrap every operation in an
    APIResponse with a human-readable error on failure.
    """

    def __init__(
        self,
        weather_adapter: WeatherAdapter,
        thermostat_adapter: ThermostatAdapter,
        observations: WeatherObservationRepository,
        weather_snapshots: WeatherSnapshotRepository,
        thermostats: ThermostatRepository,
        orchestrator: RefreshOrchestrator | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize kiosk API.

        Args:
            weather_adapter: WeatherFlow adapter
            thermostat_adapter: Beestat adapter
            observations: Observation store
            weather_snapshots: Latest weather snapshot store
            thermostats: Thermostat snapshot store
            orchestrator: Refresh orchestrator (a new one if not provided)
            settings: Settings (defaults to process settings)
        """
        self.settings = settings or get_settings()
        self.weather_adapter = weather_adapter
        self.thermostat_adapter = thermostat_adapter
        self.observations = observations
        self.weather_snapshots = weather_snapshots
        self.thermostats = thermostats
        self.orchestrator = orchestrator if orchestrator is not None else RefreshOrchestrator()
        self.metrics = WeatherMetricsEngine(observations, self.settings)
        logger.info("kiosk_api_initialized", station_id=self.settings.weatherflow_station_id)

    def _now(self) -> datetime:
        return self.orchestrator.cache.now()

    # ------------------------------------------------------------------
    # Refresh paths (run inside the orchestrator)
    # ------------------------------------------------------------------

    def refresh_weather(self, station_id: str) -> WeatherSnapshotData:
        """Fetch, record, derive and persist a new weather snapshot.

        Raises:
            StoreUnavailableError: If the store fails during the refresh
        """
        try:
            reading = self.weather_adapter.fetch_and_record(station_id)
            now = self._now()
            snapshot = build_weather_snapshot(reading, self.metrics.compute(reading, now), now)
            return self.weather_snapshots.upsert(snapshot)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                message="Weather store unavailable",
                details={"station_id": station_id, "error": str(e)},
            ) from e

    def refresh_thermostats(self) -> list[ThermostatSnapshotData]:
        """Fetch, resolve and persist the allow-listed thermostats.

        Raises:
            StoreUnavailableError: If the store fails during the refresh
        """
        try:
            snapshots = self.thermostat_adapter.fetch_all(now=self._now())
            return [self.thermostats.upsert(snapshot) for snapshot in snapshots]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                message="Thermostat store unavailable",
                details={"error": str(e)},
            ) from e

    # ------------------------------------------------------------------
    # Typed reads
    # ------------------------------------------------------------------

    def current_weather(
        self,
        station_id: str | None = None,
        force_refresh: bool = False,
    ) -> WeatherResponse:
        """Current weather for a station, per the cache policy.

        Raises:
            ConfigurationError: If the WeatherFlow token is missing
            NoDataError: If the refresh failed and nothing is cached
        """
        station_id = station_id or self.settings.weatherflow_station_id
        result = self.orchestrator.get(
            weather_cache_key(station_id),
            lambda: self.refresh_weather(station_id),
            ttl_seconds=self.settings.weather_cache_ttl_seconds,
            force_refresh=force_refresh,
        )
        return build_weather_response(result)

    def current_thermostats(self, force_refresh: bool = False) -> ThermostatsResponse:
        """Current allow-listed thermostats, per the cache policy.

        Raises:
            NoDataError: If the refresh failed and nothing is cached
        """
        result = self.orchestrator.get(
            THERMOSTAT_CACHE_KEY,
            self.refresh_thermostats,
            ttl_seconds=self.settings.thermostat_cache_ttl_seconds,
            force_refresh=force_refresh,
        )
        return build_thermostats_response(result)

    # ------------------------------------------------------------------
    # Presentation operations
    # ------------------------------------------------------------------

    def _respond(self, event: str, operation: Callable[[], Any]) -> APIResponse:
        try:
            return APIResponse(success=True, data=operation())
        except KioskError as e:
            logger.error(event, error=e.message, error_code=e.error_code.name)
            return APIResponse(success=False, error=e.message)
        except SQLAlchemyError as e:
            logger.error(event, error=str(e))
            return APIResponse(success=False, error="Weather store unavailable")

    def get_current_weather(
        self,
        station_id: str | None = None,
        force_refresh: bool = False,
    ) -> APIResponse:
        """Get current weather.

        Args:
            station_id: Station identifier (defaults to settings)
            force_refresh: Bypass the cache freshness check

        Returns:
            APIResponse with the weather snapshot and cached/stale flags
        """
        return self._respond(
            "current_weather_failed",
            lambda: self.current_weather(station_id, force_refresh).model_dump(mode="json"),
        )

    def get_weather_history(self, station_id: str | None = None, hours: float = 24) -> APIResponse:
        """Get observations from the last ``hours`` hours, oldest first."""
        if hours <= 0:
            return APIResponse(success=False, error="hours must be positive")
        station_id = station_id or self.settings.weatherflow_station_id
        return self._respond(
            "weather_history_failed",
            lambda: [
                o.model_dump(mode="json")
                for o in self.observations.get_history(station_id, hours, now=self._now())
            ],
        )

    def get_weather_history_since(
        self,
        since: datetime,
        station_id: str | None = None,
    ) -> APIResponse:
        """Get observations at or after ``since``, oldest first."""
        if since.tzinfo is None:
            return APIResponse(success=False, error="since must include a timezone")
        station_id = station_id or self.settings.weatherflow_station_id
        return self._respond(
            "weather_history_failed",
            lambda: [
                o.model_dump(mode="json")
                for o in self.observations.get_history_since(station_id, since)
            ],
        )

    def get_current_thermostats(self, force_refresh: bool = False) -> APIResponse:
        """Get current thermostats.

        Args:
            force_refresh: Bypass the cache freshness check

        Returns:
            APIResponse with thermostats and cached/stale flags
        """
        return self._respond(
            "current_thermostats_failed",
            lambda: self.current_thermostats(force_refresh).model_dump(mode="json"),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def warm_cache(self) -> int:
        """Seed the cache from persisted snapshots.

        Each entry keeps its ``last_updated`` as insertion instant, so old
        snapshots are expired but still available as a stale fallback.

        Returns:
            Number of cache entries seeded
        """
        seeded = 0
        for station_id, snapshot in self.weather_snapshots.get_all_latest().items():
            self.orchestrator.seed(
                weather_cache_key(station_id),
                snapshot,
                self.settings.weather_cache_ttl_seconds,
                inserted_at=snapshot.last_updated,
            )
            seeded += 1

        labels = {target.label for target in self.thermostat_adapter.targets.targets}
        stored = [t for t in self.thermostats.get_all() if t.name in labels]
        if stored:
            self.orchestrator.seed(
                THERMOSTAT_CACHE_KEY,
                stored,
                self.settings.thermostat_cache_ttl_seconds,
                inserted_at=min(t.last_updated for t in stored),
            )
            seeded += 1

        logger.info("cache_warm_start_completed", entries=seeded)
        return seeded

    def close(self) -> None:
        """Release HTTP sessions and worker threads."""
        self.orchestrator.shutdown()
        self.weather_adapter.client.close()
        self.thermostat_adapter.client.close()


def create_kiosk_api(
    db_manager: DatabaseManager | None = None,
    settings: Settings | None = None,
    cache: TTLCache | None = None,
    warm_start: bool = True,
) -> KioskAPI:
    """Factory function to create a fully wired KioskAPI.

    Args:
        db_manager: Database manager (global instance if not provided)
        settings: Settings (defaults to process settings)
        cache: Cache for the orchestrator (a new one if not provided)
        warm_start: Seed the cache from persisted snapshots

    Returns:
        Configured KioskAPI instance
    """
    settings = settings or get_settings()
    observations, weather_snapshots, thermostats = get_kiosk_repositories(db_manager)

    api = KioskAPI(
        weather_adapter=WeatherAdapter(observations=observations, settings=settings),
        thermostat_adapter=ThermostatAdapter(repository=thermostats, settings=settings),
        observations=observations,
        weather_snapshots=weather_snapshots,
        thermostats=thermostats,
        orchestrator=RefreshOrchestrator(cache),
        settings=settings,
    )
    if warm_start:
        api.warm_cache()
    return api
