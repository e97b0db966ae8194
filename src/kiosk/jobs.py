"""Background thermostat refresh loop.

Each cycle asks Beestat to sync from ecobee, waits for the sync to land,
forces a thermostat refresh through the orchestrator (sharing the request
path's coalescing guard), then runs the retention sweeps.

Run standalone with ``python -m src.kiosk.jobs``.
"""

import signal
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import FrameType

from sqlalchemy.exc import SQLAlchemyError

from src.kiosk.api import KioskAPI, create_kiosk_api
from src.shared.api.errors import KioskError
from src.shared.config.logging import configure_logging, get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import RAW_PAYLOAD_RETENTION_DAYS
from src.shared.db.connection import get_db

logger = get_logger(__name__)


@dataclass
class RefreshCycleResult:
    """Outcome of one background cycle."""

    started_at: datetime
    completed_at: datetime | None = None
    sync_requested: bool = False
    thermostats_refreshed: int = 0
    observations_purged: int = 0
    payloads_purged: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the cycle completed without errors."""
        return not self.errors


class ThermostatRefreshJob:
    """Periodic thermostat refresh running in a daemon thread."""

    def __init__(self, api: KioskAPI, settings: Settings | None = None) -> None:
        """Initialize refresh job.

        Args:
            api: Kiosk API whose orchestrator and stores the job drives
            settings: Settings (defaults to process settings)
        """
        self.api = api
        self.settings = settings or get_settings()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the loop thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def run_cycle(self) -> RefreshCycleResult:
        """Run one sync, refresh and retention cycle.

        Failures of one step are logged and recorded; later steps still run.

        Returns:
            Cycle result
        """
        result = RefreshCycleResult(started_at=datetime.now(timezone.utc))

        try:
            result.sync_requested = self.api.thermostat_adapter.request_sync()
        except KioskError as e:
            result.errors.append(f"sync: {e.message}")

        if result.sync_requested and self._stop_event.wait(
            self.settings.beestat_sync_settle_seconds
        ):
            logger.info("refresh_cycle_interrupted")
            result.completed_at = datetime.now(timezone.utc)
            return result

        try:
            response = self.api.current_thermostats(force_refresh=True)
            result.thermostats_refreshed = len(response.thermostats)
            if response.stale:
                result.errors.append(f"refresh: {response.error_message}")
        except KioskError as e:
            result.errors.append(f"refresh: {e.message}")
        except SQLAlchemyError as e:
            result.errors.append(f"refresh: {e}")

        try:
            result.observations_purged = self.api.observations.purge_older_than(
                self.settings.observation_retention_days,
                self.settings.display_timezone,
            )
            result.payloads_purged = self.api.thermostats.purge_raw_payloads(
                RAW_PAYLOAD_RETENTION_DAYS
            )
        except SQLAlchemyError as e:
            result.errors.append(f"retention: {e}")

        result.completed_at = datetime.now(timezone.utc)
        log = logger.info if result.success else logger.warning
        log(
            "refresh_cycle_completed",
            sync_requested=result.sync_requested,
            thermostats=result.thermostats_refreshed,
            observations_purged=result.observations_purged,
            payloads_purged=result.payloads_purged,
            errors=result.errors,
        )
        return result

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_cycle()
            except Exception as e:
                logger.error("refresh_cycle_error", error=str(e), exc_info=True)
            self._stop_event.wait(self.settings.thermostat_refresh_interval_seconds)

    def start(self) -> None:
        """Start the loop in a daemon thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop, name="thermostat-background-refresh", daemon=True
        )
        self._thread.start()
        logger.info(
            "thermostat_refresh_job_started",
            interval_seconds=self.settings.thermostat_refresh_interval_seconds,
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("thermostat_refresh_job_stopped")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stopped; True if the stop signal was set."""
        return self._stop_event.wait(timeout)


def main() -> None:
    """Run the kiosk service with its background refresh loop."""
    configure_logging()
    settings = get_settings()

    db = get_db()
    db.create_schema()
    api = create_kiosk_api(db, settings)
    job = ThermostatRefreshJob(api, settings)

    def _shutdown(signum: int, frame: FrameType | None) -> None:
        logger.info("shutdown_signal_received", signal=signum)
        job.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    if settings.enable_background_refresh:
        job.start()
        job.wait()
    else:
        logger.warning("background_refresh_disabled")
    api.close()
    db.close()


if __name__ == "__main__":
    main()
