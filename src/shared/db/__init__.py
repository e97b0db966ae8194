"""Database connection, models, and repository pattern implementation."""

from src.shared.db.connection import DatabaseManager, get_db
from src.shared.db.models import (
    Base,
    ThermostatPayload,
    ThermostatSnapshot,
    WeatherObservation,
    WeatherSnapshot,
)
from src.shared.db.repositories import (
    BaseRepository,
    ThermostatRepository,
    WeatherObservationRepository,
    WeatherSnapshotRepository,
)


def get_kiosk_repositories(
    db_manager: DatabaseManager | None = None,
) -> tuple[WeatherObservationRepository, WeatherSnapshotRepository, ThermostatRepository]:
    """Get all repository instances used by the kiosk service.

    Args:
        db_manager: Optional DatabaseManager. If not provided, uses get_db().

    Returns:
        Tuple of (WeatherObservationRepository, WeatherSnapshotRepository,
                  ThermostatRepository)
    """
    db = db_manager or get_db()
    return (
        WeatherObservationRepository(db),
        WeatherSnapshotRepository(db),
        ThermostatRepository(db),
    )


__all__ = [
    # Connection management
    "DatabaseManager",
    "get_db",
    # ORM Base and Models
    "Base",
    "WeatherSnapshot",
    "WeatherObservation",
    "ThermostatSnapshot",
    "ThermostatPayload",
    # Repositories
    "BaseRepository",
    "WeatherObservationRepository",
    "WeatherSnapshotRepository",
    "ThermostatRepository",
    # Factory functions
    "get_kiosk_repositories",
]
