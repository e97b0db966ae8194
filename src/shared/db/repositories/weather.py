"""Weather snapshot repository.

Keeps one latest snapshot per station, replaced wholesale on each refresh.
"""

from sqlalchemy import select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import WeatherSnapshot
from src.shared.db.repositories.base import BaseRepository
from src.shared.models.weather import WeatherSnapshotData

logger = get_logger(__name__)


class WeatherSnapshotRepository(BaseRepository[WeatherSnapshot]):
    """Repository for the latest weather snapshot per station."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize weather snapshot repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, WeatherSnapshot)

    def upsert(self, data: WeatherSnapshotData) -> WeatherSnapshotData:
        """Insert or replace the snapshot for ``data.station_id``.

        Args:
            data: New snapshot

        Returns:
            Persisted snapshot
        """
        values = data.model_dump()
        with self._db.session() as session:
            row = session.execute(
                select(WeatherSnapshot).where(WeatherSnapshot.station_id == data.station_id)
            ).scalar_one_or_none()
            if row is None:
                row = WeatherSnapshot(**values)
                session.add(row)
            else:
                for field, value in values.items():
                    setattr(row, field, value)
            session.flush()
            saved = WeatherSnapshotData.model_validate(row)

        logger.info("weather_snapshot_saved", station_id=data.station_id)
        return saved

    def get_latest(self, station_id: str) -> WeatherSnapshotData | None:
        """Get the current snapshot for a station.

        Args:
            station_id: Station identifier

        Returns:
            Snapshot or None if the station has never been fetched
        """
        with self._db.session() as session:
            row = session.execute(
                select(WeatherSnapshot).where(WeatherSnapshot.station_id == station_id)
            ).scalar_one_or_none()
            return WeatherSnapshotData.model_validate(row) if row else None

    def get_all_latest(self) -> dict[str, WeatherSnapshotData]:
        """Get the current snapshot of every station.

        Returns:
            Dictionary mapping station ids to snapshots
        """
        with self._db.session() as session:
            rows = session.execute(select(WeatherSnapshot)).scalars().all()
            return {r.station_id: WeatherSnapshotData.model_validate(r) for r in rows}
