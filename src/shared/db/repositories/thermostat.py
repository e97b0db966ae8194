"""Thermostat snapshot repository.

One row per thermostat id, replaced on each refresh, plus an append-only
raw payload log kept for diagnosis.
"""

from datetime import timedelta
from typing import Any

from sqlalchemy import asc, delete, select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import ThermostatPayload, ThermostatSnapshot
from src.shared.db.repositories.base import BaseRepository
from src.shared.models.thermostat import ThermostatSnapshotData

logger = get_logger(__name__)


class ThermostatRepository(BaseRepository[ThermostatSnapshot]):
    """Repository for thermostat snapshots and raw payloads.

    Example:
        >>> repo = ThermostatRepository(db_manager)
        >>> repo.upsert(snapshot)
        >>> repo.get_all()
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize thermostat repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, ThermostatSnapshot)

    def upsert(self, data: ThermostatSnapshotData) -> ThermostatSnapshotData:
        """Insert or replace the snapshot for ``data.thermostat_id``.

        Args:
            data: New snapshot

        Returns:
            Persisted snapshot
        """
        values = data.model_dump()
        values["mode"] = data.mode.value
        with self._db.session() as session:
            row = session.execute(
                select(ThermostatSnapshot).where(
                    ThermostatSnapshot.thermostat_id == data.thermostat_id
                )
            ).scalar_one_or_none()
            if row is None:
                row = ThermostatSnapshot(**values)
                session.add(row)
            else:
                for field, value in values.items():
                    setattr(row, field, value)
            session.flush()
            saved = ThermostatSnapshotData.model_validate(row)

        logger.debug("thermostat_snapshot_saved", thermostat_id=data.thermostat_id)
        return saved

    def get_all(self) -> list[ThermostatSnapshotData]:
        """Get every stored thermostat snapshot, ordered by label."""
        with self._db.session() as session:
            rows = session.execute(
                select(ThermostatSnapshot).order_by(asc(ThermostatSnapshot.name))
            ).scalars().all()
            return [ThermostatSnapshotData.model_validate(r) for r in rows]

    def save_raw_payload(self, thermostat_id: str, payload: dict[str, Any]) -> None:
        """Append a raw provider payload to the debug log.

        Args:
            thermostat_id: Canonical thermostat id
            payload: Provider JSON for the device
        """
        with self._db.session() as session:
            session.add(
                ThermostatPayload(
                    thermostat_id=thermostat_id,
                    payload=payload,
                    captured_at=self._utc_now(),
                )
            )

    def count_raw_payloads(self, thermostat_id: str | None = None) -> int:
        """Count raw payload rows, optionally for one thermostat."""
        with self._db.session() as session:
            stmt = select(ThermostatPayload.id)
            if thermostat_id is not None:
                stmt = stmt.where(ThermostatPayload.thermostat_id == thermostat_id)
            return len(session.execute(stmt).all())

    def purge_raw_payloads(self, days: int) -> int:
        """Delete raw payloads older than ``days`` days.

        Returns:
            Number of records deleted
        """
        cutoff = self._utc_now() - timedelta(days=days)
        with self._db.session() as session:
            count = session.execute(
                delete(ThermostatPayload).where(ThermostatPayload.captured_at < cutoff)
            ).rowcount

        logger.info("old_thermostat_payloads_deleted", days=days, count=count)
        return count
