"""Base repository class with common database operations."""

from datetime import datetime, timezone
from typing import Generic, TypeVar

from sqlalchemy import func, select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import Base

logger = get_logger(__name__)

# Generic type for ORM models
T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common operations.

    Provides a consistent interface for database operations; subclasses
    convert rows into canonical Pydantic models before returning.
    """

    def __init__(self, db_manager: DatabaseManager, model_class: type[T]) -> None:
        """Initialize repository.

        Args:
            db_manager: Database manager instance
            model_class: SQLAlchemy model class for this repository
        """
        self._db = db_manager
        self._model_class = model_class
        self._table_name = model_class.__tablename__
        logger.debug("repository_initialized", table=self._table_name)

    @property
    def model_class(self) -> type[T]:
        """Get the model class for this repository."""
        return self._model_class

    def count(self) -> int:
        """Count total records in table.

        Returns:
            Total record count
        """
        with self._db.session() as session:
            stmt = select(func.count()).select_from(self._model_class)
            return int(session.execute(stmt).scalar_one())

    @staticmethod
    def _utc_now() -> datetime:
        """Get current UTC timestamp.

        Returns:
            Timezone-aware datetime in UTC
        """
        return datetime.now(timezone.utc)
