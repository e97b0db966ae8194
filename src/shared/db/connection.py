"""Database connection manager with health checks and connection pooling."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from src.shared.config.logging import get_logger
from src.shared.config.settings import get_settings
from src.shared.db.models import Base

logger = get_logger(__name__)


class DatabaseManager:
    """Manages database connections with pooling and health checks.

    PostgreSQL uses a QueuePool sized from settings. SQLite URLs (used by
    tests and single-box kiosks) share one connection across threads.
    """

    def __init__(self, database_url: str | None = None) -> None:
        """Initialize database manager.

        Args:
            database_url: Database connection string. If None, loads from settings.
        """
        settings = get_settings()
        self._database_url = database_url or settings.database_url

        if self._database_url.startswith("sqlite"):
            self._engine: Engine = create_engine(
                self._database_url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=False,
            )
        else:
            self._engine = create_engine(
                self._database_url,
                poolclass=QueuePool,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_pre_ping=True,  # Verify connections before using
                echo=False,
            )

        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        logger.info(
            "database_manager_initialized",
            dialect=self._engine.dialect.name,
            pool_size=settings.db_pool_size,
        )

    @property
    def engine(self) -> Engine:
        """Get SQLAlchemy engine."""
        return self._engine

    def create_schema(self) -> None:
        """Create all kiosk tables that do not exist yet."""
        Base.metadata.create_all(self._engine)
        logger.info("database_schema_created", tables=sorted(Base.metadata.tables))

    def health_check(self) -> bool:
        """Check if database is reachable.

        Returns:
            True if database connection successful, False otherwise
        """
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.debug("database_health_check_passed")
            return True
        except SQLAlchemyError as e:
            logger.error("database_health_check_failed", error=str(e))
            return False

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional scope for database operations.

        Yields:
            SQLAlchemy session

        Example:
            with db_manager.session() as session:
                session.add(model)
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close all database connections and dispose of engine.

        Should be called during graceful shutdown.
        """
        logger.info("closing_database_connections")
        self._engine.dispose()


# Global database manager instance
_db_manager: DatabaseManager | None = None


def get_db() -> DatabaseManager:
    """Get or create global database manager instance.

    Returns:
        DatabaseManager singleton instance
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
