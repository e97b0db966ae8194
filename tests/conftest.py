"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone

import pytest

from src.shared.db.connection import DatabaseManager

SETTINGS_ENV_PREFIXES = (
    "WEATHERFLOW_",
    "TEMPEST_",
    "BEESTAT_",
    "DATABASE_",
    "DB_",
    "LOG_",
    "TARGET_",
    "DISPLAY_",
    "HTTP_",
    "ENABLE_",
    "ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def reset_settings_env() -> Iterator[None]:
    """Reset environment variables before each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.upper().startswith(SETTINGS_ENV_PREFIXES):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_settings_singleton() -> Iterator[None]:
    """Reset the settings singleton between tests."""
    from src.shared.config import settings as settings_module

    settings_module._settings = None

    yield

    settings_module._settings = None


@pytest.fixture
def db_manager() -> Iterator[DatabaseManager]:
    """In-memory SQLite database with the kiosk schema."""
    manager = DatabaseManager("sqlite://")
    manager.create_schema()
    yield manager
    manager.close()


class FakeClock:
    """Settable clock for cache and orchestrator tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 7, 1, 16, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at 2024-07-01 16:00 UTC."""
    return FakeClock()
