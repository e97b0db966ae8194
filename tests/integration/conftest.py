"""Shared fixtures for integration tests."""

import os

import pytest

# Read at collection time; the unit-test env reset clears these per test
WEATHERFLOW_TOKEN = os.getenv("WEATHERFLOW_API_TOKEN") or os.getenv("TEMPEST_API_TOKEN")
WEATHERFLOW_STATION_ID = os.getenv("WEATHERFLOW_STATION_ID", "38335")
BEESTAT_API_KEY = os.getenv("BEESTAT_API_KEY")


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest for integration tests."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring external services"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")


@pytest.fixture(scope="session")
def weatherflow_token() -> str:
    """WeatherFlow token, or skip."""
    if not WEATHERFLOW_TOKEN:
        pytest.skip("WeatherFlow token not configured. Set WEATHERFLOW_API_TOKEN.")
    return WEATHERFLOW_TOKEN


@pytest.fixture(scope="session")
def station_id() -> str:
    return WEATHERFLOW_STATION_ID


@pytest.fixture(scope="session")
def beestat_api_key() -> str:
    """Beestat API key, or skip."""
    if not BEESTAT_API_KEY:
        pytest.skip("Beestat API key not configured. Set BEESTAT_API_KEY.")
    return BEESTAT_API_KEY
