"""Repository pattern implementation for database access.

Provides a typed data access layer that returns canonical Pydantic models.
"""

from src.shared.db.repositories.base import BaseRepository
from src.shared.db.repositories.observation import WeatherObservationRepository, day_bounds
from src.shared.db.repositories.thermostat import ThermostatRepository
from src.shared.db.repositories.weather import WeatherSnapshotRepository

__all__ = [
    "BaseRepository",
    "WeatherObservationRepository",
    "WeatherSnapshotRepository",
    "ThermostatRepository",
    "day_bounds",
]
