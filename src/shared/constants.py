"""Core constants for the weather kiosk backend.

Canonical units, trend labels, cache keys, and fixed provider conventions.
"""

from typing import Final

# Canonical unit system (all stored values use these)
CANONICAL_TEMPERATURE_UNIT: Final[str] = "fahrenheit"
CANONICAL_SPEED_UNIT: Final[str] = "mph"
CANONICAL_PRESSURE_UNIT: Final[str] = "inHg"
CANONICAL_DISTANCE_UNIT: Final[str] = "miles"
CANONICAL_PRECIPITATION_UNIT: Final[str] = "inches"

# Pressure trend labels
TREND_RISING: Final[str] = "rising"
TREND_FALLING: Final[str] = "falling"
TREND_STEADY: Final[str] = "steady"
PRESSURE_TRENDS: Final[tuple[str, ...]] = (TREND_RISING, TREND_FALLING, TREND_STEADY)

# Cache keys
WEATHER_CACHE_PREFIX: Final[str] = "weather"
THERMOSTAT_CACHE_KEY: Final[str] = "thermostats:current"

# 16-point compass, clockwise from north
CARDINAL_DIRECTIONS: Final[tuple[str, ...]] = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)

# Beestat program climates report setpoints in tenths of a degree
BEESTAT_TENTHS_DIVISOR: Final[float] = 10.0
BEESTAT_THERMOSTAT_ID_PREFIX: Final[str] = "beestat"
OCCUPIED_CLIMATE_REFS: Final[frozenset[str]] = frozenset({"home", "sleep"})

# Setpoint inference deadband (degrees F) when no mode is reported
SETPOINT_INFERENCE_DEADBAND_F: Final[float] = 1.0

# Raw thermostat payloads are diagnostic only
RAW_PAYLOAD_RETENTION_DAYS: Final[int] = 2

# Logging
LOG_LEVEL_DEFAULT: Final[str] = "INFO"
