"""Derived metrics: weather extremes, trends and thermostat mode resolution."""

from src.analytics.thermostat_mode import (
    MODE_RULES,
    ResolvedMode,
    ThermostatInputs,
    resolve_mode,
)
from src.analytics.weather_metrics import (
    DerivedWeatherMetrics,
    WeatherMetricsEngine,
    classify_pressure_trend,
    degrees_to_cardinal,
    merge_daily_extremes,
    resolve_pressure_trend,
)

__all__ = [
    # Thermostat mode
    "MODE_RULES",
    "ResolvedMode",
    "ThermostatInputs",
    "resolve_mode",
    # Weather metrics
    "DerivedWeatherMetrics",
    "WeatherMetricsEngine",
    "classify_pressure_trend",
    "degrees_to_cardinal",
    "merge_daily_extremes",
    "resolve_pressure_trend",
]
