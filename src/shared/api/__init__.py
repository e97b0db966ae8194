"""API clients for upstream providers."""

from src.shared.api.beestat import BeestatClient
from src.shared.api.cache import CacheEntry, TTLCache
from src.shared.api.errors import (
    ConfigurationError,
    ErrorCode,
    KioskError,
    NoDataError,
    UnsupportedUnitError,
    UpstreamConnectionError,
    UpstreamFetchError,
    UpstreamFormatError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
    classify_error,
    is_recoverable,
)
from src.shared.api.weatherflow import WeatherFlowClient

__all__ = [
    "WeatherFlowClient",
    "BeestatClient",
    "CacheEntry",
    "TTLCache",
    "KioskError",
    "ConfigurationError",
    "UpstreamFetchError",
    "UpstreamTimeoutError",
    "UpstreamConnectionError",
    "UpstreamHTTPError",
    "UpstreamFormatError",
    "NoDataError",
    "UnsupportedUnitError",
    "ErrorCode",
    "classify_error",
    "is_recoverable",
]
