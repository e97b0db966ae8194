"""Centralized error handling for upstream providers and the read path.

Provides custom exception hierarchy with error codes, retry hints,
and structured logging integration.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import requests
from pydantic import ValidationError

from src.shared.config.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(Enum):
    """Error codes for kiosk exceptions."""

    # Network errors (1xxx)
    NETWORK_TIMEOUT = 1001
    NETWORK_CONNECTION = 1002

    # HTTP errors (2xxx)
    HTTP_BAD_REQUEST = 2400
    HTTP_UNAUTHORIZED = 2401
    HTTP_FORBIDDEN = 2403
    HTTP_NOT_FOUND = 2404
    HTTP_RATE_LIMIT = 2429
    HTTP_SERVER_ERROR = 2500
    HTTP_BAD_GATEWAY = 2502
    HTTP_SERVICE_UNAVAILABLE = 2503
    HTTP_GATEWAY_TIMEOUT = 2504

    # Configuration errors (3xxx)
    CONFIG_MISSING_CREDENTIAL = 3001
    CONFIG_INVALID = 3002

    # Data errors (4xxx)
    DATA_INVALID_RESPONSE = 4001
    DATA_PARSE_ERROR = 4002
    DATA_VALIDATION_ERROR = 4003

    # Availability errors (5xxx)
    NO_DATA = 5001
    STORE_UNAVAILABLE = 5002

    # Unit errors (6xxx)
    UNIT_UNSUPPORTED = 6001

    # Unknown/Other
    UNKNOWN_ERROR = 9999


class KioskError(Exception):
    """Base exception for all kiosk errors.

    Provides structured error information including error codes,
    retry hints, and context for logging.
    """

    log_event = "kiosk_error"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        retryable: bool = False,
        endpoint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize kiosk error.

        Args:
            message: Human-readable error message
            error_code: Structured error code
            retryable: Whether the operation can be retried
            endpoint: Upstream endpoint that failed
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.retryable = retryable
        self.endpoint = endpoint
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

        logger.error(
            self.log_event,
            error_code=error_code.name,
            message=message,
            retryable=retryable,
            endpoint=endpoint,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization.

        Returns:
            Dictionary representation of error
        """
        return {
            "error_code": self.error_code.name,
            "error_value": self.error_code.value,
            "message": self.message,
            "retryable": self.retryable,
            "endpoint": self.endpoint,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(KioskError):
    """Missing or invalid configuration (e.g. provider credential). Never retried."""

    log_event = "configuration_error"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_MISSING_CREDENTIAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            retryable=False,
            details=details,
        )


class UpstreamFetchError(KioskError):
    """Failure talking to a provider (network, timeout, HTTP status)."""

    log_event = "upstream_fetch_error"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.NETWORK_CONNECTION,
        endpoint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            retryable=True,
            endpoint=endpoint,
            details=details,
        )


class UpstreamTimeoutError(UpstreamFetchError):
    """Request timeout error."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout_seconds: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if timeout_seconds is not None:
            details["timeout_seconds"] = timeout_seconds

        super().__init__(
            message=(
                f"Request timed out after {timeout_seconds}s"
                if timeout_seconds
                else "Request timed out"
            ),
            error_code=ErrorCode.NETWORK_TIMEOUT,
            endpoint=endpoint,
            details=details,
        )


class UpstreamConnectionError(UpstreamFetchError):
    """Connection failure error."""

    def __init__(
        self,
        endpoint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message="Failed to establish connection",
            error_code=ErrorCode.NETWORK_CONNECTION,
            endpoint=endpoint,
            details=details,
        )


class UpstreamHTTPError(UpstreamFetchError):
    """HTTP status code errors (4xx, 5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: str | None = None,
        response_body: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize HTTP error.

        Args:
            message: Error message
            status_code: HTTP status code
            endpoint: Failed endpoint
            response_body: Response body text (truncated)
            details: Additional context
        """
        details = details or {}
        details["status_code"] = status_code
        if response_body:
            details["response_body"] = response_body[:200]

        super().__init__(
            message=message,
            error_code=self._error_code_from_status(status_code),
            endpoint=endpoint,
            details=details,
        )
        self.status_code = status_code
        self.retryable = status_code in [429, 500, 502, 503, 504]

    @staticmethod
    def _error_code_from_status(status_code: int) -> ErrorCode:
        """Map HTTP status code to error code."""
        mapping = {
            400: ErrorCode.HTTP_BAD_REQUEST,
            401: ErrorCode.HTTP_UNAUTHORIZED,
            403: ErrorCode.HTTP_FORBIDDEN,
            404: ErrorCode.HTTP_NOT_FOUND,
            429: ErrorCode.HTTP_RATE_LIMIT,
            500: ErrorCode.HTTP_SERVER_ERROR,
            502: ErrorCode.HTTP_BAD_GATEWAY,
            503: ErrorCode.HTTP_SERVICE_UNAVAILABLE,
            504: ErrorCode.HTTP_GATEWAY_TIMEOUT,
        }
        return mapping.get(status_code, ErrorCode.UNKNOWN_ERROR)


class UpstreamFormatError(KioskError):
    """Provider responded but the payload did not match the expected shape."""

    log_event = "upstream_format_error"

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATA_VALIDATION_ERROR,
        endpoint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            retryable=False,
            endpoint=endpoint,
            details=details,
        )


class NoDataError(KioskError):
    """No cached data and no successful fetch. Terminal for the caller."""

    log_event = "no_data_error"

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if resource:
            details["resource"] = resource

        super().__init__(
            message=message,
            error_code=ErrorCode.NO_DATA,
            retryable=False,
            details=details,
        )


class StoreUnavailableError(KioskError):
    """Persisting or reading refreshed data failed in the durable store."""

    log_event = "store_unavailable_error"

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.STORE_UNAVAILABLE,
            retryable=True,
            details=details,
        )


class UnsupportedUnitError(KioskError, ValueError):
    """Unit tag not recognised for the requested quantity kind."""

    log_event = "unsupported_unit_error"

    def __init__(self, unit: str, kind: str | None = None) -> None:
        super().__init__(
            message=(
                f"Unsupported {kind} unit: {unit}" if kind else f"Unsupported unit: {unit}"
            ),
            error_code=ErrorCode.UNIT_UNSUPPORTED,
            details={"unit": unit, "kind": kind},
        )
        self.unit = unit
        self.kind = kind


def classify_error(exception: Exception, endpoint: str | None = None) -> KioskError:
    """Classify a generic exception into a KioskError.

    Args:
        exception: Exception to classify
        endpoint: Upstream endpoint that failed

    Returns:
        Classified KioskError instance
    """
    if isinstance(exception, KioskError):
        return exception

    if isinstance(exception, (json.JSONDecodeError, ValidationError)):
        return UpstreamFormatError(
            message=f"Malformed response: {exception}",
            error_code=(
                ErrorCode.DATA_VALIDATION_ERROR
                if isinstance(exception, ValidationError)
                else ErrorCode.DATA_PARSE_ERROR
            ),
            endpoint=endpoint,
        )

    if isinstance(exception, requests.Timeout):
        return UpstreamTimeoutError(endpoint=endpoint)

    if isinstance(exception, requests.ConnectionError):
        return UpstreamConnectionError(endpoint=endpoint, details={"error": str(exception)})

    if isinstance(exception, requests.HTTPError):
        response = getattr(exception, "response", None)
        status_code = response.status_code if response is not None else 500
        return UpstreamHTTPError(
            message=str(exception),
            status_code=status_code,
            endpoint=endpoint,
        )

    if isinstance(exception, requests.RequestException):
        return UpstreamFetchError(
            message=str(exception),
            endpoint=endpoint,
            details={"exception_type": type(exception).__name__},
        )

    return KioskError(
        message=str(exception),
        error_code=ErrorCode.UNKNOWN_ERROR,
        endpoint=endpoint,
        details={"exception_type": type(exception).__name__},
    )


def is_recoverable(error: Exception) -> bool:
    """Check if an error may be answered with cached fallback data.

    Args:
        error: Exception to check

    Returns:
        True for upstream fetch, upstream format and store failures
    """
    return isinstance(error, (UpstreamFetchError, UpstreamFormatError, StoreUnavailableError))
