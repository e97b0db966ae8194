"""Structured logging configuration using structlog.

Provides JSON-formatted logs for production environments and
human-readable console logs for development.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from src.shared.config.settings import get_settings


def configure_logging() -> None:
    """Configure structured logging for the application.

    Sets up structlog with appropriate processors based on settings:
    - json: JSON output with timestamps
    - console: Console output with colors
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.log_format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )


def get_logger(name: str) -> Any:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def mask_secret(value: str | None, visible: int = 4) -> str:
    """Mask a credential for log output, keeping a short prefix."""
    if not value:
        return ""
    return value[:visible] + "..."
