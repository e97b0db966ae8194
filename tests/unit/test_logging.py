"""Unit tests for logging configuration."""

import logging
import os

import structlog

from src.shared.config.logging import configure_logging, get_logger, mask_secret


class TestLogging:
    """Test suite for logging configuration."""

    def test_configure_logging_sets_up_structlog(self) -> None:
        """Test that configure_logging sets up structlog correctly."""
        configure_logging()

        logger = structlog.get_logger("test")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_logger_can_log_messages(self) -> None:
        """Test that logger can log events with context without errors."""
        configure_logging()
        logger = get_logger("test_module")

        logger.debug("cache_hit", key="weather:38335")
        logger.info("weather_reading_normalized", temperature=72.5)
        logger.warning("cache_stale_fallback", error="timeout")
        logger.error("current_weather_failed", error_code="NO_DATA")

    def test_console_format(self) -> None:
        """Test console renderer configuration does not fail."""
        os.environ["LOG_FORMAT"] = "console"
        os.environ["LOG_LEVEL"] = "DEBUG"

        configure_logging()
        get_logger("console_test").info("console_event", value=1)

        assert logging.getLogger().level in (logging.DEBUG, logging.WARNING, logging.INFO)


class TestMaskSecret:
    """Tests for credential masking."""

    def test_masks_all_but_prefix(self) -> None:
        assert mask_secret("abcdef123456") == "abcd..."

    def test_empty_values(self) -> None:
        assert mask_secret(None) == ""
        assert mask_secret("") == ""

    def test_custom_visible(self) -> None:
        assert mask_secret("abcdef", visible=2) == "ab..."
