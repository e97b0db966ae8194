"""Unit tests for the refresh orchestrator."""

import threading
import time
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.kiosk.orchestrator import CacheState, RefreshOrchestrator
from src.shared.api.cache import TTLCache
from src.shared.api.errors import (
    ConfigurationError,
    NoDataError,
    StoreUnavailableError,
    UpstreamFetchError,
    UpstreamFormatError,
)

KEY = "weather:38335"


@pytest.fixture
def orchestrator(clock: Any) -> Iterator[RefreshOrchestrator]:
    orch = RefreshOrchestrator(TTLCache(clock=clock))
    yield orch
    orch.shutdown()


class TestRefreshOrchestrator:
    """Test suite for RefreshOrchestrator."""

    def test_cache_fallback_end_to_end(
        self, orchestrator: RefreshOrchestrator, clock: Any
    ) -> None:
        """Test fresh, cached, stale and recovered responses in sequence."""
        refresh = MagicMock(return_value="v1")

        first = orchestrator.get(KEY, refresh, ttl_seconds=300)
        assert first.value == "v1"
        assert first.cached is False
        assert first.state is CacheState.EMPTY_TRIGGER_REFRESH

        refresh.side_effect = UpstreamFetchError("provider down")
        clock.advance(120)
        second = orchestrator.get(KEY, refresh, ttl_seconds=300)
        assert second.value == "v1"
        assert second.state is CacheState.FRESH
        assert second.stale is False
        assert second.error_message is None
        assert refresh.call_count == 1

        clock.advance(300)
        third = orchestrator.get(KEY, refresh, ttl_seconds=300)
        assert third.value == "v1"
        assert third.state is CacheState.STALE_TRIGGER_REFRESH
        assert third.cached is True
        assert third.stale is True
        assert third.error_message == "provider down"

        refresh.side_effect = None
        refresh.return_value = "v2"
        fourth = orchestrator.get(KEY, refresh, ttl_seconds=300)
        assert fourth.value == "v2"
        assert fourth.cached is False
        assert fourth.stale is False
        assert fourth.last_updated == clock()

        fifth = orchestrator.get(KEY, refresh, ttl_seconds=300)
        assert fifth.value == "v2"
        assert fifth.state is CacheState.FRESH

    def test_format_error_falls_back(
        self, orchestrator: RefreshOrchestrator, clock: Any
    ) -> None:
        orchestrator.get(KEY, lambda: "v1", ttl_seconds=10)
        clock.advance(10)

        def broken() -> str:
            raise UpstreamFormatError("bad payload")

        result = orchestrator.get(KEY, broken, ttl_seconds=10)

        assert result.stale is True
        assert result.value == "v1"

    def test_cold_failure_raises_no_data(self, orchestrator: RefreshOrchestrator) -> None:
        def failing() -> str:
            raise UpstreamFetchError("timeout")

        with pytest.raises(NoDataError) as exc_info:
            orchestrator.get(KEY, failing, ttl_seconds=10)

        assert isinstance(exc_info.value.__cause__, UpstreamFetchError)
        assert exc_info.value.details["resource"] == KEY

    def test_configuration_error_not_masked(
        self, orchestrator: RefreshOrchestrator, clock: Any
    ) -> None:
        """Test missing credentials surface even with stale data cached."""
        orchestrator.get(KEY, lambda: "v1", ttl_seconds=10)
        clock.advance(10)

        def unconfigured() -> str:
            raise ConfigurationError("WeatherFlow API token not configured")

        with pytest.raises(ConfigurationError):
            orchestrator.get(KEY, unconfigured, ttl_seconds=10)

    def test_unexpected_errors_propagate(self, orchestrator: RefreshOrchestrator) -> None:
        def buggy() -> str:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            orchestrator.get(KEY, buggy, ttl_seconds=10)

    def test_force_refresh_bypasses_fresh_entry(self, orchestrator: RefreshOrchestrator) -> None:
        refresh = MagicMock(side_effect=["v1", "v2"])
        orchestrator.get(KEY, refresh, ttl_seconds=300)

        result = orchestrator.get(KEY, refresh, ttl_seconds=300, force_refresh=True)

        assert result.value == "v2"
        assert result.state is CacheState.STALE_TRIGGER_REFRESH

    def test_seed_serves_stale_after_failure(
        self, orchestrator: RefreshOrchestrator, clock: Any
    ) -> None:
        """Test a warm-start entry backs the first failed refresh."""
        orchestrator.seed(KEY, "persisted", ttl_seconds=60, inserted_at=clock())
        clock.advance(61)

        def failing() -> str:
            raise UpstreamFetchError("offline")

        result = orchestrator.get(KEY, failing, ttl_seconds=60)

        assert result.value == "persisted"
        assert result.stale is True

    def test_concurrent_refreshes_coalesce(self, orchestrator: RefreshOrchestrator) -> None:
        """Test two callers on an empty key share one upstream call."""
        started = threading.Event()
        release = threading.Event()
        calls: list[int] = []

        def slow_refresh() -> str:
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return "shared"

        results: list[Any] = []

        def caller() -> None:
            results.append(orchestrator.get(KEY, slow_refresh, ttl_seconds=60))

        first = threading.Thread(target=caller)
        first.start()
        assert started.wait(timeout=5)
        second = threading.Thread(target=caller)
        second.start()
        time.sleep(0.2)
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert len(calls) == 1
        assert [r.value for r in results] == ["shared", "shared"]

    def test_inflight_cleared_after_failure(self, orchestrator: RefreshOrchestrator) -> None:
        def failing() -> str:
            raise UpstreamFetchError("down")

        with pytest.raises(NoDataError):
            orchestrator.get(KEY, failing, ttl_seconds=10)

        result = orchestrator.get(KEY, lambda: "recovered", ttl_seconds=10)

        assert result.value == "recovered"

    def test_store_failure_falls_back(
        self, orchestrator: RefreshOrchestrator, clock: Any
    ) -> None:
        orchestrator.get(KEY, lambda: "v1", ttl_seconds=10)
        clock.advance(10)

        def store_down() -> str:
            raise StoreUnavailableError("Weather store unavailable")

        result = orchestrator.get(KEY, store_down, ttl_seconds=10)

        assert result.value == "v1"
        assert result.stale is True
        assert result.error_message == "Weather store unavailable"


class TestCacheInjection:
    """Tests that the orchestrator serves from the cache it is given."""

    def test_empty_injected_cache_is_kept(self, clock: Any) -> None:
        cache = TTLCache(clock=clock)
        assert len(cache) == 0

        orch = RefreshOrchestrator(cache)
        try:
            assert orch.cache is cache
        finally:
            orch.shutdown()

    def test_injected_clock_drives_expiry(self, clock: Any) -> None:
        """Test TTL expiry follows the injected clock, not wall time."""
        orch = RefreshOrchestrator(TTLCache(clock=clock))
        try:
            orch.get(KEY, lambda: "v1", ttl_seconds=60)
            clock.advance(61)

            def failing() -> str:
                raise UpstreamFetchError("down")

            result = orch.get(KEY, failing, ttl_seconds=60)
        finally:
            orch.shutdown()

        assert result.state is CacheState.STALE_TRIGGER_REFRESH
        assert result.stale is True
