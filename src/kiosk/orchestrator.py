"""Refresh/cache orchestration per logical resource.

Each request for a resource key is classified against the cache:

    FRESH                  unexpired entry, served without an upstream call
    STALE_TRIGGER_REFRESH  expired entry, refresh; serve it stale if that fails
    EMPTY_TRIGGER_REFRESH  no entry, the caller waits on the refresh

Concurrent refreshes of the same key are coalesced: one upstream call is
in flight per key and every caller waiting on that key shares its result.
The background job uses the same guard.
"""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from src.shared.api.cache import CacheEntry, TTLCache
from src.shared.api.errors import KioskError, NoDataError, is_recoverable
from src.shared.config.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CacheState(Enum):
    """How a request was classified against the cache."""

    FRESH = "fresh"
    STALE_TRIGGER_REFRESH = "stale_trigger_refresh"
    EMPTY_TRIGGER_REFRESH = "empty_trigger_refresh"


@dataclass(frozen=True)
class CachedResult(Generic[T]):
    """Value returned by the orchestrator with its provenance.

    Attributes:
        value: Resource payload
        state: Cache classification of the request
        cached: Whether the value came from the cache
        stale: Whether the value is a fallback after a failed refresh
        last_updated: When the value was stored
        error_message: Failure that forced a stale fallback
    """

    value: T
    state: CacheState
    cached: bool
    stale: bool
    last_updated: datetime
    error_message: str | None = None


class RefreshOrchestrator:
    """Serves resources from a TTL cache and refreshes them on demand."""

    def __init__(self, cache: TTLCache | None = None, max_workers: int = 4) -> None:
        """Initialize orchestrator.

        Args:
            cache: Cache to serve from (a new one if not provided)
            max_workers: Threads available for concurrent refreshes
        """
        self.cache = cache if cache is not None else TTLCache()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="kiosk-refresh"
        )
        self._inflight: dict[str, Future[CacheEntry]] = {}
        self._inflight_lock = threading.Lock()

    def get(
        self,
        key: str,
        refresh: Callable[[], T],
        ttl_seconds: float,
        force_refresh: bool = False,
    ) -> CachedResult[T]:
        """Get a resource, refreshing it when the cache cannot serve it.

        Args:
            key: Resource key, e.g. ``weather:38335``
            refresh: Fetches a new value; raises typed errors on failure
            ttl_seconds: TTL for a newly fetched value
            force_refresh: Bypass the freshness check

        Returns:
            The value with cached/stale annotations

        Raises:
            ConfigurationError: Always propagated, never masked by the cache
            NoDataError: If the refresh failed and nothing is cached
        """
        if not force_refresh:
            entry = self.cache.get_fresh(key)
            if entry is not None:
                return CachedResult(
                    value=entry.payload,
                    state=CacheState.FRESH,
                    cached=True,
                    stale=False,
                    last_updated=entry.inserted_at,
                )

        existing = self.cache.get(key)
        state = (
            CacheState.STALE_TRIGGER_REFRESH
            if existing is not None
            else CacheState.EMPTY_TRIGGER_REFRESH
        )
        logger.debug("cache_refresh_triggered", key=key, state=state.value, forced=force_refresh)

        try:
            entry = self.refresh(key, refresh, ttl_seconds)
        except KioskError as e:
            if not is_recoverable(e):
                raise
            fallback = self.cache.get(key)
            if fallback is None:
                raise NoDataError(
                    message=f"No data available for {key}: {e.message}",
                    resource=key,
                ) from e

            logger.warning(
                "cache_stale_fallback",
                key=key,
                error=e.message,
                age_seconds=round(fallback.age_seconds(self.cache.now()), 1),
            )
            return CachedResult(
                value=fallback.payload,
                state=state,
                cached=True,
                stale=True,
                last_updated=fallback.inserted_at,
                error_message=e.message,
            )

        return CachedResult(
            value=entry.payload,
            state=state,
            cached=False,
            stale=False,
            last_updated=entry.inserted_at,
        )

    def refresh(
        self,
        key: str,
        refresh: Callable[[], Any],
        ttl_seconds: float,
    ) -> CacheEntry:
        """Run a coalesced refresh and store the result.

        If a refresh for ``key`` is already in flight, wait for it instead
        of starting another.

        Args:
            key: Resource key
            refresh: Fetches a new value
            ttl_seconds: TTL for the stored value

        Returns:
            The newly stored cache entry

        Raises:
            Exception: Whatever the refresh raised
        """
        with self._inflight_lock:
            future = self._inflight.get(key)
            # Done-callbacks run after waiters wake; a finished future is not in flight
            owner = future is None or future.done()
            if owner:
                future = self._executor.submit(self._run_refresh, key, refresh, ttl_seconds)
                self._inflight[key] = future

        if owner:
            # Registered outside the lock: runs inline if already done
            future.add_done_callback(lambda done: self._clear_inflight(key, done))
        else:
            logger.debug("refresh_coalesced", key=key)

        return future.result()

    def _run_refresh(
        self,
        key: str,
        refresh: Callable[[], Any],
        ttl_seconds: float,
    ) -> CacheEntry:
        logger.info("resource_refresh_started", key=key)
        value = refresh()
        entry = self.cache.put(key, value, ttl_seconds)
        logger.info("resource_refresh_completed", key=key)
        return entry

    def _clear_inflight(self, key: str, done: Future) -> None:
        with self._inflight_lock:
            if self._inflight.get(key) is done:
                del self._inflight[key]

    def seed(self, key: str, value: Any, ttl_seconds: float, inserted_at: datetime) -> None:
        """Seed the cache with a persisted value (warm start)."""
        self.cache.put(key, value, ttl_seconds, inserted_at=inserted_at)
        logger.info("cache_seeded", key=key, inserted_at=inserted_at.isoformat())

    def shutdown(self) -> None:
        """Stop the refresh thread pool."""
        self._executor.shutdown(wait=True)
