"""In-memory TTL cache for resource snapshots.

Entries are keyed by logical resource (e.g. ``weather:38335``) and hold an
insertion instant plus a TTL. Expired entries stay in the map so the
orchestrator can serve them as a stale fallback; ``get_fresh`` hides them.
Thread-safe using a lock for concurrent access.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from src.shared.config.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    """Cached payload with metadata.

    Attributes:
        key: Resource key
        payload: Cached value
        inserted_at: When the value was stored
        ttl_seconds: Time-to-live in seconds
    """

    key: str
    payload: Any
    inserted_at: datetime
    ttl_seconds: float

    def age_seconds(self, now: datetime) -> float:
        """Get age of the entry in seconds."""
        return (now - self.inserted_at).total_seconds()

    def is_expired(self, now: datetime) -> bool:
        """An entry is visible only while its age is below the TTL."""
        return self.age_seconds(now) >= self.ttl_seconds


class TTLCache:
    """Thread-safe key/value cache with per-entry TTL.

    The clock is injectable so expiry can be tested deterministically.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        """Initialize cache.

        Args:
            clock: Returns the current aware datetime
        """
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def now(self) -> datetime:
        """Current time according to the cache clock."""
        return self._clock()

    def get(self, key: str) -> CacheEntry | None:
        """Get an entry regardless of expiry.

        Args:
            key: Resource key

        Returns:
            Entry (possibly expired) or None
        """
        with self._lock:
            return self._entries.get(key)

    def get_fresh(self, key: str) -> CacheEntry | None:
        """Get an entry only if it has not expired.

        Args:
            key: Resource key

        Returns:
            Unexpired entry or None
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(now):
                self._misses += 1
                return None
            self._hits += 1

        logger.debug("cache_hit", key=key, age_seconds=round(entry.age_seconds(now), 1))
        return entry

    def put(
        self,
        key: str,
        payload: Any,
        ttl_seconds: float,
        inserted_at: datetime | None = None,
    ) -> CacheEntry:
        """Store a value, overwriting any prior entry for the key.

        Args:
            key: Resource key
            payload: Value to cache
            ttl_seconds: Time-to-live in seconds
            inserted_at: Insertion instant (defaults to now; set when warm-starting)

        Returns:
            The stored entry
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        entry = CacheEntry(
            key=key,
            payload=payload,
            inserted_at=inserted_at or self._clock(),
            ttl_seconds=ttl_seconds,
        )
        with self._lock:
            self._entries[key] = entry

        logger.debug("cache_put", key=key, ttl_seconds=ttl_seconds)
        return entry

    def invalidate(self, key: str) -> None:
        """Drop the entry for a key if present."""
        with self._lock:
            self._entries.pop(key, None)
        logger.debug("cache_invalidated", key=key)

    def invalidate_all(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
        logger.info("cache_cleared")

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with entry counts and hit/miss counters
        """
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
            hits, misses = self._hits, self._misses

        expired = sum(1 for entry in entries if entry.is_expired(now))
        return {
            "total_entries": len(entries),
            "fresh_entries": len(entries) - expired,
            "expired_entries": expired,
            "hits": hits,
            "misses": misses,
            "keys": sorted(entry.key for entry in entries),
        }
