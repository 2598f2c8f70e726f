"""
Cache Store

In-memory read-through cache with per-entry TTL for upstream API responses.
Uses cachetools.TLRUCache so every entry carries its own expiry time.

Features:
- Per-entry TTL with a store-wide default
- Passive expiry: an expired entry is never returned, swept or not
- Active expiry: sweep() removes expired entries; sweep_forever() runs it
  on a fixed period
- LRU eviction when max_entries is reached
- Hit/miss/expiration counters

Values are stored by reference. Callers must not mutate what they get back.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 1800.0
DEFAULT_CHECK_PERIOD = 120.0
DEFAULT_MAX_ENTRIES = 10_000

_MISSING = object()


@dataclass(slots=True)
class _Entry:
    value: Any
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class CacheStore:
    """
    In-memory TTL cache shared by every cached read path.

    One instance is created per process by the application container and
    injected wherever it is needed; tests build their own.

    Example:
        cache = CacheStore(default_ttl=1800)

        cache.set("drug_search_aspirin_10", result)
        cache.get("drug_search_aspirin_10")

        # Cache-aside
        labels = await cache.get_or_fetch(key, lambda: client.fetch(...), ttl=3600)
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            default_ttl: TTL in seconds used when set() gets no usable ttl
            max_entries: Maximum number of entries before LRU eviction
            timer: Clock used for expiry (injectable for tests)
        """
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._default_ttl = float(default_ttl)
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=max_entries, ttu=_time_to_use, timer=timer
        )
        self._lock = threading.RLock()
        self._stats = CacheStats()

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a live value.

        Returns:
            Cached value, or ``default`` if the key is unknown, deleted,
            flushed or expired
        """
        with self._lock:
            try:
                entry = self._cache[key]
            except KeyError:
                self._stats.misses += 1
                return default
            self._stats.hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """
        Store a value.

        A missing, zero or negative ttl means the default TTL. There is no
        way to store an entry that never expires.
        """
        effective_ttl = ttl if ttl and ttl > 0 else self._default_ttl
        with self._lock:
            self._cache[key] = _Entry(value, float(effective_ttl))
            self._stats.sets += 1
        return True

    def delete(self, key: str) -> int:
        """
        Remove a key.

        Returns:
            1 if a live entry was removed, 0 otherwise
        """
        with self._lock:
            try:
                del self._cache[key]
            except KeyError:
                return 0
            return 1

    def has(self, key: str) -> bool:
        """Check if a live (unexpired) entry exists for key."""
        with self._lock:
            return key in self._cache

    def flush(self) -> None:
        """Remove every entry and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._stats.reset()

    def sweep(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            expired = self._cache.expire()
            removed = len(expired)
            self._stats.expirations += removed
        if removed:
            logger.debug(f"Cache sweep removed {removed} expired entries")
        return removed

    def stats(self) -> dict[str, Any]:
        """Counters for observability; not used for correctness."""
        self.sweep()
        with self._lock:
            return {
                **self._stats.to_dict(),
                "keys": len(self._cache),
                "max_entries": self._cache.maxsize,
                "default_ttl": self._default_ttl,
            }

    async def get_or_fetch(
        self,
        key: str,
        fetch_func: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """
        Get from cache or fetch and cache the result.

        No lock is held while fetch_func runs; two concurrent misses for the
        same key both fetch and the last write wins. A fetch that raises is
        not cached and the exception propagates. A fetch that returns None is
        not cached; a None stored with set() is a hit. A cache that fails is
        bypassed.
        """
        try:
            value = self.get(key, _MISSING)
        except Exception as e:
            logger.warning(f"Cache unavailable for {key}, fetching directly: {e}")
            return await fetch_func()

        if value is not _MISSING:
            logger.debug(f"Cache hit: {key}")
            return value

        value = await fetch_func()
        if value is not None:
            try:
                self.set(key, value, ttl)
            except Exception as e:
                logger.warning(f"Failed to cache {key}: {e}")
        return value

    async def sweep_forever(self, interval: float = DEFAULT_CHECK_PERIOD) -> None:
        """Run sweep() every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception:
                logger.exception("Cache sweep failed")

    def __len__(self) -> int:
        """Get number of stored entries (including expired, unswept ones)."""
        with self._lock:
            return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return self.has(key)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        """Total cache lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.expirations = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "expirations": self.expirations,
            "hit_rate": round(self.hit_rate, 4),
        }
