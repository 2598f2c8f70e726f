"""
Cache Infrastructure

Provides the in-memory TTL store and key derivation for upstream API calls.
"""

from __future__ import annotations

from pharmapulse.infrastructure.cache.cache_store import CacheStats, CacheStore
from pharmapulse.infrastructure.cache.keys import derive_key

__all__ = [
    "CacheStats",
    "CacheStore",
    "derive_key",
]
