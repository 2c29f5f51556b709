"""
Evaluation cache with optional time-to-live.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from pearflag.models import EvaluationRequest


class CachePartition(str, Enum):
    """Independent cache partitions, one per call plurality."""

    SINGLE = "flag"
    """Results of single-flag evaluations."""

    MULTI = "flags"
    """Results of multi-flag evaluations."""


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    size: int = 0


@dataclass
class CacheEntry:
    """Cache entry with its expiry deadline."""

    value: Any
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def cache_key(request: EvaluationRequest) -> str:
    """Derive the cache key of a validated request."""
    return f"{request.environment}:{request.user.id}"


class EvaluationCache:
    """
    In-memory store of the last successful result per key.

    Entries are stored under ``(partition, key)`` so that single-flag and
    multi-flag results for the same user never collide. Expired entries are
    dropped lazily when looked up or counted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._cache: Dict[Tuple[CachePartition, str], CacheEntry] = {}
        self._stats = CacheStats()

    def get(self, partition: CachePartition, key: str) -> Optional[Any]:
        """
        Get a cached result.

        Args:
            partition: Partition matching the call plurality
            key: Cache key

        Returns:
            The cached value (a new list for multi-flag results), or None if
            absent or expired
        """
        entry = self._cache.get((partition, key))

        if entry is not None and entry.is_expired(self._clock()):
            del self._cache[(partition, key)]
            entry = None

        if entry is None:
            self._stats.misses += 1
            return None

        self._stats.hits += 1
        if isinstance(entry.value, list):
            return list(entry.value)
        return entry.value

    def set(self, partition: CachePartition, key: str, value: Any, ttl_ms: int = 0) -> None:
        """
        Store a result, replacing any previous one.

        Args:
            partition: Partition matching the call plurality
            key: Cache key
            value: Result to store
            ttl_ms: Time-to-live in milliseconds, 0 keeps the entry until cleared
        """
        expires_at = None
        if ttl_ms > 0:
            expires_at = self._clock() + ttl_ms / 1000.0

        if isinstance(value, list):
            value = list(value)
        self._cache[(partition, key)] = CacheEntry(value=value, expires_at=expires_at)

    def size(self, partition: Optional[CachePartition] = None) -> int:
        """Number of live entries, in one partition or overall."""
        self._purge_expired()
        if partition is None:
            return len(self._cache)
        return sum(1 for part, _ in self._cache if part is partition)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [k for k, entry in self._cache.items() if entry.is_expired(now)]
        for k in expired:
            del self._cache[k]

    def clear(self) -> None:
        """Clear all cached data."""
        self._cache.clear()

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return CacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            size=self.size(),
        )

    def get_hit_rate(self) -> float:
        """Get hit rate (hits / (hits + misses))."""
        total = self._stats.hits + self._stats.misses
        if total == 0:
            return 0.0
        return self._stats.hits / total
