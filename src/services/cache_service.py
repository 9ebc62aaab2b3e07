"""
Cache Service for upstream news responses.

In-memory key/value cache with per-entry TTL expiration. Expired entries
are dropped lazily on read and actively by the background cleanup job.
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires_at: float
    cached_at: datetime


class CacheService:
    """
    Thread-safe TTL cache.

    Features:
    - Deterministic keys built from a prefix and named parameters
    - Configurable default TTL (default: 5 minutes), overridable per entry
    - Lazy expiry on read plus an explicit sweep (``clear_expired``)
    - Cache statistics tracking
    """

    def __init__(self, default_ttl: float = 300.0, clock: Callable[[], float] = time.time):
        """
        Initialize the cache service.

        Args:
            default_ttl: Default time-to-live for entries in seconds
            clock: Source of the current time in epoch seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    @staticmethod
    def generate_key(prefix: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Build a cache key from a prefix and parameters.

        Parameters are sorted by name, so the key does not depend on the
        order in which the mapping was built.

        Args:
            prefix: Key namespace, e.g. ``"search"``
            params: Named parameters identifying the request

        Returns:
            Cache key string such as ``"search:query:ai"``
        """
        params = params or {}
        sorted_params = "|".join(f"{name}:{params[name]}" for name in sorted(params))
        return f"{prefix}:{sorted_params}"

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now >= entry.expires_at

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (defaults to ``default_ttl``)
        """
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(
                value=value,
                expires_at=now + ttl,
                cached_at=datetime.fromtimestamp(now, tz=timezone.utc),
            )

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a cached value.

        Args:
            key: Cache key

        Returns:
            The cached value, or None when missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                logger.debug("cache_expired", key=key)
                return None

            return entry.value

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def clear_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired_keys = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired_keys:
                del self._entries[key]

        if expired_keys:
            logger.info("cache_expired_entries_removed", removed=len(expired_keys))
        return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Total, valid and expired-but-not-yet-swept entry counts plus the default TTL
        """
        with self._lock:
            now = self._clock()
            expired = sum(1 for entry in self._entries.values() if self._is_expired(entry, now))
            total = len(self._entries)

        return {
            "total": total,
            "valid": total - expired,
            "expired": expired,
            "ttl": self.default_ttl,
        }

    def get_keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def set_default_ttl(self, ttl: float) -> None:
        self.default_ttl = ttl
