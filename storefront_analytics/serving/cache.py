"""
Result Cache Module

In-process caching layer for computed analytics responses with:
- TTL expiry (expired entries dropped on read)
- JSON serialization, so every hit is an independent copy
- Optional LRU bound on the number of entries
- Hit/miss counters for the health endpoint
"""

import json
import threading
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 300


def make_cache_key(endpoint: str, params: Mapping[str, Any]) -> str:
    """
    Build a cache key from an endpoint name and its normalized parameters.

    Parameter order does not matter and parameters set to None are ignored.
    """
    present = {name: value for name, value in params.items() if value is not None}
    return f"{endpoint}:{json.dumps(present, sort_keys=True, default=str)}"


class ResultCache:
    """
    TTL cache for computed analytics results.

    Example:
        cache = ResultCache(ttl_seconds=300)
        key = make_cache_key("overview", {"from": "2024-01-01"})
        payload = await cache.get_or_set(key, compute_overview)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: Optional[int] = None,
        namespace: str = "analytics",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.namespace = namespace
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[str, float]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _key(self, key: str) -> str:
        """Generate namespaced key"""
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Fresh copy of the cached value, or None if missing or expired
        """
        full_key = self._key(key)
        with self._lock:
            entry = self._entries.get(full_key)
            if entry is None:
                self._misses += 1
                return None

            serialized, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[full_key]
                self._misses += 1
                return None

            self._entries.move_to_end(full_key)
            self._hits += 1

        return json.loads(serialized)

    def set(self, key: str, value: Any) -> bool:
        """
        Set value in cache, replacing any previous entry.

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)

        Returns:
            True if successful
        """
        try:
            serialized = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.warning("Failed to serialize value for cache", key=key, error=str(e))
            return False

        full_key = self._key(key)
        with self._lock:
            self._entries[full_key] = (serialized, self._clock())
            self._entries.move_to_end(full_key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Cache entry evicted", key=evicted)

        return True

    def invalidate_all(self) -> int:
        """Invalidate all keys in namespace"""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Get from cache or compute and cache.

        Args:
            key: Cache key
            factory: Async function to compute value if not cached

        Returns:
            Cached or computed value
        """
        value = self.get(key)

        if value is not None:
            return value

        value = await factory()
        self.set(key, value)

        return value

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "ttl_seconds": self.ttl_seconds,
                "max_entries": self.max_entries,
            }
