"""
Cache backends for built search indexes.

The index service memoizes every build under a string key. Backends follow
one small protocol so a single-process site build can use the in-memory
cache while a long-running API server can share builds through Redis.

Architecture:
    ::

        CacheBackend (Protocol)
        ├── InMemoryCache  - single process, bounded LRU, optional TTL
        └── RedisCache     - shared, values stored as JSON

        API: get(key) → value | None
             set(key, value, ttl_seconds=None)
             delete(key)
             exists(key) → bool
             clear()

Examples:
    >>> from sitesearch.core.cache import InMemoryCache
    >>> cache = InMemoryCache(max_size=16, default_ttl_seconds=None)
    >>> cache.set("SearchIndex < Site:fuse", {"documents": [], "index": {}})
    >>> cache.exists("SearchIndex < Site:fuse")
    True

Guardrails:
    InMemoryCache returns the stored object itself (no copy), so a cache hit
    is reference-equal to the value that was stored. RedisCache round-trips
    through JSON and returns an equal, new object.

Tags:
    cache, lru, redis, ttl, sitesearch
"""

from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Protocol

from sitesearch.core.errors import CacheError, InvalidConfigError

if TYPE_CHECKING:
    from sitesearch.core.settings import SearchIndexSettings


class CacheBackend(Protocol):
    """Protocol for cache backend implementations.

    Keys are strings, values are JSON-serializable blobs.
    """

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` if absent or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL (``None`` → backend default)."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. No-op if the key does not exist."""
        ...

    def exists(self, key: str) -> bool:
        """Check if a key exists and has not expired."""
        ...

    def clear(self) -> None:
        """Remove all keys."""
        ...


# ------------------------------------------------------------------ #
# In-Memory Cache
# ------------------------------------------------------------------ #


class InMemoryCache:
    """Bounded in-memory cache with TTL support.

    Least-recently-used keys are evicted once ``max_size`` is reached.
    Expired keys are dropped lazily on access.

    Example:
        cache = InMemoryCache(max_size=8, default_ttl_seconds=600)
        cache.set("index", artifact)
        cache.get("index") is artifact  # True
    """

    def __init__(
        self,
        *,
        max_size: int = 1_000,
        default_ttl_seconds: int | None = None,
    ):
        if max_size < 1:
            raise InvalidConfigError("cache_max_size", max_size, "cache_max_size must be at least 1")
        self._store: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl_seconds
        self._lock = threading.Lock()

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and time.monotonic() > expires_at

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._expired(expires_at):
                del self._store[key]
                return None
            self._store.move_to_end(key)
            return value

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = (time.monotonic() + ttl) if ttl else None
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
            elif len(self._store) >= self._max_size:
                self._store.popitem(last=False)
            self._store[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if self._expired(entry[1]):
                del self._store[key]
                return False
            return True

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return current number of cached keys."""
        return len(self._store)


# ------------------------------------------------------------------ #
# Redis Cache (optional)
# ------------------------------------------------------------------ #


class RedisCache:
    """Redis-backed cache shared between processes.

    Requires the ``redis`` package (``pip install sitesearch[redis]``).
    Values are stored as JSON, so cached artifacts must be JSON-serializable.

    Raises:
        CacheError: If the ``redis`` package is not installed.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        default_ttl_seconds: int | None = None,
        prefix: str = "sitesearch:",
        client: Any | None = None,
    ):
        if client is None:
            try:
                import redis
            except ImportError as exc:
                raise CacheError(
                    "Redis backend requires 'redis' package. "
                    "Install with: pip install sitesearch[redis]",
                    cause=exc,
                ) from exc
            client = redis.from_url(url, decode_responses=False)

        self._client = client
        self._default_ttl = default_ttl_seconds
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Any | None:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        serialized = json.dumps(value)
        if ttl:
            self._client.setex(self._key(key), ttl, serialized)
        else:
            self._client.set(self._key(key), serialized)

    def delete(self, key: str) -> None:
        self._client.delete(self._key(key))

    def exists(self, key: str) -> bool:
        return bool(self._client.exists(self._key(key)))

    def clear(self) -> None:
        """Remove every key under this cache's prefix."""
        keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
        if keys:
            self._client.delete(*keys)


def create_cache(settings: SearchIndexSettings) -> CacheBackend:
    """Build the cache backend selected by ``settings.cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return InMemoryCache(
            max_size=settings.cache_max_size,
            default_ttl_seconds=settings.cache_ttl_seconds,
        )
    if backend == "redis":
        return RedisCache(settings.redis_url, default_ttl_seconds=settings.cache_ttl_seconds)
    raise InvalidConfigError("cache_backend", settings.cache_backend, "cache_backend must be 'memory' or 'redis'")


__all__ = [
    "CacheBackend",
    "InMemoryCache",
    "RedisCache",
    "create_cache",
]
