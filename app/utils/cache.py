import time
from functools import wraps
from typing import Any, Callable, Dict, Optional
from app.logger import get_logger

logger = get_logger(__name__)

CLEANUP_THRESHOLD = 1000


class MemoryCache:
    """In-process key/value store with per-entry expiry.

    Expired entries are dropped lazily on read, and swept in bulk whenever
    the store grows past CLEANUP_THRESHOLD entries. Nothing is shared
    between processes, so a second worker or a restart starts cold.
    """

    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._store: Dict[str, tuple] = {}
        self.hits = 0
        self.misses = 0

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expiry = self._clock() + (self.default_ttl if ttl is None else ttl)
        self._store[key] = (value, expiry)

        if len(self._store) > CLEANUP_THRESHOLD:
            self.cleanup()

    def get(self, key: str) -> Any:
        item = self._store.get(key)
        if item is None:
            self.misses += 1
            return None

        value, expiry = item
        if self._clock() > expiry:
            del self._store[key]
            self.misses += 1
            return None

        self.hits += 1
        return value

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were dropped"""
        now = self._clock()
        expired = [key for key, (_, expiry) in self._store.items() if now > expiry]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> dict:
        now = self._clock()
        expired = sum(1 for _, expiry in self._store.values() if now > expiry)
        lookups = self.hits + self.misses
        return {
            "total": len(self._store),
            "active": len(self._store) - expired,
            "expired": expired,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0,
        }

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        item = self._store.get(key)
        return item is not None and self._clock() <= item[1]

    def now(self) -> float:
        """Current reading of the clock entries expire against"""
        return self._clock()


caches = {
    "services": MemoryCache(30 * 60),
    "sessions": MemoryCache(60 * 60),
    "bookings": MemoryCache(5 * 60),
    "vehicles": MemoryCache(10 * 60),
    "rate_limits": MemoryCache(60 * 60),
}


def cached_query(query_function: Callable[[], Any], cache_key: str, ttl: float = 300,
                 cache: Optional[MemoryCache] = None) -> Any:
    """Return the cached result for cache_key, running query_function on a miss"""
    cache = caches["services"] if cache is None else cache
    cached_result = cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    try:
        result = query_function()
    except Exception as e:
        logger.error(f"Cached query {cache_key} failed: {str(e)}")
        raise

    cache.set(cache_key, result, ttl)
    return result


def cached(cache_key, ttl: Optional[float] = None, cache: Optional[MemoryCache] = None):
    """Memoize a function's result; cache_key may be a string or a callable over the arguments"""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key = cache_key(*args, **kwargs) if callable(cache_key) else cache_key
            return cached_query(lambda: func(*args, **kwargs), key, ttl, cache)

        return wrapper

    return decorator


def invalidate_related_caches(entity_type: str) -> None:
    related = {
        "booking": "bookings",
        "vehicle": "vehicles",
        "service": "services",
        "user": "sessions",
    }
    if entity_type in related:
        caches[related[entity_type]].clear()
    else:
        for cache in caches.values():
            cache.clear()
    logger.debug(f"Invalidated caches for {entity_type}")
