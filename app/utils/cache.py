"""
Cache utility for generated quizzes and Wikipedia lookups

Redis-backed when REDIS_URL is configured and reachable, otherwise a
process-local in-memory store. Redis errors fall back to the local store
so the cache never fails a request.
"""
import redis
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple
from app.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "quizgen:"


class LocalCache:
    """In-memory TTL store, one per process, evicted lazily on access"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return json.loads(payload)

    def set(self, key: str, value: Any, ttl: int) -> None:
        # Stored serialized; every get returns a fresh copy
        self._entries[key] = (json.dumps(value), self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class CacheService:
    """Key/value cache with TTL and transparent Redis fallback"""

    def __init__(self, redis_client=None, local: Optional[LocalCache] = None):
        self.redis_client = redis_client
        self.local = local or LocalCache()

    @classmethod
    def from_settings(cls) -> "CacheService":
        """Build the cache, using Redis only if it answers a ping"""
        return cls(redis_client=connect_redis(settings.REDIS_URL))

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key (unprefixed)

        Returns:
            Cached value or None when missing/expired
        """
        full_key = KEY_PREFIX + key

        if self.redis_client:
            try:
                value = self.redis_client.get(full_key)
                if value:
                    logger.info(f"Cache hit: {key}")
                    return json.loads(value)
                logger.info(f"Cache miss: {key}")
                return None
            except Exception as e:
                logger.warning(f"Cache get error, using local store: {str(e)}")

        value = self.local.get(full_key)
        logger.info(f"Cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    def set(self, key: str, value: Any, ttl: int = None) -> None:
        """
        Set value in cache

        Args:
            key: Cache key (unprefixed)
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default from settings)
        """
        full_key = KEY_PREFIX + key
        ttl = ttl or settings.QUIZ_CACHE_TTL

        if self.redis_client:
            try:
                self.redis_client.setex(full_key, ttl, json.dumps(value))
                logger.info(f"Cache set: {key} (TTL: {ttl}s)")
                return
            except Exception as e:
                logger.warning(f"Cache set error, using local store: {str(e)}")

        self.local.set(full_key, value, ttl)
        logger.info(f"Cache set (local): {key} (TTL: {ttl}s)")

    def delete(self, key: str) -> None:
        """Delete key from cache"""
        full_key = KEY_PREFIX + key

        if self.redis_client:
            try:
                self.redis_client.delete(full_key)
                logger.info(f"Cache delete: {key}")
                return
            except Exception as e:
                logger.warning(f"Cache delete error, using local store: {str(e)}")

        self.local.delete(full_key)


def connect_redis(url: Optional[str]):
    """Return a connected Redis client, or None when unset/unreachable"""
    if not url:
        return None

    try:
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5
        )
        # Test connection
        client.ping()
        logger.info("Redis connection established")
        return client
    except Exception as e:
        logger.warning(f"Redis connection failed: {str(e)}. Using in-memory store.")
        return None


# Global instance
cache_service = CacheService.from_settings()
