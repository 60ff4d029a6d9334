"""
Fixed-window rate limiter for API endpoints

Counts requests per (bucket, client) in discrete windows. Uses Redis
INCR/EXPIRE when available so limits hold across instances; otherwise (or
when Redis errors) a per-process in-memory counter is used, which is only
an approximation when several workers serve traffic.
"""
import time
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Tuple
from fastapi import Request

from app.config import settings
from app.utils.cache import connect_redis

logger = logging.getLogger(__name__)

KEY_PREFIX = "quizgen:rl:"


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset: int  # epoch seconds when the window ends

    def headers(self, limit: int) -> Dict[str, str]:
        """Headers advertising the limit state to clients"""
        return {
            "Retry-After": str(max(1, self.reset - int(time.time()))),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }


class RateLimiter:
    """
    Fixed-window counter

    First request in a window sets count=1 and reset=now+window; later
    requests increment. Allowed while count <= max.
    """

    def __init__(self, redis_client=None, clock: Callable[[], float] = time.time):
        self.redis_client = redis_client
        self._clock = clock

        # Storage: {key: (count, reset_at)}
        self.counters: Dict[str, Tuple[int, int]] = {}
        self._next_cleanup = 0

    def check(
        self,
        identifier: str,
        bucket: str,
        max_requests: int,
        window_seconds: int
    ) -> RateLimitResult:
        """
        Count a request against the (bucket, identifier) window

        Never raises: backend failures fall back to the local counter.
        """
        now = int(self._clock())
        key = f"{KEY_PREFIX}{bucket}:{identifier or 'unknown'}"

        if self.redis_client:
            try:
                return self._check_redis(key, now, max_requests, window_seconds)
            except Exception as e:
                logger.warning(f"Rate limit backend error, using local counter: {str(e)}")

        return self._check_local(key, now, max_requests, window_seconds)

    def _check_redis(self, key: str, now: int, max_requests: int, window_seconds: int) -> RateLimitResult:
        count = self.redis_client.incr(key)
        if count == 1:
            self.redis_client.expire(key, window_seconds)
        ttl = self.redis_client.ttl(key)
        if ttl is None or ttl < 0:
            ttl = window_seconds

        return RateLimitResult(
            allowed=count <= max_requests,
            remaining=max(0, max_requests - count),
            reset=now + ttl
        )

    def _cleanup_old_entries(self, now: int, window_seconds: int) -> None:
        """Remove counters whose window has ended, at most once per window"""
        if now < self._next_cleanup:
            return

        for key in list(self.counters.keys()):
            if self.counters[key][1] <= now:
                del self.counters[key]

        self._next_cleanup = now + window_seconds

    def _check_local(self, key: str, now: int, max_requests: int, window_seconds: int) -> RateLimitResult:
        # Cleanup old entries
        self._cleanup_old_entries(now, window_seconds)

        current = self.counters.get(key)

        if current is None or current[1] <= now:
            reset = now + window_seconds
            self.counters[key] = (1, reset)
            return RateLimitResult(allowed=True, remaining=max(0, max_requests - 1), reset=reset)

        count, reset = current[0] + 1, current[1]
        self.counters[key] = (count, reset)

        if count > max_requests:
            logger.warning(f"Rate limit exceeded: {key}")

        return RateLimitResult(
            allowed=count <= max_requests,
            remaining=max(0, max_requests - count),
            reset=reset
        )

    def reset_all(self) -> None:
        """Drop all local counters"""
        self.counters.clear()
        self._next_cleanup = 0


def get_client_id(request: Request) -> str:
    """Extract client identifier from request"""
    forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")
    if forwarded:
        return forwarded.split(",")[0].strip() or "unknown"

    # Fallback to socket peer address
    return request.client.host if request.client else "unknown"


# Global instance
rate_limiter = RateLimiter(redis_client=connect_redis(settings.REDIS_URL))


def rate_limit(identifier: str, bucket: str, max_requests: int, window_seconds: int) -> RateLimitResult:
    """Check the global limiter"""
    return rate_limiter.check(identifier, bucket, max_requests, window_seconds)
