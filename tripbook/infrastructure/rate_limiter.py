"""POST rate limiting per client address.

Memory is the default; a configured Redis URL shares the budget between API
processes. Both report how long a rejected client should wait.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from typing import Callable, Protocol

import redis

from tripbook.security.redact import redact_sensitive

_logger = logging.getLogger("tripbook.rate-limit")
_KEY_PREFIX = "tripbook:ratelimit:"


class RateLimiter(Protocol):
    backend: str

    def allow(self, key: str) -> bool: ...

    def retry_after(self, key: str) -> int: ...


class InMemoryRateLimiter:
    """Sliding window: a request counts for exactly ``window_seconds``."""

    backend = "memory"

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ):
        self._max = max(1, int(max_requests))
        self._window = max(1, int(window_seconds))
        self._clock = clock
        self._seen: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, key: str, now: float) -> deque[float]:
        stamps = self._seen.setdefault(key, deque())
        while stamps and now - stamps[0] >= self._window:
            stamps.popleft()
        return stamps

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            stamps = self._recent(key, now)
            if len(stamps) >= self._max:
                return False
            stamps.append(now)
            return True

    def retry_after(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            stamps = self._recent(key, now)
            if len(stamps) < self._max:
                return 0
            return max(1, math.ceil(stamps[0] + self._window - now))


class RedisRateLimiter:
    """Fixed window per ``window_seconds`` bucket."""

    backend = "redis"

    def __init__(self, redis_url: str, max_requests: int, window_seconds: int):
        self._max = max(1, int(max_requests))
        self._window = max(1, int(window_seconds))
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._client.ping()

    def _bucket_key(self, key: str) -> str:
        return f"{_KEY_PREFIX}{key}:{int(time.time()) // self._window}"

    def allow(self, key: str) -> bool:
        bucket = self._bucket_key(key)
        pipe = self._client.pipeline()
        pipe.incr(bucket)
        pipe.expire(bucket, self._window + 5, nx=True)
        count, _ = pipe.execute()
        return int(count) <= self._max

    def retry_after(self, key: str) -> int:
        return self._window - int(time.time()) % self._window


def get_rate_limiter(max_requests: int, window_seconds: int, redis_url: str | None = None) -> RateLimiter:
    if not redis_url:
        return InMemoryRateLimiter(max_requests, window_seconds)
    try:
        limiter = RedisRateLimiter(redis_url, max_requests, window_seconds)
    except redis.RedisError as exc:
        _logger.warning("redis rate limiter unavailable, using memory: %s", redact_sensitive(str(exc)))
        return InMemoryRateLimiter(max_requests, window_seconds)
    _logger.info("rate limiter backend=redis max=%d window=%ds", max_requests, window_seconds)
    return limiter


__all__ = ["InMemoryRateLimiter", "RateLimiter", "RedisRateLimiter", "get_rate_limiter"]
