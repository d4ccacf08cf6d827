"""Read-through cache around ``ApiClient`` with the client-wide retry policy.

Queries (GET) are cached for a stale window and retried; mutations are never
retried and invalidate cached queries by path prefix.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

from tripbook.infrastructure.api_client import ApiClient
from tripbook.infrastructure.cache import ResponseCache
from tripbook.shared.exceptions import ApiError, NetworkError

_logger = logging.getLogger("tripbook.query-cache")

MAX_QUERY_ATTEMPTS = 3
DEFAULT_STALE_SECONDS = 300.0
_MAX_BACKOFF_SECONDS = 30.0


def is_retryable(error: Exception) -> bool:
    if isinstance(error, NetworkError):
        return False
    if isinstance(error, ApiError):
        return not error.is_unauthorized
    return False


def should_retry(error: Exception, attempt: int, max_attempts: int = MAX_QUERY_ATTEMPTS) -> bool:
    """``attempt`` is the 1-based number of the attempt that just failed."""
    return is_retryable(error) and attempt < max_attempts


def retry_delay(attempt: int, base: float = 1.0) -> float:
    return min(base * (2 ** (attempt - 1)), _MAX_BACKOFF_SECONDS)


class QueryCache:
    def __init__(
        self,
        client: ApiClient,
        *,
        stale_seconds: float = DEFAULT_STALE_SECONDS,
        max_attempts: int = MAX_QUERY_ATTEMPTS,
        backoff_base: float = 1.0,
        sleeper: Callable[[float], None] = time.sleep,
        cache: ResponseCache | None = None,
    ):
        self._client = client
        self._max_attempts = max(1, int(max_attempts))
        self._backoff_base = backoff_base
        self._sleep = sleeper
        self._cache = cache or ResponseCache(stale_seconds=stale_seconds)

    @property
    def client(self) -> ApiClient:
        return self._client

    @property
    def stats(self) -> dict[str, Any]:
        return self._cache.stats

    def fetch(self, path: str, *, force: bool = False) -> Any:
        if not force:
            snap = self._cache.fresh(path)
            if snap is not None:
                return snap.payload

        attempt = 0
        while True:
            attempt += 1
            try:
                result = self._client.get(path)
            except ApiError as exc:
                if not should_retry(exc, attempt, self._max_attempts):
                    raise
                delay = retry_delay(attempt, self._backoff_base)
                _logger.info("query %s failed (%s); retry %d in %.1fs", path, exc, attempt, delay)
                self._sleep(delay)
                continue
            self._cache.store(path, result)
            return result

    def mutate(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        invalidates: Iterable[str] = (),
    ) -> Any:
        try:
            result = self._client.request(method, path, body)
        except ApiError as exc:
            _logger.warning("mutation %s %s failed: %s", method.upper(), path, exc)
            raise
        for prefix in invalidates:
            self._cache.invalidate(prefix)
        return result

    def invalidate(self, prefix: str) -> int:
        return self._cache.invalidate(prefix)


__all__ = [
    "MAX_QUERY_ATTEMPTS",
    "QueryCache",
    "is_retryable",
    "retry_delay",
    "should_retry",
]
