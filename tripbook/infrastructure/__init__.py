"""Infrastructure services and cross-cutting utilities."""

from tripbook.infrastructure.api_client import ApiClient
from tripbook.infrastructure.cache import ResponseCache
from tripbook.infrastructure.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
    build_kv_store,
)
from tripbook.infrastructure.local_store import LocalStore
from tripbook.infrastructure.mock_auth import MockAuthService
from tripbook.infrastructure.query_cache import QueryCache, is_retryable, should_retry
from tripbook.infrastructure.rate_limiter import InMemoryRateLimiter, RedisRateLimiter, get_rate_limiter
from tripbook.infrastructure.remote_auth import RemoteAuthService

__all__ = [
    "ApiClient",
    "InMemoryKeyValueStore",
    "InMemoryRateLimiter",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalStore",
    "MockAuthService",
    "QueryCache",
    "RedisKeyValueStore",
    "RedisRateLimiter",
    "RemoteAuthService",
    "ResponseCache",
    "build_kv_store",
    "get_rate_limiter",
    "is_retryable",
    "should_retry",
]
