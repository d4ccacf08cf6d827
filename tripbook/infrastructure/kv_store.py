"""Key/value stores standing in for browser local storage.

All backends are synchronous and best-effort: values must be JSON
serializable, and there is no locking across processes (last writer wins).
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional, Protocol

import redis

_logger = logging.getLogger("tripbook.kv")

_DEFAULT_PATH = Path("data") / "local_storage.json"
_DEFAULT_PREFIX = "tripbook:kv:"


class KeyValueStore(Protocol):
    backend: str

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store; values are copied on the way in and out."""

    backend = "memory"

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)


class JsonFileKeyValueStore:
    """Whole-document JSON file; every write swaps in a fully written copy."""

    backend = "file"

    def __init__(self, path: str | Path = _DEFAULT_PATH):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("local storage file %s is corrupt; starting empty", self._path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        # readers only ever see the old document or the new one
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, default=str)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._dump(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._dump(data)


class RedisKeyValueStore:
    """Redis-backed store so several CLI processes can share one profile."""

    backend = "redis"

    def __init__(self, redis_url: str, prefix: str = _DEFAULT_PREFIX):
        self._prefix = prefix
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._client.ping()

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            self._client.delete(self._key(key))
            return None

    def set(self, key: str, value: Any) -> None:
        self._client.set(self._key(key), json.dumps(value, ensure_ascii=False, default=str))

    def remove(self, key: str) -> None:
        self._client.delete(self._key(key))


def build_kv_store(
    *,
    path: str | Path | None = None,
    redis_url: str | None = None,
) -> KeyValueStore:
    redis_url = redis_url if redis_url is not None else os.getenv("TRIPBOOK_REDIS_URL")
    if redis_url:
        try:
            store = RedisKeyValueStore(redis_url)
            _logger.info("Local store initialized with Redis backend")
            return store
        except redis.RedisError as exc:
            _logger.warning("Failed to initialize Redis local store, fallback to file store: %s", exc)

    raw_path = path or os.getenv("TRIPBOOK_STORE_PATH", "").strip() or _DEFAULT_PATH
    return JsonFileKeyValueStore(raw_path)


__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "build_kv_store",
]
