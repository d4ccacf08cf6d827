"""pytest global fixtures: isolated storage, no simulated delays."""

from __future__ import annotations

import io
import random

import pytest

from tripbook.application.context import SessionContext
from tripbook.application.payments import FixedClock
from tripbook.infrastructure.kv_store import InMemoryKeyValueStore
from tripbook.infrastructure.local_store import LocalStore
from tripbook.infrastructure.logging import StructuredLogger

_TRIPBOOK_ENV = (
    "TRIPBOOK_REDIS_URL",
    "TRIPBOOK_API_BASE_URL",
    "TRIPBOOK_API_TIMEOUT_SECONDS",
    "TRIPBOOK_SESSION_DAYS",
    "RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW",
    "CORS_ORIGINS",
    "ENABLE_DOCS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Point every backend at tmp_path and drop shared-service settings."""
    for name in _TRIPBOOK_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TRIPBOOK_DB", str(tmp_path / "tripbook.sqlite3"))
    monkeypatch.setenv("TRIPBOOK_STORE_PATH", str(tmp_path / "local_storage.json"))
    monkeypatch.setenv("TRIPBOOK_GENERATION_DELAY_SECONDS", "0")
    monkeypatch.setenv("TRIPBOOK_PAYMENT_DELAY_SECONDS", "0")
    yield


@pytest.fixture
def store() -> LocalStore:
    return LocalStore(InMemoryKeyValueStore())


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def ctx(store, clock, log_stream) -> SessionContext:
    return SessionContext(
        store=store,
        clock=clock,
        sleeper=clock.sleep,
        plan_rng=random.Random(7),
        logger=StructuredLogger(trace_id="test", output=log_stream),
    )
