"""Session context for dependency injection."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from tripbook.application.payments import (
    AlwaysSucceed,
    Clock,
    MockPaymentProcessor,
    OutcomeProvider,
    SystemClock,
)
from tripbook.config.settings import Settings, load_settings
from tripbook.infrastructure.api_client import ApiClient
from tripbook.infrastructure.kv_store import build_kv_store
from tripbook.infrastructure.local_store import LocalStore
from tripbook.infrastructure.logging import StructuredLogger, get_logger
from tripbook.infrastructure.query_cache import QueryCache


@dataclass
class SessionContext:
    store: LocalStore
    clock: Clock = field(default_factory=SystemClock)
    sleeper: Callable[[float], None] = time.sleep
    outcome: OutcomeProvider = field(default_factory=AlwaysSucceed)
    plan_rng: random.Random = field(default_factory=random.Random)
    remote: Optional[QueryCache] = None
    logger: Any = None
    generation_delay_seconds: float = 2.0
    payment_delay_seconds: float = 1.5

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger()

    def payment_processor(self) -> MockPaymentProcessor:
        return MockPaymentProcessor(outcome=self.outcome, clock=self.clock)


def make_session_context(
    settings: Optional[Settings] = None,
    *,
    remote: bool = False,
    logger: Optional[StructuredLogger] = None,
) -> SessionContext:
    settings = settings or load_settings()
    store = LocalStore(build_kv_store(path=settings.store_path, redis_url=settings.redis_url))
    query_cache = None
    if remote:
        client = ApiClient(store, base_url=settings.api_base_url, timeout=settings.api_timeout_seconds)
        query_cache = QueryCache(client)
    return SessionContext(
        store=store,
        remote=query_cache,
        logger=logger,
        generation_delay_seconds=settings.generation_delay_seconds,
        payment_delay_seconds=settings.payment_delay_seconds,
    )


__all__ = ["SessionContext", "make_session_context"]
