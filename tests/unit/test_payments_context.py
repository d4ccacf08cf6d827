"""Mock payment processor and session context wiring."""

from __future__ import annotations

import random
import re

from tripbook.application.context import make_session_context
from tripbook.application.payments import (
    AlwaysSucceed,
    FixedClock,
    FixedOutcome,
    MockPaymentProcessor,
    RandomOutcome,
    mint_transaction_id,
)
from tripbook.config.settings import load_settings
from tripbook.domain.enums import PaymentMethod, PaymentStatus


def test_default_processor_always_succeeds():
    clock = FixedClock()
    record = MockPaymentProcessor(clock=clock).process(PaymentMethod.UPI, 85.0, {"upiId": "a@b"}, "bus-2")
    assert record.status == PaymentStatus.SUCCESS
    assert record.transaction_id == "TXN-1767225600000"
    assert record.timestamp == "2026-01-01T00:00:00+00:00"
    assert record.booking_id == "bus-2"


def test_transaction_ids_follow_clock():
    clock = FixedClock()
    first = mint_transaction_id(clock)
    clock.advance(1.5)
    second = mint_transaction_id(clock)
    assert re.fullmatch(r"TXN-\d+", first)
    assert int(second[4:]) - int(first[4:]) == 1500


def test_fixed_outcome_forces_branch():
    processor = MockPaymentProcessor(outcome=FixedOutcome(PaymentStatus.PENDING), clock=FixedClock())
    assert processor.process(PaymentMethod.NET_BANKING, 10.0, {}).status == PaymentStatus.PENDING


def test_random_outcome_covers_all_statuses():
    outcome = RandomOutcome(random.Random(5))
    seen = {outcome.decide(PaymentMethod.UPI, 1.0) for _ in range(60)}
    assert seen == {PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.PENDING}


def test_make_session_context_uses_settings(tmp_path):
    ctx = make_session_context(load_settings())
    assert isinstance(ctx.outcome, AlwaysSucceed)
    assert ctx.remote is None
    assert ctx.generation_delay_seconds == 0.0
    assert ctx.store.kv.backend == "file"
    assert ctx.store.kv.path == tmp_path / "local_storage.json"


def test_make_session_context_remote_uses_api_base(monkeypatch):
    monkeypatch.setenv("TRIPBOOK_API_BASE_URL", "http://api.internal:9000")
    ctx = make_session_context(remote=True)
    assert ctx.remote is not None
    assert ctx.remote.client is not None
