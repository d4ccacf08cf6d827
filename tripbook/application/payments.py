"""Simulated payment processing with injectable time and outcome."""

from __future__ import annotations

import datetime as dt
import random
from typing import Optional, Protocol

from tripbook.domain.enums import PaymentMethod, PaymentStatus
from tripbook.domain.models import PaymentRecord


class Clock(Protocol):
    def now(self) -> dt.datetime: ...


class SystemClock:
    def now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)


class FixedClock:
    """Manually advanced clock; ``sleep`` moves time instead of blocking."""

    def __init__(self, start: Optional[dt.datetime] = None):
        self._now = start or dt.datetime(2026, 1, 1, tzinfo=dt.timezone.utc)

    def now(self) -> dt.datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now = self._now + dt.timedelta(seconds=seconds)

    def sleep(self, seconds: float) -> None:
        self.advance(seconds)


class OutcomeProvider(Protocol):
    def decide(self, method: PaymentMethod, amount: float) -> PaymentStatus: ...


class AlwaysSucceed:
    """The outcome used by the booking flow."""

    def decide(self, method: PaymentMethod, amount: float) -> PaymentStatus:
        return PaymentStatus.SUCCESS


class FixedOutcome:
    def __init__(self, status: PaymentStatus):
        self._status = PaymentStatus(status)

    def decide(self, method: PaymentMethod, amount: float) -> PaymentStatus:
        return self._status


class RandomOutcome:
    """Uniform pick over success/failed/pending. Opt-in only."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def decide(self, method: PaymentMethod, amount: float) -> PaymentStatus:
        return self._rng.choice([PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.PENDING])


def mint_transaction_id(clock: Clock) -> str:
    return f"TXN-{int(clock.now().timestamp() * 1000)}"


class MockPaymentProcessor:
    def __init__(self, outcome: Optional[OutcomeProvider] = None, clock: Optional[Clock] = None):
        self._outcome = outcome or AlwaysSucceed()
        self._clock = clock or SystemClock()

    def process(
        self,
        method: PaymentMethod,
        amount: float,
        details: dict[str, str],
        booking_id: Optional[str] = None,
    ) -> PaymentRecord:
        status = self._outcome.decide(method, amount)
        return PaymentRecord(
            method=method,
            amount=amount,
            details=dict(details),
            booking_id=booking_id,
            timestamp=self._clock.now().isoformat(),
            status=status,
            transaction_id=mint_transaction_id(self._clock),
        )


__all__ = [
    "AlwaysSucceed",
    "Clock",
    "FixedClock",
    "FixedOutcome",
    "MockPaymentProcessor",
    "OutcomeProvider",
    "RandomOutcome",
    "SystemClock",
    "mint_transaction_id",
]
