"""Transaction history service."""

from __future__ import annotations

from tripbook.domain.enums import BookingStatus
from tripbook.domain.models import Transaction
from tripbook.services.history_service import (
    fetch_booked_plans,
    fetch_remote_bookings,
    list_local_transactions,
    transaction_history,
)
from tripbook.shared.exceptions import ApiError


class _Remote:
    def __init__(self, payload=None, error: ApiError | None = None):
        self.payload = payload
        self.error = error
        self.forced: list[bool] = []

    def fetch(self, path, *, force=False):
        self.forced.append(force)
        if self.error is not None:
            raise self.error
        return self.payload


def _seed(store, count: int) -> None:
    for n in range(count):
        store.append_transaction(
            Transaction(
                transaction_id=f"TXN-{n}",
                amount="10.00",
                payment_method="upi",
                payment_status="success",
            )
        )


def test_local_transactions_newest_first(ctx, store):
    _seed(store, 4)
    rows = list_local_transactions(ctx=ctx, limit=2)
    assert [t.transaction_id for t in rows] == ["TXN-3", "TXN-2"]


def test_remote_bookings_without_remote(ctx):
    assert fetch_remote_bookings(ctx=ctx) == []


def test_remote_bookings_pass_force(ctx):
    remote = _Remote(payload=[{"transactionId": "TXN-9"}])
    ctx.remote = remote
    assert fetch_remote_bookings(ctx=ctx, force=True) == [{"transactionId": "TXN-9"}]
    assert remote.forced == [True]


def test_non_list_payload_is_empty(ctx):
    ctx.remote = _Remote(payload={"unexpected": True})
    assert fetch_remote_bookings(ctx=ctx) == []


def test_history_survives_remote_failure(ctx, store):
    _seed(store, 1)
    ctx.remote = _Remote(error=ApiError(500, "db down"))
    history = transaction_history(ctx=ctx)
    assert [t.transaction_id for t in history["local"]] == ["TXN-0"]
    assert history["remote"] == []
    assert history["remote_error"] == "500: db down"


def test_booked_plans_need_a_session(ctx, store):
    ctx.remote = _Remote(payload=[])
    assert fetch_booked_plans(ctx=ctx) == []
    assert ctx.remote.forced == []


def test_booked_plans_are_parsed(ctx, store):
    store.set_token("t" * 64)
    ctx.remote = _Remote(
        payload=[
            {
                "id": 3,
                "userId": 1,
                "planTitle": "Temple Trail",
                "destination": "Kyoto, Japan",
                "totalAmount": 25000,
                "transportAmount": 25000,
                "paymentMethod": "upi",
                "bookingStatus": "cancelled",
                "travelDate": "2026-04-01",
                "duration": "5 days",
            }
        ]
    )
    (plan,) = fetch_booked_plans(ctx=ctx)
    assert plan.id == 3
    assert plan.booking_status == BookingStatus.CANCELLED
    assert plan.hotel_amount == 0
    assert transaction_history(ctx=ctx)["plans"] == [plan]
