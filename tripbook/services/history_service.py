"""Read-only transaction history for the transactions tab."""

from __future__ import annotations

import logging
from typing import Any

from tripbook.application.context import SessionContext
from tripbook.domain.models import BookedPlan, Transaction
from tripbook.shared.exceptions import ApiError

_logger = logging.getLogger("tripbook.history")


def list_local_transactions(*, ctx: SessionContext, limit: int = 50) -> list[Transaction]:
    """Newest first."""
    safe_limit = max(1, min(limit, 500))
    rows = ctx.store.transactions()
    return list(reversed(rows))[:safe_limit]


def fetch_remote_bookings(*, ctx: SessionContext, force: bool = False) -> list[dict[str, Any]]:
    if ctx.remote is None:
        return []
    payload = ctx.remote.fetch("/api/transport-bookings", force=force)
    return list(payload) if isinstance(payload, list) else []


def fetch_booked_plans(*, ctx: SessionContext, force: bool = False) -> list[BookedPlan]:
    """Plans filed by the signed-in account; empty without a session."""
    if ctx.remote is None or not ctx.store.token():
        return []
    payload = ctx.remote.fetch("/api/booked-plans", force=force)
    if not isinstance(payload, list):
        return []
    return [BookedPlan.model_validate(row) for row in payload]


def transaction_history(*, ctx: SessionContext, limit: int = 50) -> dict[str, Any]:
    """Local log plus the server's view; a failed fetch leaves ``remote`` empty."""
    remote: list[dict[str, Any]] = []
    plans: list[BookedPlan] = []
    remote_error = ""
    try:
        remote = fetch_remote_bookings(ctx=ctx)
        plans = fetch_booked_plans(ctx=ctx)
    except ApiError as exc:
        _logger.warning("remote booking fetch failed: %s", exc)
        remote_error = str(exc)
    return {
        "local": list_local_transactions(ctx=ctx, limit=limit),
        "remote": remote,
        "plans": plans,
        "remote_error": remote_error,
    }


__all__ = ["fetch_booked_plans", "fetch_remote_bookings", "list_local_transactions", "transaction_history"]
