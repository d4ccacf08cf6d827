"""Typed facade over the fixed local-storage keys."""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from tripbook.domain.models import Transaction, TripPlan, TripSelection, User
from tripbook.infrastructure.kv_store import KeyValueStore

_logger = logging.getLogger("tripbook.local-store")

AUTH_TOKEN_KEY = "authToken"
USERS_KEY = "travelApp_users"
CURRENT_USER_KEY = "travelApp_currentUser"
SELECTED_PLAN_KEY = "selectedPlan"
TRIP_DETAILS_KEY = "currentTripDetails"
TRANSACTIONS_KEY = "transactions"


class LocalStore:
    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    @property
    def kv(self) -> KeyValueStore:
        return self._kv

    # ── auth token ──────────────────────────────────────

    def token(self) -> Optional[str]:
        value = self._kv.get(AUTH_TOKEN_KEY)
        return str(value) if value else None

    def set_token(self, token: str) -> None:
        self._kv.set(AUTH_TOKEN_KEY, token)

    def clear_token(self) -> None:
        self._kv.remove(AUTH_TOKEN_KEY)

    # ── user directory / session pointer ─────────────────

    def users(self) -> list[User]:
        rows = self._kv.get(USERS_KEY) or []
        users: list[User] = []
        for row in rows:
            try:
                users.append(User.model_validate(row))
            except ValidationError:
                _logger.warning("skipping malformed user record in local store")
        return users

    def save_users(self, users: list[User]) -> None:
        self._kv.set(USERS_KEY, [user.to_storage() for user in users])

    def find_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users():
            if user.email == email:
                return user
        return None

    def upsert_user(self, user: User) -> None:
        users = self.users()
        for idx, existing in enumerate(users):
            if existing.id == user.id:
                users[idx] = user
                break
        else:
            users.append(user)
        self.save_users(users)

    def current_user(self) -> Optional[User]:
        raw = self._kv.get(CURRENT_USER_KEY)
        if not raw:
            return None
        return User.model_validate(raw)

    def set_current_user(self, user: User) -> None:
        self._kv.set(CURRENT_USER_KEY, user.to_storage())

    def clear_current_user(self) -> None:
        self._kv.remove(CURRENT_USER_KEY)

    # ── in-flight trip ──────────────────────────────────

    def trip_selection(self) -> Optional[TripSelection]:
        raw = self._kv.get(TRIP_DETAILS_KEY)
        return TripSelection.model_validate(raw) if raw else None

    def save_trip_selection(self, trip: TripSelection) -> None:
        self._kv.set(TRIP_DETAILS_KEY, trip.to_storage())

    def selected_plan(self) -> Optional[dict[str, Any]]:
        raw = self._kv.get(SELECTED_PLAN_KEY)
        return dict(raw) if raw else None

    def save_selected_plan(self, plan: TripPlan, trip: Optional[TripSelection] = None) -> None:
        payload = plan.to_storage()
        if trip is not None:
            payload["tripDetails"] = trip.to_storage()
        self._kv.set(SELECTED_PLAN_KEY, payload)

    def clear_trip(self) -> None:
        self._kv.remove(TRIP_DETAILS_KEY)
        self._kv.remove(SELECTED_PLAN_KEY)

    # ── transaction log ─────────────────────────────────

    def transactions(self) -> list[Transaction]:
        return [Transaction.model_validate(row) for row in (self._kv.get(TRANSACTIONS_KEY) or [])]

    def append_transaction(self, txn: Transaction) -> int:
        # read-modify-write; concurrent writers can lose entries
        rows = list(self._kv.get(TRANSACTIONS_KEY) or [])
        rows.append(txn.to_storage())
        self._kv.set(TRANSACTIONS_KEY, rows)
        return len(rows)


__all__ = [
    "AUTH_TOKEN_KEY",
    "CURRENT_USER_KEY",
    "LocalStore",
    "SELECTED_PLAN_KEY",
    "TRANSACTIONS_KEY",
    "TRIP_DETAILS_KEY",
    "USERS_KEY",
]
