"""Persistence repository interface and factory."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from tripbook.config.settings import load_settings
from tripbook.domain.models import BookedPlan, ProfileCompletion, SavedPlace, Transaction
from tripbook.persistence.models import NewUser, UserRecord
from tripbook.persistence.sqlite_repository import SQLiteTravelRepository


class TravelRepository(Protocol):
    backend: str

    def create_user(self, user: NewUser) -> UserRecord: ...

    def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    def get_user_by_session_token(self, token: str, now: str) -> Optional[UserRecord]: ...

    def update_user_session(self, user_id: int, token: Optional[str], expiry: Optional[str]) -> None: ...

    def update_user_activity(self, user_id: int, at: str) -> None: ...

    def update_user_language(self, user_id: int, language: str) -> None: ...

    def update_user_profile(self, user_id: int, profile: ProfileCompletion) -> None: ...

    def mark_profile_prompt_shown(self, user_id: int) -> None: ...

    def create_transaction(self, txn: Transaction) -> Transaction: ...

    def get_transaction(self, txn_id: int) -> Optional[Transaction]: ...

    def list_transactions(
        self,
        user_id: Optional[int] = None,
        booking_type: Optional[str] = None,
        limit: int = 100,
    ) -> list[Transaction]: ...

    def update_transaction_status(self, txn_id: int, status: str) -> Optional[Transaction]: ...

    def list_saved_places(self, user_id: int) -> list[SavedPlace]: ...

    def create_saved_place(self, place: SavedPlace) -> SavedPlace: ...

    def remove_saved_place(self, user_id: int, place_id: str) -> int: ...

    def is_place_saved(self, user_id: int, place_id: str) -> bool: ...

    def create_booked_plan(self, plan: BookedPlan) -> BookedPlan: ...

    def list_booked_plans(self, user_id: int) -> list[BookedPlan]: ...

    def get_booked_plan(self, plan_id: int) -> Optional[BookedPlan]: ...

    def update_booked_plan_status(self, plan_id: int, status: str, at: str) -> Optional[BookedPlan]: ...


def get_repository(db_path: str | Path | None = None) -> TravelRepository:
    return SQLiteTravelRepository(db_path or load_settings().db_path)


__all__ = ["TravelRepository", "get_repository"]
