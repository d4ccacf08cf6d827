"""SQLite implementation for users, transactions and saved places."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Optional

from tripbook.domain.models import BookedPlan, ProfileCompletion, SavedPlace, Transaction
from tripbook.persistence.migration_runner import apply_sqlite_migrations
from tripbook.persistence.models import DuplicateRecord, NewUser, UserRecord

_USER_COLUMNS = (
    "id, username, email, name, password, role, language, session_token, session_expiry, "
    "last_active_at, phone, date_of_birth, country_of_residence, travel_style, travel_frequency, "
    "preferred_destinations_json, passport_country, emergency_contact, dietary_preferences_json, "
    "profile_completion_prompt_shown, created_at"
)
_TRANSACTION_COLUMNS = (
    "id, user_id, transaction_id, amount, payment_method, payment_status, "
    "booking_type, booking_details, created_at"
)
_PLACE_COLUMNS = "id, user_id, place_id, title, location, thumbnail, created_at"
_PLAN_COLUMNS = (
    "id, user_id, plan_title, destination, plan_details, transport_details, hotel_details, "
    "itinerary_details, total_amount, transport_amount, hotel_amount, itinerary_amount, "
    "payment_method, booking_status, travel_date, duration, created_at, updated_at"
)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def _from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def _user_from_row(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        name=row["name"],
        password_hash=row["password"],
        role=row["role"],
        language=row["language"],
        session_token=row["session_token"],
        session_expiry=row["session_expiry"],
        last_active_at=row["last_active_at"],
        phone=row["phone"],
        date_of_birth=row["date_of_birth"],
        country_of_residence=row["country_of_residence"],
        travel_style=row["travel_style"],
        travel_frequency=row["travel_frequency"],
        preferred_destinations=_from_json(row["preferred_destinations_json"], []),
        passport_country=row["passport_country"],
        emergency_contact=row["emergency_contact"],
        dietary_preferences=_from_json(row["dietary_preferences_json"], []),
        profile_completion_prompt_shown=bool(row["profile_completion_prompt_shown"]),
        created_at=row["created_at"],
    )


def _transaction_from_row(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row["id"],
        user_id=row["user_id"],
        transaction_id=row["transaction_id"],
        amount=row["amount"],
        payment_method=row["payment_method"],
        payment_status=row["payment_status"],
        booking_type=row["booking_type"],
        booking_details=row["booking_details"],
        created_at=row["created_at"],
    )


def _place_from_row(row: sqlite3.Row) -> SavedPlace:
    return SavedPlace(
        id=row["id"],
        user_id=row["user_id"],
        place_id=row["place_id"],
        title=row["title"],
        location=row["location"],
        thumbnail=row["thumbnail"],
        created_at=row["created_at"],
    )


def _plan_from_row(row: sqlite3.Row) -> BookedPlan:
    return BookedPlan.model_validate({key: row[key] for key in row.keys()})


class SQLiteTravelRepository:
    backend = "sqlite"

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            apply_sqlite_migrations(conn)

    # users

    def create_user(self, user: NewUser) -> UserRecord:
        with self._lock, self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO users (username, email, name, password, role, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (user.username, user.email, user.name, user.password_hash, user.role.value, user.created_at),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateRecord(f"username already exists: {user.username}") from exc
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return _user_from_row(row)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock, self._connect() as conn:
            row = conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
        return _user_from_row(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?", (username,)
            ).fetchone()
        return _user_from_row(row) if row else None

    def get_user_by_session_token(self, token: str, now: str) -> Optional[UserRecord]:
        """Token owner, provided the session has not expired at ``now``."""
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT {_USER_COLUMNS} FROM users
                WHERE session_token = ? AND session_expiry IS NOT NULL AND session_expiry > ?
                """,
                (token, now),
            ).fetchone()
        return _user_from_row(row) if row else None

    def update_user_session(self, user_id: int, token: Optional[str], expiry: Optional[str]) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                "UPDATE users SET session_token = ?, session_expiry = ? WHERE id = ?",
                (token, expiry, user_id),
            )

    def update_user_activity(self, user_id: int, at: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("UPDATE users SET last_active_at = ? WHERE id = ?", (at, user_id))

    def update_user_language(self, user_id: int, language: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("UPDATE users SET language = ? WHERE id = ?", (language, user_id))

    def update_user_profile(self, user_id: int, profile: ProfileCompletion) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                UPDATE users SET
                    phone = ?, date_of_birth = ?, country_of_residence = ?,
                    travel_style = ?, travel_frequency = ?, preferred_destinations_json = ?,
                    passport_country = ?, emergency_contact = ?, dietary_preferences_json = ?
                WHERE id = ?
                """,
                (
                    profile.phone or None,
                    profile.date_of_birth or None,
                    profile.country_of_residence or None,
                    profile.travel_style or None,
                    profile.travel_frequency or None,
                    _to_json(profile.preferred_destinations),
                    profile.passport_country or None,
                    profile.emergency_contact or None,
                    _to_json(profile.dietary_preferences),
                    user_id,
                ),
            )

    def mark_profile_prompt_shown(self, user_id: int) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                "UPDATE users SET profile_completion_prompt_shown = 1 WHERE id = ?", (user_id,)
            )

    # transactions

    def create_transaction(self, txn: Transaction) -> Transaction:
        with self._lock, self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO transactions (
                        user_id, transaction_id, amount, payment_method, payment_status,
                        booking_type, booking_details, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        txn.user_id,
                        txn.transaction_id,
                        txn.amount,
                        txn.payment_method,
                        txn.payment_status,
                        txn.booking_type,
                        txn.booking_details,
                        txn.created_at,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateRecord(f"transaction already exists: {txn.transaction_id}") from exc
            row = conn.execute(
                f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return _transaction_from_row(row)

    def get_transaction(self, txn_id: int) -> Optional[Transaction]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (txn_id,)
            ).fetchone()
        return _transaction_from_row(row) if row else None

    def list_transactions(
        self,
        user_id: Optional[int] = None,
        booking_type: Optional[str] = None,
        limit: int = 100,
    ) -> list[Transaction]:
        clauses: list[str] = []
        params: list[Any] = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if booking_type is not None:
            clauses.append("booking_type = ?")
            params.append(booking_type)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(max(1, int(limit)))
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_TRANSACTION_COLUMNS} FROM transactions
                {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                params,
            ).fetchall()
        return [_transaction_from_row(row) for row in rows]

    def update_transaction_status(self, txn_id: int, status: str) -> Optional[Transaction]:
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                "UPDATE transactions SET payment_status = ? WHERE id = ?", (status, txn_id)
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {_TRANSACTION_COLUMNS} FROM transactions WHERE id = ?", (txn_id,)
            ).fetchone()
        return _transaction_from_row(row)

    # saved places

    def list_saved_places(self, user_id: int) -> list[SavedPlace]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_PLACE_COLUMNS} FROM saved_places WHERE user_id = ? ORDER BY created_at DESC, id DESC",
                (user_id,),
            ).fetchall()
        return [_place_from_row(row) for row in rows]

    def create_saved_place(self, place: SavedPlace) -> SavedPlace:
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO saved_places (user_id, place_id, title, location, thumbnail, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (place.user_id, place.place_id, place.title, place.location, place.thumbnail, place.created_at),
            )
            row = conn.execute(
                f"SELECT {_PLACE_COLUMNS} FROM saved_places WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return _place_from_row(row)

    def remove_saved_place(self, user_id: int, place_id: str) -> int:
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM saved_places WHERE user_id = ? AND place_id = ?", (user_id, place_id)
            )
        return cursor.rowcount

    def is_place_saved(self, user_id: int, place_id: str) -> bool:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM saved_places WHERE user_id = ? AND place_id = ? LIMIT 1",
                (user_id, place_id),
            ).fetchone()
        return row is not None


    # booked plans

    def create_booked_plan(self, plan: BookedPlan) -> BookedPlan:
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO booked_plans (
                    user_id, plan_title, destination, plan_details, transport_details, hotel_details,
                    itinerary_details, total_amount, transport_amount, hotel_amount, itinerary_amount,
                    payment_method, booking_status, travel_date, duration, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    plan.user_id,
                    plan.plan_title,
                    plan.destination,
                    plan.plan_details,
                    plan.transport_details,
                    plan.hotel_details,
                    plan.itinerary_details,
                    plan.total_amount,
                    plan.transport_amount,
                    plan.hotel_amount,
                    plan.itinerary_amount,
                    plan.payment_method,
                    plan.booking_status.value,
                    plan.travel_date,
                    plan.duration,
                    plan.created_at,
                    plan.updated_at or plan.created_at,
                ),
            )
            row = conn.execute(
                f"SELECT {_PLAN_COLUMNS} FROM booked_plans WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return _plan_from_row(row)

    def list_booked_plans(self, user_id: int) -> list[BookedPlan]:
        """Oldest first, the order plans were booked in."""
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_PLAN_COLUMNS} FROM booked_plans WHERE user_id = ? ORDER BY created_at, id",
                (user_id,),
            ).fetchall()
        return [_plan_from_row(row) for row in rows]

    def get_booked_plan(self, plan_id: int) -> Optional[BookedPlan]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT {_PLAN_COLUMNS} FROM booked_plans WHERE id = ?", (plan_id,)
            ).fetchone()
        return _plan_from_row(row) if row else None

    def update_booked_plan_status(self, plan_id: int, status: str, at: str) -> Optional[BookedPlan]:
        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                "UPDATE booked_plans SET booking_status = ?, updated_at = ? WHERE id = ?",
                (status, at, plan_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {_PLAN_COLUMNS} FROM booked_plans WHERE id = ?", (plan_id,)
            ).fetchone()
        return _plan_from_row(row)


__all__ = ["SQLiteTravelRepository"]
