"""SQLite repository for users, transactions, booked plans and saved places."""

from __future__ import annotations

import threading

import pytest

from tripbook.domain.enums import BookingStatus, Role
from tripbook.domain.models import BookedPlan, ProfileCompletion, SavedPlace, Transaction
from tripbook.persistence.models import DuplicateRecord, NewUser
from tripbook.persistence.repository import get_repository
from tripbook.persistence.sqlite_repository import SQLiteTravelRepository


@pytest.fixture
def repo(tmp_path) -> SQLiteTravelRepository:
    return SQLiteTravelRepository(tmp_path / "repo.sqlite3")


def _new_user(username: str = "ada", role: Role = Role.USER) -> NewUser:
    return NewUser(
        username=username,
        email=f"{username}@example.com",
        name=username.title(),
        password_hash="pbkdf2_sha256$1$salt$hash",
        role=role,
        created_at="2026-01-01T00:00:00Z",
    )


def _txn(transaction_id: str, user_id: int | None = 1, booking_type: str = "transport", at: str = "") -> Transaction:
    return Transaction(
        transaction_id=transaction_id,
        amount="120.00",
        payment_method="credit_card",
        payment_status="success",
        booking_type=booking_type,
        booking_details='{"serviceName":"Express Railways"}',
        user_id=user_id,
        created_at=at or "2026-01-01T00:00:00Z",
    )


class TestUsers:
    def test_create_and_lookup(self, repo):
        created = repo.create_user(_new_user())
        assert created.id > 0
        assert repo.get_user(created.id) == created
        assert repo.get_user_by_username("ada") == created
        assert repo.get_user_by_username("bob") is None
        assert created.to_user().password is None

    def test_duplicate_username(self, repo):
        repo.create_user(_new_user())
        with pytest.raises(DuplicateRecord):
            repo.create_user(_new_user())

    def test_session_token_respects_expiry(self, repo):
        user = repo.create_user(_new_user())
        repo.update_user_session(user.id, "tok", "2026-02-01T00:00:00Z")
        assert repo.get_user_by_session_token("tok", "2026-01-15T00:00:00Z").id == user.id
        assert repo.get_user_by_session_token("tok", "2026-02-02T00:00:00Z") is None
        assert repo.get_user_by_session_token("other", "2026-01-15T00:00:00Z") is None

        repo.update_user_session(user.id, None, None)
        assert repo.get_user_by_session_token("tok", "2026-01-15T00:00:00Z") is None

    def test_activity_language_profile(self, repo):
        user = repo.create_user(_new_user())
        repo.update_user_activity(user.id, "2026-01-02T10:00:00Z")
        repo.update_user_language(user.id, "hi")
        repo.update_user_profile(
            user.id,
            ProfileCompletion(phone="+91 98765 43210", preferred_destinations=["Goa", "Leh"]),
        )
        repo.mark_profile_prompt_shown(user.id)

        stored = repo.get_user(user.id)
        assert stored.last_active_at == "2026-01-02T10:00:00Z"
        assert stored.language == "hi"
        assert stored.phone == "+91 98765 43210"
        assert stored.country_of_residence is None
        assert stored.preferred_destinations == ["Goa", "Leh"]
        assert stored.profile_completion_prompt_shown is True


class TestTransactions:
    def test_create_get_and_status(self, repo):
        txn = repo.create_transaction(_txn("TXN-1"))
        assert txn.id is not None
        assert repo.get_transaction(txn.id) == txn
        assert repo.get_transaction(999) is None

        updated = repo.update_transaction_status(txn.id, "failed")
        assert updated.payment_status == "failed"
        assert repo.update_transaction_status(999, "failed") is None

    def test_transaction_id_is_unique(self, repo):
        repo.create_transaction(_txn("TXN-1"))
        with pytest.raises(DuplicateRecord):
            repo.create_transaction(_txn("TXN-1", user_id=2))

    def test_list_filters_and_orders_newest_first(self, repo):
        repo.create_transaction(_txn("TXN-1", at="2026-01-01T00:00:00Z"))
        repo.create_transaction(_txn("TXN-2", at="2026-01-03T00:00:00Z"))
        repo.create_transaction(_txn("TXN-3", booking_type="hotel", at="2026-01-02T00:00:00Z"))
        repo.create_transaction(_txn("TXN-4", user_id=2))

        mine = repo.list_transactions(user_id=1)
        assert [t.transaction_id for t in mine] == ["TXN-2", "TXN-3", "TXN-1"]
        transport = repo.list_transactions(user_id=1, booking_type="transport")
        assert [t.transaction_id for t in transport] == ["TXN-2", "TXN-1"]
        assert len(repo.list_transactions(limit=2)) == 2

    def test_concurrent_inserts(self, repo):
        errors: list[Exception] = []

        def worker(n: int) -> None:
            try:
                repo.create_transaction(_txn(f"TXN-{n}"))
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
        assert len(repo.list_transactions(user_id=1)) == 20


class TestSavedPlaces:
    def _place(self, place_id: str, user_id: int = 1) -> SavedPlace:
        return SavedPlace(
            user_id=user_id,
            place_id=place_id,
            title="Kyoto, Japan",
            location="Japan",
            thumbnail="https://example.com/kyoto.jpg",
            created_at="2026-01-01T00:00:00Z",
        )

    def test_save_check_remove(self, repo):
        saved = repo.create_saved_place(self._place("2"))
        assert saved.id is not None
        repo.create_saved_place(self._place("3", user_id=2))

        assert [p.place_id for p in repo.list_saved_places(1)] == ["2"]
        assert repo.is_place_saved(1, "2")
        assert not repo.is_place_saved(2, "2")

        assert repo.remove_saved_place(1, "2") == 1
        assert repo.remove_saved_place(1, "2") == 0
        assert repo.list_saved_places(1) == []


class TestBookedPlans:
    def _plan(self, user_id: int = 1, title: str = "Temple Trail", at: str = "2026-02-01T00:00:00Z") -> BookedPlan:
        return BookedPlan(
            user_id=user_id,
            plan_title=title,
            destination="Kyoto, Japan",
            total_amount=25000,
            transport_amount=25000,
            payment_method="upi",
            travel_date="2026-04-01",
            duration="5 days",
            created_at=at,
        )

    def test_create_and_get(self, repo):
        plan = repo.create_booked_plan(self._plan())
        assert plan.id is not None
        assert plan.updated_at == plan.created_at
        assert plan.booking_status == BookingStatus.CONFIRMED
        assert plan.hotel_details == "{}"
        assert repo.get_booked_plan(plan.id) == plan
        assert repo.get_booked_plan(999) is None

    def test_list_is_per_user_oldest_first(self, repo):
        repo.create_booked_plan(self._plan(title="Later", at="2026-03-01T00:00:00Z"))
        repo.create_booked_plan(self._plan(title="Earlier", at="2026-01-01T00:00:00Z"))
        repo.create_booked_plan(self._plan(user_id=2, title="Someone else"))
        assert [p.plan_title for p in repo.list_booked_plans(1)] == ["Earlier", "Later"]
        assert repo.list_booked_plans(3) == []

    def test_update_status(self, repo):
        plan = repo.create_booked_plan(self._plan())
        updated = repo.update_booked_plan_status(plan.id, "cancelled", "2026-02-02T00:00:00Z")
        assert updated.booking_status == BookingStatus.CANCELLED
        assert updated.updated_at == "2026-02-02T00:00:00Z"
        assert updated.created_at == plan.created_at
        assert repo.update_booked_plan_status(999, "cancelled", "2026-02-02T00:00:00Z") is None


def test_get_repository_uses_configured_path(tmp_path):
    repo = get_repository()
    assert repo.backend == "sqlite"
    assert repo.db_path == tmp_path / "tripbook.sqlite3"
    assert repo.db_path.exists()
