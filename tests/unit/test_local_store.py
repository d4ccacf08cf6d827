"""Key/value backends and the LocalStore facade."""

from __future__ import annotations

import pytest

from tripbook.domain.models import Transaction, TripPlan, TripSelection, User
from tripbook.infrastructure.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    build_kv_store,
)
from tripbook.infrastructure.local_store import (
    AUTH_TOKEN_KEY,
    CURRENT_USER_KEY,
    TRANSACTIONS_KEY,
    USERS_KEY,
    LocalStore,
)


def _txn(n: int) -> Transaction:
    return Transaction(
        transaction_id=f"TXN-{1767225600000 + n}",
        amount=f"{100 + n}.00",
        payment_method="upi",
        payment_status="success",
    )


@pytest.fixture(params=["memory", "file"])
def kv(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "storage.json")


def test_missing_key_reads_none(kv):
    assert kv.get("nope") is None
    kv.remove("nope")


def test_set_get_remove(kv):
    kv.set("k", {"a": [1, 2]})
    assert kv.get("k") == {"a": [1, 2]}
    kv.remove("k")
    assert kv.get("k") is None


def test_memory_store_copies_values():
    kv = InMemoryKeyValueStore()
    value = {"a": [1]}
    kv.set("k", value)
    value["a"].append(2)
    kv.get("k")["a"].append(3)
    assert kv.get("k") == {"a": [1]}
    assert kv.keys() == ["k"]


def test_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    JsonFileKeyValueStore(path).set(AUTH_TOKEN_KEY, "abc")
    assert JsonFileKeyValueStore(path).get(AUTH_TOKEN_KEY) == "abc"


def test_file_store_treats_corrupt_file_as_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    kv = JsonFileKeyValueStore(path)
    assert kv.get("anything") is None
    kv.set("k", 1)
    assert kv.get("k") == 1


def test_file_store_writes_leave_no_temp_files(tmp_path):
    path = tmp_path / "storage.json"
    kv = JsonFileKeyValueStore(path)
    for n in range(3):
        kv.set(TRANSACTIONS_KEY, [_txn(i).to_storage() for i in range(n + 1)])
    kv.remove(AUTH_TOKEN_KEY)

    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
    assert len(JsonFileKeyValueStore(path).get(TRANSACTIONS_KEY)) == 3


def test_failed_file_write_keeps_previous_document(tmp_path, monkeypatch):
    path = tmp_path / "storage.json"
    kv = JsonFileKeyValueStore(path)
    kv.set(AUTH_TOKEN_KEY, "abc")

    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("tripbook.infrastructure.kv_store.os.replace", refuse)
    with pytest.raises(OSError):
        kv.set(AUTH_TOKEN_KEY, "xyz")

    assert kv.get(AUTH_TOKEN_KEY) == "abc"
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]


def test_build_kv_store_defaults_to_file(tmp_path):
    kv = build_kv_store(path=tmp_path / "s.json")
    assert kv.backend == "file"
    assert build_kv_store().path.name == "local_storage.json"


def test_user_round_trip_is_deep_equal(kv):
    store = LocalStore(kv)
    user = User(
        id=1767225600000,
        username="ada@example.com",
        email="ada@example.com",
        name="Ada",
        password="pw",
        preferred_destinations=["Kyoto", "Bali"],
        dietary_preferences=["vegetarian"],
    )
    store.set_current_user(user)
    store.save_users([user])
    assert store.current_user() == user
    assert store.users() == [user]
    assert kv.get(CURRENT_USER_KEY)["preferredDestinations"] == ["Kyoto", "Bali"]


def test_append_only_transaction_log(kv):
    store = LocalStore(kv)
    snapshots = []
    for n in range(5):
        assert store.append_transaction(_txn(n)) == n + 1
        snapshots.append(store.transactions())

    final = store.transactions()
    assert len(final) == 5
    for n, snap in enumerate(snapshots):
        assert final[: n + 1] == snap
    assert len(kv.get(TRANSACTIONS_KEY)) == 5


def test_find_and_upsert_users(store):
    a = User(id=1, email="a@x.io", name="A")
    b = User(id=2, email="b@x.io", name="B")
    store.save_users([a, b])
    assert store.find_user_by_email("b@x.io") == b
    assert store.find_user_by_email("c@x.io") is None

    store.upsert_user(b.model_copy(update={"name": "Bee"}))
    store.upsert_user(User(id=3, email="c@x.io"))
    assert [u.name for u in store.users()] == ["A", "Bee", ""]


def test_malformed_user_rows_are_skipped(store):
    store.kv.set(USERS_KEY, [{"id": "not-an-int"}, User(id=1, email="a@x.io").to_storage()])
    assert [u.id for u in store.users()] == [1]


def test_token_and_trip_keys(store):
    assert store.token() is None
    store.set_token("tok")
    assert store.token() == "tok"
    store.clear_token()
    assert store.token() is None

    trip = TripSelection(destination="Bali", budget="900")
    plan = TripPlan(id=1, title="Wellness retreat - Bali")
    store.save_trip_selection(trip)
    store.save_selected_plan(plan, trip)
    assert store.trip_selection() == trip
    assert store.selected_plan()["tripDetails"]["destination"] == "Bali"
    store.clear_trip()
    assert store.trip_selection() is None
    assert store.selected_plan() is None
