from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from tripbook.persistence import migrate
from tripbook.persistence.migration_runner import (
    MigrationError,
    apply_sqlite_migrations,
    list_applied_migrations,
    pending_migrations,
)


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    ).fetchone()
    return row is not None


def test_apply_sqlite_migrations_creates_schema_and_is_idempotent(tmp_path: Path):
    db_path = tmp_path / "migrations.sqlite3"
    with sqlite3.connect(db_path) as conn:
        first = apply_sqlite_migrations(conn)
        second = apply_sqlite_migrations(conn)
        applied = list_applied_migrations(conn)

        assert set(applied) == {"0001_init", "0002_indexes", "0003_booked_plans"}
        assert _table_exists(conn, "users")
        assert _table_exists(conn, "transactions")
        assert _table_exists(conn, "saved_places")
        assert _table_exists(conn, "booked_plans")
        assert first == ["0001_init", "0002_indexes", "0003_booked_plans"]
        assert second == []


def test_checksum_drift_is_rejected(tmp_path: Path):
    db_path = tmp_path / "drift.sqlite3"
    with sqlite3.connect(db_path) as conn:
        apply_sqlite_migrations(conn)
        conn.execute("UPDATE schema_migrations SET checksum='tampered' WHERE version='0001_init'")
        conn.commit()
        with pytest.raises(MigrationError):
            apply_sqlite_migrations(conn)


def test_migrate_cli_reports_applied_versions(tmp_path: Path, capsys):
    db_path = tmp_path / "cli" / "tripbook.sqlite3"
    assert migrate.main(["--db", str(db_path)]) == 0
    out = capsys.readouterr().out
    assert '"applied_count": 3' in out
    assert db_path.exists()

    assert migrate.main(["--db", str(db_path)]) == 0
    assert '"applied_count": 0' in capsys.readouterr().out


def test_migrate_cli_defaults_to_configured_db(tmp_path: Path, capsys):
    assert migrate.main([]) == 0
    assert str(tmp_path / "tripbook.sqlite3") in capsys.readouterr().out


def test_migrate_dry_run_lists_without_applying(tmp_path: Path, capsys):
    db_path = tmp_path / "dry.sqlite3"
    assert migrate.main(["--db", str(db_path), "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert '"pending_count": 3' in out
    with sqlite3.connect(db_path) as conn:
        assert not _table_exists(conn, "users")
        assert [m.version for m in pending_migrations(conn)] == ["0001_init", "0002_indexes", "0003_booked_plans"]
