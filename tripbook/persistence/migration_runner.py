"""Versioned SQL migrations for the tripbook database.

Every ``NNNN_<name>.sql`` file under ``migrations/`` is one version, applied in
filename order and recorded in ``schema_migrations`` with its sha256. Editing a
file after it has been applied is an error, not a re-run.
"""

from __future__ import annotations

import hashlib
import re
import sqlite3
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"
_FILENAME_RE = re.compile(r"^(\d{4}_[a-z0-9_]+)\.sql$")


class MigrationError(RuntimeError):
    """Applied migration no longer matches the file on disk."""


@dataclass(frozen=True)
class Migration:
    version: str
    sql: str

    @property
    def checksum(self) -> str:
        return hashlib.sha256(self.sql.encode("utf-8")).hexdigest()


@lru_cache(maxsize=1)
def available_migrations() -> tuple[Migration, ...]:
    found = []
    for path in sorted(_MIGRATIONS_DIR.glob("*.sql")):
        match = _FILENAME_RE.match(path.name)
        if match is None:
            raise MigrationError(f"unexpected file in migrations dir: {path.name}")
        found.append(Migration(version=match.group(1), sql=path.read_text(encoding="utf-8")))
    return tuple(found)


def ensure_migration_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            checksum TEXT NOT NULL,
            applied_at TEXT NOT NULL
        )
        """
    )


def list_applied_migrations(conn: sqlite3.Connection) -> dict[str, str]:
    """version -> checksum recorded when it was applied."""
    ensure_migration_table(conn)
    return {str(v): str(c) for v, c in conn.execute("SELECT version, checksum FROM schema_migrations")}


def pending_migrations(conn: sqlite3.Connection) -> list[Migration]:
    applied = list_applied_migrations(conn)
    pending = []
    for migration in available_migrations():
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            raise MigrationError(f"migration {migration.version} changed after it was applied")
    return pending


def apply_sqlite_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply pending migrations in order; returns the versions applied now."""
    applied_now: list[str] = []
    for migration in pending_migrations(conn):
        stamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
        conn.executescript(migration.sql)
        conn.execute(
            "INSERT INTO schema_migrations(version, checksum, applied_at) VALUES (?, ?, ?)",
            (migration.version, migration.checksum, stamp),
        )
        conn.commit()
        applied_now.append(migration.version)
    return applied_now


__all__ = [
    "Migration",
    "MigrationError",
    "apply_sqlite_migrations",
    "available_migrations",
    "ensure_migration_table",
    "list_applied_migrations",
    "pending_migrations",
]
