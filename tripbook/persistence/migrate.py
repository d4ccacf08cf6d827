"""Apply (or list) pending schema migrations for the tripbook database."""

from __future__ import annotations

import argparse
import json
import sqlite3
from pathlib import Path

from dotenv import load_dotenv

from tripbook.config.settings import load_settings
from tripbook.persistence.migration_runner import apply_sqlite_migrations, pending_migrations


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Apply SQLite schema migrations")
    parser.add_argument("--db", default="", help="target SQLite file (default: $TRIPBOOK_DB)")
    parser.add_argument("--dry-run", action="store_true", help="only list pending versions")
    args = parser.parse_args(argv)

    db_path = Path(args.db.strip()) if args.db.strip() else load_settings().db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with sqlite3.connect(db_path) as conn:
        if args.dry_run:
            versions = [m.version for m in pending_migrations(conn)]
        else:
            versions = apply_sqlite_migrations(conn)

    key = "pending" if args.dry_run else "applied"
    print(
        json.dumps(
            {"db_path": str(db_path), f"{key}_count": len(versions), f"{key}_versions": versions},
            ensure_ascii=False,
            indent=2,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
