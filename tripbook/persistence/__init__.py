"""Persistence package exports."""

from tripbook.persistence.migration_runner import MigrationError, apply_sqlite_migrations
from tripbook.persistence.models import DuplicateRecord, NewUser, UserRecord
from tripbook.persistence.repository import TravelRepository, get_repository
from tripbook.persistence.sqlite_repository import SQLiteTravelRepository

__all__ = [
    "DuplicateRecord",
    "MigrationError",
    "NewUser",
    "SQLiteTravelRepository",
    "TravelRepository",
    "UserRecord",
    "apply_sqlite_migrations",
    "get_repository",
]
