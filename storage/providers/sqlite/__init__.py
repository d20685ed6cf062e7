"""SQLite storage provider implementations."""

from .entry_repo import SQLiteEntryRepo

__all__ = ["SQLiteEntryRepo"]
