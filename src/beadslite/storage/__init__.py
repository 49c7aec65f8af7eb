"""Persistence layer for issues and dependencies."""

from beadslite.storage.interface import Storage
from beadslite.storage.sqlite_store import SQLiteStorage, open_storage

__all__ = ["Storage", "SQLiteStorage", "open_storage"]
