"""Persistence layer for pocketbook."""

from pocketbook.database.base import KeyValueStore
from pocketbook.database.factories import create_memory_store, create_sqlite_store

__all__ = ["KeyValueStore", "create_memory_store", "create_sqlite_store"]
