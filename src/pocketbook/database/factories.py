"""Store factory functions for creating store instances."""

import os
from pathlib import Path
from typing import Optional

from pocketbook.database.memory import InMemoryStore
from pocketbook.database.sqlalchemy_store import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks POCKETBOOK_DB_PATH
            environment variable, then defaults to ~/.pocketbook/pocketbook.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("POCKETBOOK_DB_PATH")

    if database_path is None:
        # Default to ~/.pocketbook/pocketbook.db
        home = Path.home()
        db_dir = home / ".pocketbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pocketbook.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyStore(database_url)


def create_memory_store() -> InMemoryStore:
    """Create an empty in-memory store."""
    return InMemoryStore()
