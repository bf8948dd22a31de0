"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from protracker.database.sqlalchemy_db import SQLAlchemyDatabase


def _default_path(filename: str) -> str:
    home = Path.home()
    db_dir = home / ".protracker"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / filename)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create the primary-tier SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks PROTRACKER_DB_PATH
            environment variable, then defaults to ~/.protracker/protracker.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("PROTRACKER_DB_PATH")

    if database_path is None:
        database_path = _default_path("protracker.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_replica_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create the replica-tier ("cloud") SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks
            PROTRACKER_REPLICA_PATH environment variable, then defaults to
            ~/.protracker/replica.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("PROTRACKER_REPLICA_PATH")

    if database_path is None:
        database_path = _default_path("replica.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
