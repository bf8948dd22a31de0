"""Database layer for protracker application."""

from protracker.database.base import Database
from protracker.database.factories import create_sqlite_database, create_replica_database

__all__ = ["Database", "create_sqlite_database", "create_replica_database"]
