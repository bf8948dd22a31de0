"""Shared pytest fixtures for protracker tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from protracker.database.base import Database
from protracker.database.factories import create_replica_database, create_sqlite_database
from protracker.domain.entities import (
    BillerProfile,
    Client,
    Invoice,
    Project,
    TimeEntry,
    WorkingSet,
)
from protracker.domain.workspace import WorkspaceService


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int = 1000) -> int:
        self.now += millis
        return self.now


class FailingDatabase(Database):
    """Database whose every operation fails like an unavailable tier."""

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    def get_value(self, key):
        raise SQLAlchemyError("disk I/O error")

    def set_value(self, key, value):
        raise SQLAlchemyError("database or disk is full")

    def delete_value(self, key):
        raise SQLAlchemyError("disk I/O error")

    def list_keys(self, prefix=""):
        raise SQLAlchemyError("disk I/O error")


def _temp_database(factory):
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = factory(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()
    return db


def _cleanup(db):
    db.disconnect()
    if os.path.exists(db.database_path):
        os.unlink(db.database_path)


@pytest.fixture
def temp_db():
    """Create a temporary primary-tier database for testing."""
    db = _temp_database(create_sqlite_database)
    yield db
    _cleanup(db)


@pytest.fixture
def replica_db():
    """Create a temporary replica-tier database for testing."""
    db = _temp_database(create_replica_database)
    yield db
    _cleanup(db)


@pytest.fixture
def failing_db():
    """Create a database that fails every read and write."""
    return FailingDatabase()


@pytest.fixture
def clock():
    """Create a controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def workspace(temp_db, replica_db, clock):
    """Create a WorkspaceService over temporary databases."""
    return WorkspaceService(temp_db, replica_db, clock=clock)


@pytest.fixture
def sample_working_set():
    """A small, referentially consistent working set."""
    return WorkingSet(
        clients=[Client(id="c1", name="Acme Corp", contact_email="billing@acme.example")],
        projects=[
            Project(id="p1", client_id="c1", name="Website", hourly_rate=Decimal("80"), currency="USD")
        ],
        time_entries=[
            TimeEntry(id="t2", project_id="p1", date=date(2024, 3, 2), hours=Decimal("2.5"), invoice_id="i1"),
            TimeEntry(id="t1", project_id="p1", date=date(2024, 3, 1), hours=Decimal("1.25"), invoice_id="i1"),
        ],
        invoices=[
            Invoice(
                id="i1",
                client_id="c1",
                invoice_number="INV-0001",
                total_amount=Decimal("100"),
                time_entry_ids=("t1", "t2"),
                issue_date=date(2024, 3, 5),
                due_date=date(2024, 4, 4),
            )
        ],
        biller_profile=BillerProfile(name="Jane Doe Consulting", email="jane@example.com"),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_args(temp_db, replica_db):
    """Global CLI options pointing both tiers at temporary databases."""
    return ["--db-path", temp_db.database_path, "--replica-path", replica_db.database_path]
