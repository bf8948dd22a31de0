"""Primary-tier record storage.

``EntityStore`` wraps a ``Database`` with a contract that never raises:
reads fall back to a default and writes report success as a boolean, so
callers can degrade gracefully when the tier is unavailable or corrupted.
"""

import logging
from typing import Any, Callable, TypeVar

import simplejson as json
from sqlalchemy.exc import SQLAlchemyError

from protracker.database.base import Database
from protracker.database.mappers import (
    biller_profile_from_record,
    biller_profile_to_record,
    client_from_record,
    client_to_record,
    exchange_rate_from_record,
    exchange_rate_to_record,
    invoice_from_record,
    invoice_reminder_from_record,
    invoice_reminder_to_record,
    invoice_to_record,
    payment_from_record,
    payment_to_record,
    project_from_record,
    project_to_record,
    recurring_template_from_record,
    recurring_template_to_record,
    time_entry_from_record,
    time_entry_to_record,
)
from protracker.domain.entities import BillerProfile, WorkingSet
from protracker.domain.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageKeys:
    """Logical keys of the persisted state layout."""

    CLIENTS = "clients"
    PROJECTS = "projects"
    TIME_ENTRIES = "timeEntries"
    INVOICES = "invoices"
    PAYMENTS = "payments"
    RECURRING_TEMPLATES = "recurringTemplates"
    INVOICE_REMINDERS = "invoiceReminders"
    EXCHANGE_RATES = "exchangeRates"
    BILLER_INFO = "billerInfo"
    LAST_SYNC = "lastSync"
    BACKUP_METADATA = "backupMetadata"
    PAYMENT_STATUS_MIGRATION = "payment_status_migration_v1"


# (working set attribute, storage key, from_record, to_record)
_COLLECTIONS: tuple[tuple[str, str, Callable[[Any], Any], Callable[[Any], Any]], ...] = (
    ("clients", StorageKeys.CLIENTS, client_from_record, client_to_record),
    ("projects", StorageKeys.PROJECTS, project_from_record, project_to_record),
    ("time_entries", StorageKeys.TIME_ENTRIES, time_entry_from_record, time_entry_to_record),
    ("invoices", StorageKeys.INVOICES, invoice_from_record, invoice_to_record),
    ("payments", StorageKeys.PAYMENTS, payment_from_record, payment_to_record),
    (
        "recurring_templates",
        StorageKeys.RECURRING_TEMPLATES,
        recurring_template_from_record,
        recurring_template_to_record,
    ),
    (
        "invoice_reminders",
        StorageKeys.INVOICE_REMINDERS,
        invoice_reminder_from_record,
        invoice_reminder_to_record,
    ),
    ("exchange_rates", StorageKeys.EXCHANGE_RATES, exchange_rate_from_record, exchange_rate_to_record),
)


class EntityStore:
    """JSON value store over a persistence tier."""

    def __init__(self, db: Database):
        """Initialize entity store.

        Args:
            db: Database instance backing this tier
        """
        self.db = db

    def read(self, key: str, default: T) -> Any | T:
        """Read and deserialize the value under key.

        Returns default when the key is absent or the stored value cannot be
        read or decoded. Never raises.
        """
        try:
            raw = self.db.get_value(key)
            if raw is None:
                return default
            return json.loads(raw, use_decimal=True)
        except (SQLAlchemyError, ValueError) as e:
            logger.error("Error reading storage key %r: %s", key, e)
            return default

    def write(self, key: str, value: Any) -> bool:
        """Serialize and store value under key.

        Returns False on failure (e.g. storage full or unserializable value).
        Never raises.
        """
        try:
            raw = json.dumps(value, use_decimal=True)
            self.db.set_value(key, raw)
            return True
        except (SQLAlchemyError, ValueError, TypeError) as e:
            logger.error("Error writing storage key %r: %s", key, e)
            return False

    def delete(self, key: str) -> bool:
        """Delete key. Returns False if nothing was deleted or deletion failed."""
        try:
            return self.db.delete_value(key)
        except SQLAlchemyError as e:
            logger.error("Error deleting storage key %r: %s", key, e)
            return False

    def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with prefix; empty on failure."""
        try:
            return self.db.list_keys(prefix)
        except SQLAlchemyError as e:
            logger.error("Error listing storage keys with prefix %r: %s", prefix, e)
            return []

    def _read_collection(self, key: str, from_record: Callable[[Any], T]) -> list[T]:
        records = self.read(key, [])
        if not isinstance(records, list):
            logger.error("Storage key %r does not hold a list; ignoring it", key)
            return []
        items = []
        for record in records:
            try:
                items.append(from_record(record))
            except ValidationError as e:
                logger.warning("Skipping unreadable record under %r: %s", key, e)
        return items

    def load_working_set(self) -> WorkingSet:
        """Load every record collection and the biller profile."""
        working_set = WorkingSet()
        for attribute, key, from_record, _ in _COLLECTIONS:
            setattr(working_set, attribute, self._read_collection(key, from_record))

        profile_record = self.read(StorageKeys.BILLER_INFO, None)
        if profile_record is not None:
            try:
                working_set.biller_profile = biller_profile_from_record(profile_record)
            except ValidationError as e:
                logger.warning("Ignoring unreadable biller profile: %s", e)
                working_set.biller_profile = BillerProfile()
        return working_set

    def save_working_set(self, working_set: WorkingSet) -> bool:
        """Persist every collection. Returns True only if all writes succeed."""
        ok = True
        for attribute, key, _, to_record in _COLLECTIONS:
            records = [to_record(item) for item in getattr(working_set, attribute)]
            ok = self.write(key, records) and ok
        ok = self.write(StorageKeys.BILLER_INFO, biller_profile_to_record(working_set.biller_profile)) and ok
        return ok

    def has_records(self) -> bool:
        """True if the tier holds any clients, projects or time entries."""
        return any(
            self.read(key, [])
            for key in (StorageKeys.CLIENTS, StorageKeys.PROJECTS, StorageKeys.TIME_ENTRIES)
        )
