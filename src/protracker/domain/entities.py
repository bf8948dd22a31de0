"""Domain model entities for protracker.

These are pure data classes representing business records, independent of
how they are persisted. Records are immutable; a change produces a new record
via ``dataclasses.replace``. ``Snapshot`` is the durable aggregate written to
the replica tier and to export documents; ``WorkingSet`` is the mutable
in-memory collection set the application edits.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    ACTIVE = "Active"
    ARCHIVED = "Archived"


class InvoiceStatus(str, Enum):
    """Invoice workflow status."""

    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"


class PaymentStatus(str, Enum):
    """Settlement status derived from the payment ledger."""

    UNPAID = "Unpaid"
    PARTIALLY_PAID = "PartiallyPaid"
    PAID = "Paid"
    OVERDUE = "Overdue"


@dataclass(frozen=True)
class Client:
    """Client domain entity."""

    id: str
    name: str
    contact_name: str = ""
    contact_email: str = ""
    billing_address: str = ""


@dataclass(frozen=True)
class Project:
    """Project domain entity, owned by a client."""

    id: str
    client_id: str
    name: str
    hourly_rate: Decimal = ZERO
    currency: str = "USD"
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: str = ""


@dataclass(frozen=True)
class TimeEntry:
    """Time entry domain entity.

    ``invoice_id`` is set exactly once, when the entry is billed.
    """

    id: str
    project_id: str
    date: date
    hours: Decimal = ZERO
    is_billable: bool = True
    invoice_id: Optional[str] = None
    description: str = ""
    start_time: Optional[str] = None
    stop_time: Optional[str] = None


@dataclass(frozen=True)
class Invoice:
    """Invoice domain entity.

    ``paid_amount``, ``tds_received`` and ``payment_status`` are derived from
    the payment ledger and are only written by the payment reconciler.
    """

    id: str
    client_id: str
    invoice_number: str
    total_amount: Decimal = ZERO
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.DRAFT
    time_entry_ids: tuple[str, ...] = ()
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    paid_amount: Decimal = ZERO
    tds_received: Decimal = ZERO
    payment_status: PaymentStatus = PaymentStatus.UNPAID


@dataclass(frozen=True)
class Payment:
    """Payment ledger entry. Immutable once recorded; may only be deleted."""

    id: str
    invoice_id: str
    amount: Decimal
    date: Optional[date] = None
    tds_amount: Optional[Decimal] = None
    method: str = ""
    notes: str = ""


@dataclass(frozen=True)
class RecurringInvoiceTemplate:
    """Template for invoices issued on a schedule."""

    id: str
    client_id: str
    name: str
    frequency: str = "monthly"
    amount: Decimal = ZERO
    currency: str = "USD"
    next_issue_date: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class InvoiceReminder:
    """Reminder scheduled against an invoice."""

    id: str
    invoice_id: str
    reminder_date: Optional[date] = None
    message: str = ""
    sent: bool = False


@dataclass(frozen=True)
class ExchangeRate:
    """Conversion rate between two currencies."""

    id: str
    from_currency: str
    to_currency: str
    rate: Decimal
    updated_on: Optional[date] = None


@dataclass(frozen=True)
class BillerProfile:
    """The business issuing invoices."""

    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time aggregate of every record collection.

    ``last_modified`` is the wall-clock time (ms since epoch) at which the
    snapshot was assembled, never the time of an individual record edit.
    """

    clients: tuple[Client, ...]
    projects: tuple[Project, ...]
    time_entries: tuple[TimeEntry, ...]
    invoices: tuple[Invoice, ...]
    biller_profile: BillerProfile
    version: str
    last_modified: int
    payments: tuple[Payment, ...] = ()
    recurring_templates: tuple[RecurringInvoiceTemplate, ...] = ()
    invoice_reminders: tuple[InvoiceReminder, ...] = ()
    exchange_rates: tuple[ExchangeRate, ...] = ()


@dataclass(frozen=True)
class BackupMetadata:
    """Audit record written alongside each replica."""

    timestamp: int
    version: str
    checksum: str


@dataclass
class WorkingSet:
    """Mutable in-memory record collections edited by the application."""

    clients: list[Client] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    time_entries: list[TimeEntry] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    recurring_templates: list[RecurringInvoiceTemplate] = field(default_factory=list)
    invoice_reminders: list[InvoiceReminder] = field(default_factory=list)
    exchange_rates: list[ExchangeRate] = field(default_factory=list)
    biller_profile: BillerProfile = field(default_factory=BillerProfile)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "WorkingSet":
        """Create a working set holding a copy of a snapshot's collections."""
        return cls(
            clients=list(snapshot.clients),
            projects=list(snapshot.projects),
            time_entries=list(snapshot.time_entries),
            invoices=list(snapshot.invoices),
            payments=list(snapshot.payments),
            recurring_templates=list(snapshot.recurring_templates),
            invoice_reminders=list(snapshot.invoice_reminders),
            exchange_rates=list(snapshot.exchange_rates),
            biller_profile=snapshot.biller_profile,
        )
