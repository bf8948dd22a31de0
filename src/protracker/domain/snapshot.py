"""Snapshot assembly."""

import time
from typing import Callable, Iterable, Optional

from protracker.domain.entities import (
    BillerProfile,
    Client,
    ExchangeRate,
    Invoice,
    InvoiceReminder,
    Payment,
    Project,
    RecurringInvoiceTemplate,
    Snapshot,
    TimeEntry,
    WorkingSet,
)

SCHEMA_VERSION = "1.0.0"

Clock = Callable[[], int]


def current_millis() -> int:
    """Wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def build_snapshot(
    clients: Iterable[Client],
    projects: Iterable[Project],
    time_entries: Iterable[TimeEntry],
    invoices: Iterable[Invoice],
    biller_profile: Optional[BillerProfile],
    payments: Optional[Iterable[Payment]] = None,
    recurring_templates: Optional[Iterable[RecurringInvoiceTemplate]] = None,
    invoice_reminders: Optional[Iterable[InvoiceReminder]] = None,
    exchange_rates: Optional[Iterable[ExchangeRate]] = None,
    clock: Clock = current_millis,
) -> Snapshot:
    """Assemble the full record set into a new versioned snapshot.

    Missing optional collections become empty and a missing biller profile
    becomes a blank one. ``last_modified`` is stamped from ``clock`` at call
    time.
    """
    return Snapshot(
        clients=tuple(clients),
        projects=tuple(projects),
        time_entries=tuple(time_entries),
        invoices=tuple(invoices),
        biller_profile=biller_profile if biller_profile is not None else BillerProfile(),
        version=SCHEMA_VERSION,
        last_modified=clock(),
        payments=tuple(payments or ()),
        recurring_templates=tuple(recurring_templates or ()),
        invoice_reminders=tuple(invoice_reminders or ()),
        exchange_rates=tuple(exchange_rates or ()),
    )


def snapshot_working_set(working_set: WorkingSet, clock: Clock = current_millis) -> Snapshot:
    """Build a snapshot of a working set."""
    return build_snapshot(
        clients=working_set.clients,
        projects=working_set.projects,
        time_entries=working_set.time_entries,
        invoices=working_set.invoices,
        biller_profile=working_set.biller_profile,
        payments=working_set.payments,
        recurring_templates=working_set.recurring_templates,
        invoice_reminders=working_set.invoice_reminders,
        exchange_rates=working_set.exchange_rates,
        clock=clock,
    )
