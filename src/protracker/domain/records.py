"""Record creation for clients, projects, time entries and invoices."""

import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from protracker.domain import errors
from protracker.domain.entities import (
    ZERO,
    Client,
    Invoice,
    InvoiceStatus,
    PaymentStatus,
    Project,
    ProjectStatus,
    TimeEntry,
    WorkingSet,
)
from protracker.domain.errors import ConflictError, NotFoundError, ValidationError

INVOICE_NUMBER_PREFIX = "INV-"


def generate_id() -> str:
    """Return a new unique record id."""
    return uuid.uuid4().hex


def next_invoice_number(invoices: Iterable[Invoice]) -> str:
    """Next number in the collection-wide sequence (``INV-0001``, ...)."""
    return f"{INVOICE_NUMBER_PREFIX}{len(list(invoices)) + 1:04d}"


class RecordService:
    """Service for adding records to a working set."""

    def add_client(
        self,
        working_set: WorkingSet,
        name: str,
        contact_name: str = "",
        contact_email: str = "",
        billing_address: str = "",
    ) -> Client:
        """Add a client.

        Raises:
            ValidationError: If name is empty
        """
        if not name.strip():
            raise ValidationError("Client name must not be empty")
        client = Client(
            id=generate_id(),
            name=name,
            contact_name=contact_name,
            contact_email=contact_email,
            billing_address=billing_address,
        )
        working_set.clients.append(client)
        return client

    def add_project(
        self,
        working_set: WorkingSet,
        client_id: str,
        name: str,
        hourly_rate: Decimal = ZERO,
        currency: str = "USD",
        description: str = "",
    ) -> Project:
        """Add a project for an existing client.

        Raises:
            NotFoundError: If the client doesn't exist
            ValidationError: If the hourly rate is negative
        """
        if not any(c.id == client_id for c in working_set.clients):
            raise NotFoundError(errors.client_not_found(client_id))
        if hourly_rate < ZERO:
            raise ValidationError(errors.negative_amount("Hourly rate", hourly_rate))
        project = Project(
            id=generate_id(),
            client_id=client_id,
            name=name,
            hourly_rate=hourly_rate,
            currency=currency.upper(),
            status=ProjectStatus.ACTIVE,
            description=description,
        )
        working_set.projects.append(project)
        return project

    def add_time_entry(
        self,
        working_set: WorkingSet,
        project_id: str,
        entry_date: date,
        hours: Decimal,
        description: str = "",
        is_billable: bool = True,
    ) -> TimeEntry:
        """Add a time entry, keeping entries ordered most recent first.

        Raises:
            NotFoundError: If the project doesn't exist
            ValidationError: If hours is negative
        """
        if not any(p.id == project_id for p in working_set.projects):
            raise NotFoundError(errors.project_not_found(project_id))
        if hours < ZERO:
            raise ValidationError(errors.negative_amount("Hours", hours))
        entry = TimeEntry(
            id=generate_id(),
            project_id=project_id,
            date=entry_date,
            hours=hours,
            is_billable=is_billable,
            description=description,
        )
        working_set.time_entries.append(entry)
        working_set.time_entries.sort(key=lambda e: e.date, reverse=True)
        return entry

    def create_invoice(
        self,
        working_set: WorkingSet,
        client_id: str,
        time_entry_ids: list[str],
        issue_date: Optional[date] = None,
        due_date: Optional[date] = None,
        total_amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> Invoice:
        """Create an invoice billing the given time entries.

        The billed entries are marked with the new invoice's id. Repeated ids
        are billed once. When no total is given it is the sum of hours times
        project hourly rate. Payment fields start at zero and Unpaid.

        Raises:
            NotFoundError: If the client or a time entry doesn't exist
            ConflictError: If a time entry is already billed
            ValidationError: If the total is negative
        """
        time_entry_ids = list(dict.fromkeys(time_entry_ids))
        if not any(c.id == client_id for c in working_set.clients):
            raise NotFoundError(errors.client_not_found(client_id))

        entries_by_id = {e.id: e for e in working_set.time_entries}
        projects_by_id = {p.id: p for p in working_set.projects}
        billed = []
        for entry_id in time_entry_ids:
            entry = entries_by_id.get(entry_id)
            if entry is None:
                raise NotFoundError(errors.time_entry_not_found(entry_id))
            if entry.invoice_id is not None:
                raise ConflictError(errors.time_entry_already_invoiced(entry_id, entry.invoice_id))
            billed.append(entry)

        if total_amount is None:
            total_amount = sum(
                (
                    e.hours * projects_by_id[e.project_id].hourly_rate
                    for e in billed
                    if e.project_id in projects_by_id
                ),
                ZERO,
            )
        if total_amount < ZERO:
            raise ValidationError(errors.negative_amount("Invoice total", total_amount))

        if currency is None:
            currency = next(
                (projects_by_id[e.project_id].currency for e in billed if e.project_id in projects_by_id),
                "USD",
            )

        invoice = Invoice(
            id=generate_id(),
            client_id=client_id,
            invoice_number=next_invoice_number(working_set.invoices),
            total_amount=total_amount,
            currency=currency,
            status=InvoiceStatus.DRAFT,
            time_entry_ids=tuple(time_entry_ids),
            issue_date=issue_date,
            due_date=due_date,
            paid_amount=ZERO,
            tds_received=ZERO,
            payment_status=PaymentStatus.UNPAID,
        )
        working_set.invoices.append(invoice)

        billed_ids = set(time_entry_ids)
        working_set.time_entries = [
            replace(entry, invoice_id=invoice.id) if entry.id in billed_ids else entry
            for entry in working_set.time_entries
        ]
        return invoice
