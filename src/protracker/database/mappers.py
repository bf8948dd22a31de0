"""Mapper functions to convert between domain entities and stored records.

Stored records are the JSON-compatible dicts written to the persistence tiers
and to export documents. They use the camelCase field names of the wire
format (``clientId``, ``timeEntryIds``, ``billerInfo`` ...). Conversions from
records raise ``ValidationError`` when a record cannot be represented.
"""

from typing import Any, Callable, Optional, TypeVar

from protracker.domain.entities import (
    BackupMetadata,
    BillerProfile,
    Client,
    ExchangeRate,
    Invoice,
    InvoiceReminder,
    InvoiceStatus,
    Payment,
    PaymentStatus,
    Project,
    ProjectStatus,
    RecurringInvoiceTemplate,
    Snapshot,
    TimeEntry,
)
from protracker.domain.errors import ValidationError
from protracker.utils.amount_parser import decimal_to_json, to_decimal
from protracker.utils.date_parser import format_date, parse_optional_date

T = TypeVar("T")

Record = dict[str, Any]


def _as_record(record: Any, kind: str, require_id: bool = True) -> Record:
    if not isinstance(record, dict):
        raise ValidationError(f"Invalid {kind} record: expected an object")
    if require_id:
        record_id = record.get("id")
        if isinstance(record_id, bool) or not isinstance(record_id, (str, int)) or record_id == "":
            raise ValidationError(f"Invalid {kind} record: missing id")
    return record


def _id(record: Record) -> str:
    return str(record["id"])


def _text(record: Record, key: str, default: str = "") -> str:
    value = record.get(key)
    return default if value is None else str(value)


def _optional_text(record: Record, key: str) -> Optional[str]:
    value = record.get(key)
    return None if value is None or value == "" else str(value)


def _amount(record: Record, key: str, kind: str):
    try:
        return to_decimal(record.get(key))
    except ValueError as e:
        raise ValidationError(f"Invalid {kind} record {record.get('id')}: {key}: {e}")


def _date(record: Record, key: str, kind: str):
    try:
        return parse_optional_date(record.get(key))
    except ValueError as e:
        raise ValidationError(f"Invalid {kind} record {record.get('id')}: {key}: {e}")


def _enum(enum_type: Callable[[Any], T], record: Record, key: str, default: T, kind: str) -> T:
    value = record.get(key)
    if value is None or value == "":
        return default
    try:
        return enum_type(value)
    except ValueError:
        raise ValidationError(f"Invalid {kind} record {record.get('id')}: unknown {key} '{value}'")


def client_to_record(client: Client) -> Record:
    """Convert domain Client to a stored record."""
    return {
        "id": client.id,
        "name": client.name,
        "contactName": client.contact_name,
        "contactEmail": client.contact_email,
        "billingAddress": client.billing_address,
    }


def client_from_record(record: Any) -> Client:
    """Convert a stored record to domain Client."""
    record = _as_record(record, "client")
    return Client(
        id=_id(record),
        name=_text(record, "name"),
        contact_name=_text(record, "contactName"),
        contact_email=_text(record, "contactEmail"),
        billing_address=_text(record, "billingAddress"),
    )


def project_to_record(project: Project) -> Record:
    """Convert domain Project to a stored record."""
    return {
        "id": project.id,
        "clientId": project.client_id,
        "name": project.name,
        "description": project.description,
        "hourlyRate": decimal_to_json(project.hourly_rate),
        "currency": project.currency,
        "status": project.status.value,
    }


def project_from_record(record: Any) -> Project:
    """Convert a stored record to domain Project."""
    record = _as_record(record, "project")
    return Project(
        id=_id(record),
        client_id=_text(record, "clientId"),
        name=_text(record, "name"),
        description=_text(record, "description"),
        hourly_rate=_amount(record, "hourlyRate", "project"),
        currency=_text(record, "currency", "USD"),
        status=_enum(ProjectStatus, record, "status", ProjectStatus.ACTIVE, "project"),
    )


def time_entry_to_record(entry: TimeEntry) -> Record:
    """Convert domain TimeEntry to a stored record."""
    record: Record = {
        "id": entry.id,
        "projectId": entry.project_id,
        "date": format_date(entry.date),
        "description": entry.description,
        "hours": decimal_to_json(entry.hours),
        "isBillable": entry.is_billable,
        "invoiceId": entry.invoice_id,
    }
    if entry.start_time is not None:
        record["startTime"] = entry.start_time
    if entry.stop_time is not None:
        record["stopTime"] = entry.stop_time
    return record


def time_entry_from_record(record: Any) -> TimeEntry:
    """Convert a stored record to domain TimeEntry."""
    record = _as_record(record, "time entry")
    entry_date = _date(record, "date", "time entry")
    if entry_date is None:
        raise ValidationError(f"Invalid time entry record {record.get('id')}: missing date")
    return TimeEntry(
        id=_id(record),
        project_id=_text(record, "projectId"),
        date=entry_date,
        hours=_amount(record, "hours", "time entry"),
        is_billable=bool(record.get("isBillable", True)),
        invoice_id=_optional_text(record, "invoiceId"),
        description=_text(record, "description"),
        start_time=_optional_text(record, "startTime"),
        stop_time=_optional_text(record, "stopTime"),
    )


def invoice_to_record(invoice: Invoice) -> Record:
    """Convert domain Invoice to a stored record."""
    return {
        "id": invoice.id,
        "clientId": invoice.client_id,
        "invoiceNumber": invoice.invoice_number,
        "issueDate": format_date(invoice.issue_date),
        "dueDate": format_date(invoice.due_date),
        "status": invoice.status.value,
        "timeEntryIds": list(invoice.time_entry_ids),
        "totalAmount": decimal_to_json(invoice.total_amount),
        "currency": invoice.currency,
        "paidAmount": decimal_to_json(invoice.paid_amount),
        "tdsReceived": decimal_to_json(invoice.tds_received),
        "paymentStatus": invoice.payment_status.value,
    }


def invoice_from_record(record: Any) -> Invoice:
    """Convert a stored record to domain Invoice."""
    record = _as_record(record, "invoice")
    entry_ids = record.get("timeEntryIds") or []
    if not isinstance(entry_ids, list):
        raise ValidationError(f"Invalid invoice record {record.get('id')}: timeEntryIds must be a list")
    return Invoice(
        id=_id(record),
        client_id=_text(record, "clientId"),
        invoice_number=_text(record, "invoiceNumber"),
        total_amount=_amount(record, "totalAmount", "invoice"),
        currency=_text(record, "currency", "USD"),
        status=_enum(InvoiceStatus, record, "status", InvoiceStatus.DRAFT, "invoice"),
        time_entry_ids=tuple(str(entry_id) for entry_id in entry_ids),
        issue_date=_date(record, "issueDate", "invoice"),
        due_date=_date(record, "dueDate", "invoice"),
        paid_amount=_amount(record, "paidAmount", "invoice"),
        tds_received=_amount(record, "tdsReceived", "invoice"),
        payment_status=_enum(PaymentStatus, record, "paymentStatus", PaymentStatus.UNPAID, "invoice"),
    )


def payment_to_record(payment: Payment) -> Record:
    """Convert domain Payment to a stored record."""
    return {
        "id": payment.id,
        "invoiceId": payment.invoice_id,
        "amount": decimal_to_json(payment.amount),
        "tdsAmount": None if payment.tds_amount is None else decimal_to_json(payment.tds_amount),
        "date": format_date(payment.date),
        "method": payment.method,
        "notes": payment.notes,
    }


def payment_from_record(record: Any) -> Payment:
    """Convert a stored record to domain Payment."""
    record = _as_record(record, "payment")
    tds_amount = None
    if record.get("tdsAmount") is not None:
        tds_amount = _amount(record, "tdsAmount", "payment")
    return Payment(
        id=_id(record),
        invoice_id=_text(record, "invoiceId"),
        amount=_amount(record, "amount", "payment"),
        date=_date(record, "date", "payment"),
        tds_amount=tds_amount,
        method=_text(record, "method"),
        notes=_text(record, "notes"),
    )


def recurring_template_to_record(template: RecurringInvoiceTemplate) -> Record:
    """Convert domain RecurringInvoiceTemplate to a stored record."""
    return {
        "id": template.id,
        "clientId": template.client_id,
        "name": template.name,
        "frequency": template.frequency,
        "amount": decimal_to_json(template.amount),
        "currency": template.currency,
        "nextIssueDate": format_date(template.next_issue_date),
        "isActive": template.is_active,
    }


def recurring_template_from_record(record: Any) -> RecurringInvoiceTemplate:
    """Convert a stored record to domain RecurringInvoiceTemplate."""
    record = _as_record(record, "recurring template")
    return RecurringInvoiceTemplate(
        id=_id(record),
        client_id=_text(record, "clientId"),
        name=_text(record, "name"),
        frequency=_text(record, "frequency", "monthly"),
        amount=_amount(record, "amount", "recurring template"),
        currency=_text(record, "currency", "USD"),
        next_issue_date=_date(record, "nextIssueDate", "recurring template"),
        is_active=bool(record.get("isActive", True)),
    )


def invoice_reminder_to_record(reminder: InvoiceReminder) -> Record:
    """Convert domain InvoiceReminder to a stored record."""
    return {
        "id": reminder.id,
        "invoiceId": reminder.invoice_id,
        "reminderDate": format_date(reminder.reminder_date),
        "message": reminder.message,
        "sent": reminder.sent,
    }


def invoice_reminder_from_record(record: Any) -> InvoiceReminder:
    """Convert a stored record to domain InvoiceReminder."""
    record = _as_record(record, "invoice reminder")
    return InvoiceReminder(
        id=_id(record),
        invoice_id=_text(record, "invoiceId"),
        reminder_date=_date(record, "reminderDate", "invoice reminder"),
        message=_text(record, "message"),
        sent=bool(record.get("sent", False)),
    )


def exchange_rate_to_record(rate: ExchangeRate) -> Record:
    """Convert domain ExchangeRate to a stored record."""
    return {
        "id": rate.id,
        "fromCurrency": rate.from_currency,
        "toCurrency": rate.to_currency,
        "rate": decimal_to_json(rate.rate),
        "updatedOn": format_date(rate.updated_on),
    }


def exchange_rate_from_record(record: Any) -> ExchangeRate:
    """Convert a stored record to domain ExchangeRate.

    Rates stored without an id are keyed by their currency pair.
    """
    record = _as_record(record, "exchange rate", require_id=False)
    from_currency = _text(record, "fromCurrency")
    to_currency = _text(record, "toCurrency")
    rate_id = record.get("id") or f"{from_currency}-{to_currency}"
    return ExchangeRate(
        id=str(rate_id),
        from_currency=from_currency,
        to_currency=to_currency,
        rate=_amount(record, "rate", "exchange rate"),
        updated_on=_date(record, "updatedOn", "exchange rate"),
    )


def biller_profile_to_record(profile: BillerProfile) -> Record:
    """Convert domain BillerProfile to a stored record."""
    return {
        "name": profile.name,
        "address": profile.address,
        "email": profile.email,
        "phone": profile.phone,
        "website": profile.website,
    }


def biller_profile_from_record(record: Any) -> BillerProfile:
    """Convert a stored record to domain BillerProfile."""
    record = _as_record(record, "biller profile", require_id=False)
    return BillerProfile(
        name=_text(record, "name"),
        address=_text(record, "address"),
        email=_text(record, "email"),
        phone=_text(record, "phone"),
        website=_text(record, "website"),
    )


def snapshot_to_record(snapshot: Snapshot) -> Record:
    """Convert domain Snapshot to a stored record."""
    return {
        "clients": [client_to_record(c) for c in snapshot.clients],
        "projects": [project_to_record(p) for p in snapshot.projects],
        "timeEntries": [time_entry_to_record(t) for t in snapshot.time_entries],
        "invoices": [invoice_to_record(i) for i in snapshot.invoices],
        "billerInfo": biller_profile_to_record(snapshot.biller_profile),
        "payments": [payment_to_record(p) for p in snapshot.payments],
        "recurringTemplates": [recurring_template_to_record(t) for t in snapshot.recurring_templates],
        "invoiceReminders": [invoice_reminder_to_record(r) for r in snapshot.invoice_reminders],
        "exchangeRates": [exchange_rate_to_record(r) for r in snapshot.exchange_rates],
        "version": snapshot.version,
        "lastModified": snapshot.last_modified,
    }


def snapshot_from_record(record: Record) -> Snapshot:
    """Convert a shape-validated stored record to domain Snapshot.

    Optional collections absent from the record become empty.
    """
    return Snapshot(
        clients=tuple(client_from_record(c) for c in record["clients"]),
        projects=tuple(project_from_record(p) for p in record["projects"]),
        time_entries=tuple(time_entry_from_record(t) for t in record["timeEntries"]),
        invoices=tuple(invoice_from_record(i) for i in record["invoices"]),
        biller_profile=biller_profile_from_record(record["billerInfo"]),
        version=record["version"],
        last_modified=int(record["lastModified"]),
        payments=tuple(payment_from_record(p) for p in record.get("payments") or []),
        recurring_templates=tuple(
            recurring_template_from_record(t) for t in record.get("recurringTemplates") or []
        ),
        invoice_reminders=tuple(
            invoice_reminder_from_record(r) for r in record.get("invoiceReminders") or []
        ),
        exchange_rates=tuple(exchange_rate_from_record(r) for r in record.get("exchangeRates") or []),
    )


def backup_metadata_to_record(metadata: BackupMetadata) -> Record:
    """Convert domain BackupMetadata to a stored record."""
    return {
        "timestamp": metadata.timestamp,
        "version": metadata.version,
        "checksum": metadata.checksum,
    }


def backup_metadata_from_record(record: Any) -> BackupMetadata:
    """Convert a stored record to domain BackupMetadata."""
    record = _as_record(record, "backup metadata", require_id=False)
    return BackupMetadata(
        timestamp=int(record.get("timestamp") or 0),
        version=_text(record, "version"),
        checksum=_text(record, "checksum"),
    )
