"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as re-billing an already invoiced entry."""


class InvalidSnapshotError(ValidationError):
    """A candidate snapshot failed structural validation."""


class StoreIOError(DomainError):
    """A persistence tier could not be read from or written to."""


def invoice_not_found(invoice_id: str) -> str:
    """Return message for missing invoice."""
    return f"Invoice {invoice_id} not found"


def payment_not_found(payment_id: str) -> str:
    """Return message for missing payment."""
    return f"Payment {payment_id} not found"


def client_not_found(client_id: str) -> str:
    """Return message for missing client."""
    return f"Client {client_id} not found"


def project_not_found(project_id: str) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def time_entry_not_found(entry_id: str) -> str:
    """Return message for missing time entry."""
    return f"Time entry {entry_id} not found"


def time_entry_already_invoiced(entry_id: str, invoice_id: str) -> str:
    """Return message when a time entry is already billed."""
    return f"Time entry {entry_id} is already billed on invoice {invoice_id}"


def negative_amount(field_name: str, amount: object) -> str:
    """Return message for a negative monetary amount."""
    return f"{field_name} must not be negative (got {amount})"
