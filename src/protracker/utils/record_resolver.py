"""Utility for resolving record references (id, name or number) to records."""

from protracker.domain import errors
from protracker.domain.entities import Client, Invoice, Project, WorkingSet
from protracker.domain.errors import NotFoundError


def resolve_client(working_set: WorkingSet, reference: str) -> Client:
    """Resolve a client id or name to a client.

    Raises:
        NotFoundError: If no client matches
    """
    for client in working_set.clients:
        if client.id == reference:
            return client
    for client in working_set.clients:
        if client.name == reference:
            return client
    raise NotFoundError(errors.client_not_found(reference))


def resolve_project(working_set: WorkingSet, reference: str) -> Project:
    """Resolve a project id or name to a project.

    Raises:
        NotFoundError: If no project matches
    """
    for project in working_set.projects:
        if project.id == reference:
            return project
    for project in working_set.projects:
        if project.name == reference:
            return project
    raise NotFoundError(errors.project_not_found(reference))


def resolve_invoice(working_set: WorkingSet, reference: str) -> Invoice:
    """Resolve an invoice id or invoice number (e.g. ``INV-0001``) to an invoice.

    Raises:
        NotFoundError: If no invoice matches
    """
    for invoice in working_set.invoices:
        if invoice.id == reference or invoice.invoice_number == reference:
            return invoice
    raise NotFoundError(errors.invoice_not_found(reference))
