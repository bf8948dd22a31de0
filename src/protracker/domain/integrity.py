"""Structural and referential checks for snapshots.

Shape validation is strict and gates import and sync. Reference checks only
produce warnings: records are never dropped or repaired.
"""

import math
from decimal import Decimal
from typing import Any

from protracker.database.mappers import snapshot_to_record
from protracker.domain.entities import Snapshot

REQUIRED_COLLECTIONS = ("clients", "projects", "timeEntries", "invoices")
OPTIONAL_COLLECTIONS = ("payments", "recurringTemplates", "invoiceReminders", "exchangeRates")


def validate_shape(candidate: Any) -> bool:
    """Return True if candidate has the structure of a snapshot.

    Accepts a ``Snapshot`` or its stored-record form. Required collections
    must be lists, optional collections must be lists when present, the
    biller profile must be an object, ``version`` a string and
    ``lastModified`` a finite number.
    """
    if isinstance(candidate, Snapshot):
        try:
            candidate = snapshot_to_record(candidate)
        except (AttributeError, TypeError, ValueError):
            return False

    if not isinstance(candidate, dict):
        return False
    for name in REQUIRED_COLLECTIONS:
        if not isinstance(candidate.get(name), list):
            return False
    for name in OPTIONAL_COLLECTIONS:
        if name in candidate and not isinstance(candidate[name], list):
            return False
    if not isinstance(candidate.get("billerInfo"), dict):
        return False
    if not isinstance(candidate.get("version"), str):
        return False
    return is_finite_number(candidate.get("lastModified"))


def is_finite_number(value: Any) -> bool:
    """True for a finite int, float or Decimal (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return False


def validate_references(snapshot: Snapshot) -> list[str]:
    """Return one warning per record that references a missing parent."""
    warnings = []
    client_ids = {c.id for c in snapshot.clients}
    project_ids = {p.id for p in snapshot.projects}

    for project in snapshot.projects:
        if project.client_id not in client_ids:
            warnings.append(f'Project "{project.name}" references non-existent client {project.client_id}')

    for entry in snapshot.time_entries:
        if entry.project_id not in project_ids:
            warnings.append(f"Time entry {entry.id} references non-existent project {entry.project_id}")

    for invoice in snapshot.invoices:
        if invoice.client_id not in client_ids:
            warnings.append(
                f"Invoice {invoice.invoice_number} references non-existent client {invoice.client_id}"
            )

    return warnings
