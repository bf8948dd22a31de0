"""Applying an imported snapshot to the working set."""

from enum import Enum
from typing import Sequence, TypeVar

from protracker.domain.entities import Snapshot, WorkingSet

T = TypeVar("T")

# Collections shared by Snapshot and WorkingSet, by attribute name
MERGED_COLLECTIONS = (
    "clients",
    "projects",
    "time_entries",
    "invoices",
    "payments",
    "recurring_templates",
    "invoice_reminders",
    "exchange_rates",
)


class MergeMode(str, Enum):
    """How imported records combine with the working set."""

    REPLACE = "replace"
    MERGE = "merge"


def union_by_id(existing: Sequence[T], imported: Sequence[T]) -> list[T]:
    """Append imported records whose id is not already present.

    On an id collision the existing record wins.
    """
    existing_ids = {item.id for item in existing}
    return list(existing) + [item for item in imported if item.id not in existing_ids]


def apply_snapshot(working_set: WorkingSet, snapshot: Snapshot, mode: MergeMode | str) -> WorkingSet:
    """Combine an imported snapshot with the working set.

    ``replace`` substitutes every collection and the biller profile.
    ``merge`` keeps the current biller profile and takes the id-deduplicated
    union of each collection, so applying the same snapshot twice changes
    nothing. Time entries are ordered most recent first after a merge.

    Returns:
        A new working set; the input is not modified
    """
    mode = MergeMode(mode)
    if mode is MergeMode.REPLACE:
        return WorkingSet.from_snapshot(snapshot)

    merged = WorkingSet(biller_profile=working_set.biller_profile)
    for name in MERGED_COLLECTIONS:
        setattr(merged, name, union_by_id(getattr(working_set, name), getattr(snapshot, name)))
    merged.time_entries.sort(key=lambda entry: entry.date, reverse=True)
    return merged
