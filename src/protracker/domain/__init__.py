"""Domain layer for protracker application."""

import importlib

# Import services lazily to avoid circular dependencies with database.mappers
_EXPORTS = {
    "RecordService": "protracker.domain.records",
    "PaymentService": "protracker.domain.payments",
    "reconcile_invoice": "protracker.domain.payments",
    "reconcile_all": "protracker.domain.payments",
    "SnapshotCodec": "protracker.domain.snapshot_codec",
    "ImportResult": "protracker.domain.snapshot_codec",
    "MergeMode": "protracker.domain.merge",
    "apply_snapshot": "protracker.domain.merge",
    "SyncCoordinator": "protracker.domain.sync",
    "SyncOutcome": "protracker.domain.sync",
    "SyncState": "protracker.domain.sync",
    "WorkspaceService": "protracker.domain.workspace",
}

__all__ = list(_EXPORTS)


def __getattr__(name):
    if name in _EXPORTS:
        return getattr(importlib.import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
