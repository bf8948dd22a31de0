"""Workspace service tying the working set to its stores."""

import logging
from typing import Optional

from protracker.database.base import Database
from protracker.domain.auto_backup import DEFAULT_BACKUP_INTERVAL, AutoBackupHandle, start_auto_backup
from protracker.domain.entities import Snapshot, WorkingSet
from protracker.domain.entity_store import EntityStore
from protracker.domain.merge import MergeMode, apply_snapshot
from protracker.domain.payments import PaymentService
from protracker.domain.replica_store import DEFAULT_KEEP_REPLICAS, ReplicaStore
from protracker.domain.snapshot import Clock, current_millis, snapshot_working_set
from protracker.domain.snapshot_codec import ImportResult, SnapshotCodec
from protracker.domain.sync import SyncCoordinator, SyncOutcome

logger = logging.getLogger(__name__)


class WorkspaceService:
    """Loads, saves, syncs, exports and imports the working set."""

    def __init__(
        self,
        db: Database,
        replica_db: Database,
        clock: Clock = current_millis,
        keep_replicas: int = DEFAULT_KEEP_REPLICAS,
    ):
        """Initialize workspace service.

        Args:
            db: Primary-tier database
            replica_db: Replica-tier database
            clock: Millisecond wall clock
            keep_replicas: Replicas retained after each backup (0 keeps all)
        """
        self.clock = clock
        self.store = EntityStore(db)
        self.replicas = ReplicaStore(replica_db, keep=keep_replicas)
        self.coordinator = SyncCoordinator(self.store, self.replicas, clock)
        self.codec = SnapshotCodec(clock)
        self.payments = PaymentService(self.store)

    def load(self) -> WorkingSet:
        """Load the working set from the primary tier."""
        return self.store.load_working_set()

    def save(self, working_set: WorkingSet) -> bool:
        """Persist the working set to the primary tier."""
        return self.store.save_working_set(working_set)

    def snapshot(self, working_set: Optional[WorkingSet] = None) -> Snapshot:
        """Build a snapshot of the given (or stored) working set."""
        if working_set is None:
            working_set = self.load()
        return snapshot_working_set(working_set, self.clock)

    def startup(self) -> SyncOutcome:
        """Run the one-time payment migration, then sync once."""
        working_set = self.load()
        if self.payments.run_startup_migration(working_set):
            self.save(working_set)
        return self.sync(working_set)

    def sync(self, working_set: Optional[WorkingSet] = None) -> SyncOutcome:
        """Sync against the replica tier, adopting the replica if it won."""
        outcome = self.coordinator.sync(self.snapshot(working_set))
        if outcome.replica_won and not self.save(WorkingSet.from_snapshot(outcome.snapshot)):
            logger.error("Replica data could not be written to primary storage")
        return outcome

    def backup(self) -> bool:
        """Write a replica of the stored working set now."""
        return self.coordinator.backup(self.snapshot())

    def recover(self) -> Optional[Snapshot]:
        """Restore the working set from the best available source."""
        snapshot = self.coordinator.recover()
        if snapshot is not None and not self.save(WorkingSet.from_snapshot(snapshot)):
            logger.error("Recovered data could not be written to primary storage")
        return snapshot

    def export_data(self) -> str:
        """Export the stored working set as a checksummed document."""
        return self.codec.export_snapshot(self.snapshot())

    def import_data(self, document: str, mode: MergeMode | str = MergeMode.MERGE) -> ImportResult:
        """Import a document into the stored working set. Never raises."""
        result = self.codec.import_document(document, mode)
        if not result.success or result.data is None:
            return result

        working_set = apply_snapshot(self.load(), result.data, result.mode)
        self.payments.reconcile_working_set(working_set)
        if not self.save(working_set):
            result.success = False
            result.data = None
            result.errors.append("Imported data could not be saved")
        return result

    def start_auto_backup(self, interval: float = DEFAULT_BACKUP_INTERVAL) -> AutoBackupHandle:
        """Start periodic backups; the caller owns the returned handle."""
        return start_auto_backup(self.load, self.coordinator, interval)
