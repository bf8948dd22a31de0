"""Replica synchronisation with last-write-wins conflict resolution.

A sync run compares the current snapshot with the most recent replica:

- no replica: the current snapshot becomes the first replica
- replica newer than current: the replica is authoritative and is returned
- current newer than the last recorded sync: current is written as a replica
- otherwise: nothing to do

Every run ends in ``SUCCESS`` or ``ERROR``; failures never propagate to the
caller. Concurrent runs are not guarded against; callers should check
``state`` before starting another run.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from protracker.database.mappers import backup_metadata_to_record, snapshot_to_record
from protracker.domain.entities import BackupMetadata, Snapshot
from protracker.domain.entity_store import EntityStore, StorageKeys
from protracker.domain.errors import StoreIOError
from protracker.domain.integrity import is_finite_number
from protracker.domain.replica_store import ReplicaStore
from protracker.domain.snapshot import Clock, current_millis, snapshot_working_set
from protracker.utils.checksum import checksum_payload

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Coordinator state."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class SyncAction(str, Enum):
    """What a sync run did."""

    INITIAL_BACKUP = "initial_backup"
    RESTORED_FROM_REPLICA = "restored_from_replica"
    BACKED_UP = "backed_up"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Terminal result of a sync run.

    ``snapshot`` is the authoritative data: the replica when it won,
    otherwise the current snapshot unchanged.
    """

    state: SyncState
    action: SyncAction
    snapshot: Snapshot
    error: Optional[str] = None

    @property
    def replica_won(self) -> bool:
        return self.action is SyncAction.RESTORED_FROM_REPLICA


class SyncCoordinator:
    """Reconciles the current snapshot against the replica tier."""

    def __init__(self, store: EntityStore, replicas: ReplicaStore, clock: Clock = current_millis):
        """Initialize sync coordinator.

        Args:
            store: Primary-tier store (sync time and backup metadata live here)
            replicas: Replica tier
            clock: Millisecond wall clock
        """
        self.store = store
        self.replicas = replicas
        self.clock = clock
        self.state = SyncState.IDLE
        self.last_error: Optional[str] = None

    def last_sync_time(self) -> int:
        """Timestamp of the last successful sync (0 if never synced)."""
        value = self.store.read(StorageKeys.LAST_SYNC, 0)
        if not is_finite_number(value):
            return 0
        return int(value)

    def backup(self, snapshot: Snapshot) -> bool:
        """Write snapshot as a new replica and record its backup metadata."""
        try:
            checksum = checksum_payload(snapshot_to_record(snapshot))
        except (TypeError, ValueError) as e:
            logger.error("Backup failed, snapshot could not be serialized: %s", e)
            return False

        if not self.replicas.save(snapshot):
            logger.error("Backup failed, replica write was rejected")
            return False

        metadata = BackupMetadata(
            timestamp=snapshot.last_modified, version=snapshot.version, checksum=checksum
        )
        if not self.store.write(StorageKeys.BACKUP_METADATA, backup_metadata_to_record(metadata)):
            logger.warning("Replica written but backup metadata could not be recorded")
        logger.info("Snapshot %d backed up to replica tier", snapshot.last_modified)
        return True

    def sync(self, current: Snapshot) -> SyncOutcome:
        """Run one sync. Never raises; inspect the returned outcome."""
        self.state = SyncState.SYNCING
        self.last_error = None
        try:
            outcome = self._sync(current)
        except Exception as e:
            logger.exception("Sync failed")
            self.state = SyncState.ERROR
            self.last_error = str(e)
            return SyncOutcome(SyncState.ERROR, SyncAction.FAILED, current, str(e))
        self.state = SyncState.SUCCESS
        return outcome

    def _sync(self, current: Snapshot) -> SyncOutcome:
        replica = self.replicas.latest()
        last_sync = self.last_sync_time()

        if replica is None:
            self._backup_or_raise(current)
            self._record_sync()
            return SyncOutcome(SyncState.SUCCESS, SyncAction.INITIAL_BACKUP, current)

        if replica.last_modified > current.last_modified:
            logger.info("Replica %d is newer than current data; using it", replica.last_modified)
            self._record_sync()
            return SyncOutcome(SyncState.SUCCESS, SyncAction.RESTORED_FROM_REPLICA, replica)

        if current.last_modified > last_sync:
            self._backup_or_raise(current)
            self._record_sync()
            return SyncOutcome(SyncState.SUCCESS, SyncAction.BACKED_UP, current)

        return SyncOutcome(SyncState.SUCCESS, SyncAction.UP_TO_DATE, current)

    def _backup_or_raise(self, snapshot: Snapshot) -> None:
        if not self.backup(snapshot):
            raise StoreIOError("Could not write replica")

    def _record_sync(self) -> None:
        if not self.store.write(StorageKeys.LAST_SYNC, self.clock()):
            raise StoreIOError("Could not record sync time")

    def recover(self) -> Optional[Snapshot]:
        """Recover data: latest replica first, then the primary tier.

        Returns None when neither tier holds any records.
        """
        replica = self.replicas.latest()
        if replica is not None:
            logger.info("Recovered data from replica %d", replica.last_modified)
            return replica

        if self.store.has_records():
            logger.info("No replica available; recovered data from primary storage")
            return snapshot_working_set(self.store.load_working_set(), self.clock)

        return None
