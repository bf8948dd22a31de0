"""Replica ("cloud") tier holding timestamped snapshot copies.

Each replica is stored under ``cloud_backup_<lastModified>``. The tier is a
second local persistence namespace; any ``Database`` implementation (for
instance one backed by a networked object store) may stand behind it.
"""

import logging
from typing import Any, Optional

from protracker.database.base import Database
from protracker.database.mappers import snapshot_from_record, snapshot_to_record
from protracker.domain.entities import Snapshot
from protracker.domain.entity_store import EntityStore
from protracker.domain.errors import ValidationError
from protracker.domain.integrity import validate_shape

logger = logging.getLogger(__name__)

REPLICA_PREFIX = "cloud_backup_"
DEFAULT_KEEP_REPLICAS = 20


def replica_key(timestamp: int) -> str:
    """Storage key for the replica written at timestamp."""
    return f"{REPLICA_PREFIX}{timestamp}"


def _timestamp_of(key: str) -> Optional[int]:
    try:
        return int(key[len(REPLICA_PREFIX):])
    except ValueError:
        return None


class ReplicaStore:
    """Timestamped snapshot copies, queryable by recency."""

    def __init__(self, db: Database, keep: int = DEFAULT_KEEP_REPLICAS):
        """Initialize replica store.

        Args:
            db: Database instance backing the replica tier
            keep: Number of most recent replicas retained after each write
                (0 keeps everything)
        """
        self.store = EntityStore(db)
        self.keep = keep

    def read(self, key: str, default: Any = None) -> Any:
        """Read a raw stored value. Never raises."""
        return self.store.read(key, default)

    def write(self, key: str, value: Any) -> bool:
        """Write a raw value. Returns False on failure. Never raises."""
        return self.store.write(key, value)

    def save(self, snapshot: Snapshot) -> bool:
        """Persist snapshot as a new replica and apply retention."""
        if not self.write(replica_key(snapshot.last_modified), snapshot_to_record(snapshot)):
            return False
        if self.keep > 0:
            self.prune(self.keep)
        return True

    def list_replicas(self) -> list[tuple[str, int]]:
        """Return (key, timestamp) pairs, most recent first."""
        replicas = []
        for key in self.store.keys(REPLICA_PREFIX):
            timestamp = _timestamp_of(key)
            if timestamp is None:
                logger.warning("Ignoring replica key with unreadable timestamp: %r", key)
                continue
            replicas.append((key, timestamp))
        replicas.sort(key=lambda item: item[1], reverse=True)
        return replicas

    def load(self, key: str) -> Optional[Snapshot]:
        """Load the replica under key, or None if absent or invalid."""
        record = self.read(key)
        if record is None:
            return None
        if not validate_shape(record):
            logger.warning("Replica %r failed shape validation", key)
            return None
        try:
            return snapshot_from_record(record)
        except (ValueError, OverflowError) as e:
            logger.warning("Replica %r could not be decoded: %s", key, e)
            return None

    def latest(self) -> Optional[Snapshot]:
        """Return the most recent valid replica, or None if there is none."""
        for key, _ in self.list_replicas():
            snapshot = self.load(key)
            if snapshot is not None:
                return snapshot
        return None

    def prune(self, keep: int) -> int:
        """Delete all but the ``keep`` most recent replicas.

        Returns:
            Number of replicas deleted
        """
        if keep < 1:
            raise ValidationError("Must keep at least one replica")
        deleted = 0
        for key, _ in self.list_replicas()[keep:]:
            if self.store.delete(key):
                deleted += 1
        if deleted:
            logger.info("Pruned %d old replica(s)", deleted)
        return deleted
