"""Periodic replica backups owned by the caller.

``start_auto_backup`` schedules an asyncio task on the running event loop and
returns the handle that owns it; ``stop_auto_backup`` cancels it.
"""

import asyncio
import logging
from typing import Callable

from protracker.domain.entities import WorkingSet
from protracker.domain.snapshot import snapshot_working_set
from protracker.domain.sync import SyncCoordinator

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_INTERVAL = 5 * 60.0


class AutoBackupHandle:
    """Owns a running auto-backup task."""

    def __init__(self, task: asyncio.Task):
        self._task = task

    @property
    def running(self) -> bool:
        return not self._task.done()

    def stop(self) -> None:
        """Cancel the task. Safe to call more than once."""
        if not self._task.done():
            self._task.cancel()


def _backup_once(
    load_working_set: Callable[[], WorkingSet],
    coordinator: SyncCoordinator,
) -> bool:
    snapshot = snapshot_working_set(load_working_set(), coordinator.clock)
    return coordinator.backup(snapshot)


async def _backup_loop(
    load_working_set: Callable[[], WorkingSet],
    coordinator: SyncCoordinator,
    interval: float,
) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            # Database I/O runs off the event loop
            done = await asyncio.to_thread(_backup_once, load_working_set, coordinator)
            if not done:
                logger.warning("Auto-backup did not complete")
        except Exception:
            logger.exception("Auto-backup failed")


def start_auto_backup(
    load_working_set: Callable[[], WorkingSet],
    coordinator: SyncCoordinator,
    interval: float = DEFAULT_BACKUP_INTERVAL,
) -> AutoBackupHandle:
    """Start backing up the working set every ``interval`` seconds.

    Must be called from within a running event loop.

    Raises:
        ValueError: If interval is not positive
    """
    if interval <= 0:
        raise ValueError("Backup interval must be positive")
    task = asyncio.get_running_loop().create_task(
        _backup_loop(load_working_set, coordinator, interval)
    )
    return AutoBackupHandle(task)


def stop_auto_backup(handle: AutoBackupHandle) -> None:
    """Stop an auto-backup started with ``start_auto_backup``."""
    handle.stop()
