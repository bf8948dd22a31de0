"""Tests for periodic replica backups."""

import asyncio
import threading

import pytest

from protracker.domain.auto_backup import start_auto_backup, stop_auto_backup


def test_backs_up_until_stopped(workspace, sample_working_set, clock):
    """Test backups run on the interval and stop when asked."""
    workspace.save(sample_working_set)

    async def run():
        handle = workspace.start_auto_backup(interval=0.01)
        assert handle.running is True
        await asyncio.sleep(0.05)
        stop_auto_backup(handle)
        await asyncio.sleep(0.01)
        return handle

    handle = asyncio.run(run())

    assert handle.running is False
    latest = workspace.replicas.latest()
    assert latest is not None
    assert latest.clients == tuple(sample_working_set.clients)


def test_backup_runs_off_the_event_loop_thread(workspace, sample_working_set):
    """Test the blocking snapshot and write happen on a worker thread."""
    workspace.save(sample_working_set)
    loader_threads = []

    def load():
        loader_threads.append(threading.get_ident())
        return workspace.load()

    async def run():
        handle = start_auto_backup(load, workspace.coordinator, interval=0.01)
        await asyncio.sleep(0.05)
        handle.stop()
        await asyncio.sleep(0.01)

    asyncio.run(run())

    assert loader_threads
    assert threading.get_ident() not in loader_threads
    assert workspace.replicas.latest() is not None


def test_stop_is_repeatable(workspace):
    """Test stopping an already stopped backup is harmless."""

    async def run():
        handle = workspace.start_auto_backup(interval=60)
        handle.stop()
        handle.stop()
        await asyncio.sleep(0.01)
        return handle

    assert asyncio.run(run()).running is False


def test_interval_must_be_positive(workspace):
    """Test a non-positive interval is rejected."""
    with pytest.raises(ValueError, match="positive"):
        start_auto_backup(workspace.load, workspace.coordinator, interval=0)


def test_requires_running_loop(workspace):
    """Test starting outside an event loop fails."""
    with pytest.raises(RuntimeError):
        start_auto_backup(workspace.load, workspace.coordinator, interval=1)
