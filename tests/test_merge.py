"""Tests for applying imported snapshots to the working set."""

import dataclasses
from datetime import date

from protracker.domain.entities import BillerProfile, Client, TimeEntry, WorkingSet
from protracker.domain.merge import MergeMode, apply_snapshot
from protracker.domain.snapshot import snapshot_working_set


def _imported(clock):
    working_set = WorkingSet(
        clients=[Client(id="c1", name="Renamed Acme"), Client(id="c2", name="Beta LLC")],
        time_entries=[
            TimeEntry(id="t9", project_id="p1", date=date(2024, 3, 3)),
            TimeEntry(id="t8", project_id="p1", date=date(2024, 2, 1)),
        ],
        biller_profile=BillerProfile(name="Someone Else"),
    )
    return snapshot_working_set(working_set, clock)


class TestReplace:
    """Tests for replace mode."""

    def test_every_collection_substituted(self, sample_working_set, clock):
        imported = _imported(clock)

        result = apply_snapshot(sample_working_set, imported, MergeMode.REPLACE)

        assert [c.id for c in result.clients] == ["c1", "c2"]
        assert result.projects == []
        assert result.invoices == []
        assert result.biller_profile == BillerProfile(name="Someone Else")


class TestMerge:
    """Tests for merge mode."""

    def test_existing_record_wins(self, sample_working_set, clock):
        result = apply_snapshot(sample_working_set, _imported(clock), "merge")

        assert [c.name for c in result.clients] == ["Acme Corp", "Beta LLC"]

    def test_biller_profile_kept(self, sample_working_set, clock):
        result = apply_snapshot(sample_working_set, _imported(clock), MergeMode.MERGE)

        assert result.biller_profile == sample_working_set.biller_profile

    def test_time_entries_most_recent_first(self, sample_working_set, clock):
        result = apply_snapshot(sample_working_set, _imported(clock), MergeMode.MERGE)

        assert [e.id for e in result.time_entries] == ["t9", "t2", "t1", "t8"]

    def test_idempotent(self, sample_working_set, clock):
        imported = _imported(clock)

        once = apply_snapshot(sample_working_set, imported, MergeMode.MERGE)
        twice = apply_snapshot(once, imported, MergeMode.MERGE)

        assert twice == once

    def test_input_not_modified(self, sample_working_set, clock):
        before = dataclasses.replace(sample_working_set, clients=list(sample_working_set.clients))

        apply_snapshot(sample_working_set, _imported(clock), MergeMode.MERGE)

        assert sample_working_set == before

    def test_merge_into_empty(self, clock):
        imported = _imported(clock)

        result = apply_snapshot(WorkingSet(), imported, MergeMode.MERGE)

        assert len(result.clients) == 2
        assert result.biller_profile == BillerProfile()
