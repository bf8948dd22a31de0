"""Tests for snapshot shape validation and reference checks."""

import dataclasses
from datetime import date
from decimal import Decimal

from protracker.database.mappers import snapshot_to_record
from protracker.domain.entities import Invoice, Project, TimeEntry, WorkingSet
from protracker.domain.integrity import validate_references, validate_shape
from protracker.domain.snapshot import snapshot_working_set


def _record(sample_working_set, clock):
    return snapshot_to_record(snapshot_working_set(sample_working_set, clock))


class TestValidateShape:
    """Tests for validate_shape."""

    def test_snapshot_and_record_accepted(self, sample_working_set, clock):
        snapshot = snapshot_working_set(sample_working_set, clock)
        assert validate_shape(snapshot) is True
        assert validate_shape(snapshot_to_record(snapshot)) is True

    def test_empty_object_rejected(self):
        assert validate_shape({}) is False

    def test_non_object_rejected(self):
        assert validate_shape([]) is False
        assert validate_shape(None) is False

    def test_required_collection_must_be_list(self, sample_working_set, clock):
        record = _record(sample_working_set, clock)
        record["invoices"] = {}
        assert validate_shape(record) is False

    def test_optional_collection_may_be_absent(self, sample_working_set, clock):
        record = _record(sample_working_set, clock)
        del record["payments"]
        assert validate_shape(record) is True

    def test_optional_collection_must_be_list_when_present(self, sample_working_set, clock):
        record = _record(sample_working_set, clock)
        record["exchangeRates"] = None
        assert validate_shape(record) is False

    def test_scalars_checked(self, sample_working_set, clock):
        record = _record(sample_working_set, clock)
        assert validate_shape({**record, "billerInfo": None}) is False
        assert validate_shape({**record, "version": 1}) is False
        assert validate_shape({**record, "lastModified": "yesterday"}) is False
        assert validate_shape({**record, "lastModified": True}) is False

    def test_last_modified_must_be_finite(self, sample_working_set, clock):
        record = _record(sample_working_set, clock)
        assert validate_shape({**record, "lastModified": float("nan")}) is False
        assert validate_shape({**record, "lastModified": float("inf")}) is False
        assert validate_shape({**record, "lastModified": Decimal("NaN")}) is False
        assert validate_shape({**record, "lastModified": Decimal("1000")}) is True

    def test_snapshot_with_bad_version_rejected(self, sample_working_set, clock):
        snapshot = dataclasses.replace(snapshot_working_set(sample_working_set, clock), version=None)
        assert validate_shape(snapshot) is False


class TestValidateReferences:
    """Tests for validate_references."""

    def test_consistent_snapshot_has_no_warnings(self, sample_working_set, clock):
        assert validate_references(snapshot_working_set(sample_working_set, clock)) == []

    def test_dangling_references_reported(self, sample_working_set, clock):
        snapshot = dataclasses.replace(
            snapshot_working_set(sample_working_set, clock),
            projects=(Project(id="p2", client_id="ghost", name="Orphan"),),
        )
        snapshot = dataclasses.replace(
            snapshot,
            invoices=snapshot.invoices
            + (Invoice(id="i2", client_id="ghost", invoice_number="INV-0002"),),
        )

        warnings = validate_references(snapshot)

        assert 'Project "Orphan" references non-existent client ghost' in warnings
        assert "Time entry t1 references non-existent project p1" in warnings
        assert "Time entry t2 references non-existent project p1" in warnings
        assert "Invoice INV-0002 references non-existent client ghost" in warnings
        assert len(warnings) == 4

    def test_records_not_dropped(self, clock):
        working_set = WorkingSet(time_entries=[TimeEntry(id="t1", project_id="p404", date=date(2024, 1, 1))])
        snapshot = snapshot_working_set(working_set, clock)

        assert len(validate_references(snapshot)) == 1
        assert len(snapshot.time_entries) == 1
