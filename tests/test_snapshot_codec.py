"""Tests for export and import documents."""

import dataclasses
from decimal import Decimal

import pytest
import simplejson as json

from protracker.database.mappers import snapshot_to_record
from protracker.domain.entities import BillerProfile, Project
from protracker.domain.errors import InvalidSnapshotError
from protracker.domain.merge import MergeMode
from protracker.domain.snapshot import snapshot_working_set
from protracker.domain.snapshot_codec import (
    CHECKSUM_MISMATCH,
    EXPORTED_BY,
    FAILED_VALIDATION,
    INVALID_FORMAT,
    LEGACY_FORMAT,
    DocumentFormat,
    SnapshotCodec,
)
from protracker.utils.checksum import checksum_payload


@pytest.fixture
def codec(clock):
    """Create a SnapshotCodec on the test clock."""
    return SnapshotCodec(clock)


@pytest.fixture
def snapshot(sample_working_set, clock):
    """A snapshot of the sample working set."""
    return snapshot_working_set(sample_working_set, clock)


class TestExport:
    """Tests for export_snapshot."""

    def test_document_layout(self, codec, snapshot):
        document = json.loads(codec.export_snapshot(snapshot), use_decimal=True)

        assert set(document) == {"data", "checksum", "exportedBy"}
        assert document["exportedBy"] == EXPORTED_BY
        assert document["data"]["exportVersion"] == "1.0.0"
        assert document["data"]["exportedAt"] == "2023-11-14T22:13:20.000Z"
        assert document["checksum"] == checksum_payload(document["data"])

    def test_invalid_snapshot_rejected(self, codec, snapshot):
        with pytest.raises(InvalidSnapshotError):
            codec.export_snapshot(dataclasses.replace(snapshot, version=None))


class TestImport:
    """Tests for import_document."""

    def test_round_trip(self, codec, snapshot, clock):
        document = codec.export_snapshot(snapshot)
        clock.advance(5000)

        result = codec.import_document(document, "replace")

        assert result.success is True
        assert result.errors == []
        assert result.warnings == []
        assert result.source_format is DocumentFormat.CHECKSUMMED
        assert result.mode is MergeMode.REPLACE
        assert result.data.last_modified == clock.now
        assert dataclasses.replace(result.data, last_modified=snapshot.last_modified) == snapshot

    def test_round_trip_keeps_exact_amounts(self, codec, snapshot):
        rate = Decimal("12345678901234567.89")
        project = dataclasses.replace(snapshot.projects[0], hourly_rate=rate)
        precise = dataclasses.replace(snapshot, projects=(project,))
        document = codec.export_snapshot(precise)

        assert "12345678901234567.89" in document

        result = codec.import_document(document, "replace")

        assert result.success is True
        assert CHECKSUM_MISMATCH not in result.warnings
        assert result.data.projects[0].hourly_rate == rate

    def test_checksum_mismatch_is_only_a_warning(self, codec, snapshot):
        document = json.loads(codec.export_snapshot(snapshot), use_decimal=True)
        document["data"]["clients"][0]["name"] = "Tampered Ltd"

        result = codec.import_document(json.dumps(document, use_decimal=True))

        assert result.success is True
        assert CHECKSUM_MISMATCH in result.warnings
        assert result.data.clients[0].name == "Tampered Ltd"

    def test_reformatted_document_keeps_checksum(self, codec, snapshot):
        document = json.loads(codec.export_snapshot(snapshot), use_decimal=True)

        compact = json.dumps(document, separators=(",", ":"), use_decimal=True)

        result = codec.import_document(compact)

        assert CHECKSUM_MISMATCH not in result.warnings

    def test_bare_snapshot(self, codec, snapshot):
        record = snapshot_to_record(snapshot)

        result = codec.import_document(json.dumps(record, use_decimal=True))

        assert result.success is True
        assert result.source_format is DocumentFormat.SNAPSHOT
        assert result.warnings == []

    def test_legacy_document(self, codec):
        document = {
            "clients": [{"id": "c1", "name": "Acme"}],
            "projects": [{"id": "p1", "clientId": "c1", "name": "Website", "hourlyRate": 80}],
        }

        result = codec.import_document(json.dumps(document))

        assert result.success is True
        assert result.source_format is DocumentFormat.LEGACY
        assert result.warnings == [LEGACY_FORMAT]
        assert [c.name for c in result.data.clients] == ["Acme"]
        assert result.data.time_entries == ()
        assert result.data.invoices == ()
        assert result.data.payments == ()
        assert result.data.biller_profile == BillerProfile()

    def test_legacy_document_keeps_present_collections(self, codec):
        document = {
            "clients": [{"id": "c1", "name": "Acme"}],
            "projects": [],
            "invoices": [{"id": "i1", "clientId": "c1", "invoiceNumber": "INV-0001", "totalAmount": 10}],
        }

        result = codec.import_document(json.dumps(document))

        assert result.success is True
        assert len(result.data.invoices) == 1

    def test_empty_object_rejected(self, codec):
        result = codec.import_document("{}")

        assert result.success is False
        assert result.errors == [INVALID_FORMAT]
        assert result.data is None

    def test_not_json(self, codec):
        result = codec.import_document("not json at all")

        assert result.success is False
        assert result.errors[0].startswith("Import failed:")

    def test_checksummed_document_with_bad_shape(self, codec):
        document = {"data": {"clients": []}, "checksum": "123", "exportedBy": EXPORTED_BY}

        result = codec.import_document(json.dumps(document))

        assert result.success is False
        assert result.errors == [FAILED_VALIDATION]
        assert result.source_format is DocumentFormat.CHECKSUMMED

    def test_undecodable_record(self, codec, snapshot):
        record = snapshot_to_record(snapshot)
        del record["timeEntries"][0]["date"]

        result = codec.import_document(json.dumps(record, use_decimal=True))

        assert result.success is False
        assert result.errors[0].startswith(f"{FAILED_VALIDATION}: ")
        assert result.data is None

    def test_referential_warning_does_not_block(self, codec, snapshot):
        orphaned = dataclasses.replace(
            snapshot,
            projects=snapshot.projects + (Project(id="p2", client_id="ghost", name="Orphan"),),
        )

        result = codec.import_document(codec.export_snapshot(orphaned), "replace")

        assert result.success is True
        assert result.warnings == ['Project "Orphan" references non-existent client ghost']
        assert len(result.data.projects) == 2

    def test_version_mismatch_is_a_warning(self, codec, snapshot):
        record = snapshot_to_record(dataclasses.replace(snapshot, version="0.9.0"))

        result = codec.import_document(json.dumps(record, use_decimal=True))

        assert result.success is True
        assert result.warnings == ["Version mismatch: imported v0.9.0, current v1.0.0"]

    def test_unknown_mode(self, codec, snapshot):
        result = codec.import_document(codec.export_snapshot(snapshot), "overwrite")

        assert result.success is False
        assert result.errors == ["Unknown import mode: overwrite"]
