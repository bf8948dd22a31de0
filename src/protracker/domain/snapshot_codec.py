"""Export and import of portable snapshot documents.

An export document has the form::

    {"data": {...snapshot..., "exportedAt": "...", "exportVersion": "..."},
     "checksum": "...",
     "exportedBy": "ProTracker Data Manager"}

Import accepts that document, a bare snapshot, or a legacy document holding
at least ``clients`` and ``projects``. The three layouts are tried in that
order; the first that matches decides how the document is read.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Optional

import simplejson as json

from protracker.database.mappers import biller_profile_to_record, snapshot_from_record, snapshot_to_record
from protracker.domain.entities import BillerProfile, Snapshot
from protracker.domain.errors import InvalidSnapshotError, ValidationError
from protracker.domain.integrity import OPTIONAL_COLLECTIONS, validate_references, validate_shape
from protracker.domain.merge import MergeMode
from protracker.domain.snapshot import SCHEMA_VERSION, Clock, current_millis
from protracker.utils.checksum import checksum_payload

logger = logging.getLogger(__name__)

EXPORTED_BY = "ProTracker Data Manager"

CHECKSUM_MISMATCH = "Data checksum mismatch - data may be corrupted"
LEGACY_FORMAT = "Imported data from legacy format"
INVALID_FORMAT = "Invalid data format - unable to import"
FAILED_VALIDATION = "Imported data failed validation"


class DocumentFormat(str, Enum):
    """Layouts an import document may use."""

    CHECKSUMMED = "checksummed"
    SNAPSHOT = "snapshot"
    LEGACY = "legacy"


@dataclass
class ParsedDocument:
    """A document recognised as one of the known layouts."""

    format: DocumentFormat
    record: dict[str, Any]
    warnings: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Outcome of an import. ``data`` is set only when ``success`` is True."""

    success: bool
    data: Optional[Snapshot] = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    source_format: Optional[DocumentFormat] = None
    mode: MergeMode = MergeMode.MERGE


def _parse_checksummed(document: Any) -> Optional[ParsedDocument]:
    if not isinstance(document, dict):
        return None
    data = document.get("data")
    checksum = document.get("checksum")
    if not isinstance(data, dict) or not isinstance(checksum, str) or not checksum:
        return None
    warnings = []
    if checksum_payload(data) != checksum:
        warnings.append(CHECKSUM_MISMATCH)
    return ParsedDocument(DocumentFormat.CHECKSUMMED, data, warnings)


def _parse_snapshot(document: Any) -> Optional[ParsedDocument]:
    if not validate_shape(document):
        return None
    return ParsedDocument(DocumentFormat.SNAPSHOT, document)


def _legacy_parser(clock: Clock):
    def parse(document: Any) -> Optional[ParsedDocument]:
        if not isinstance(document, dict):
            return None
        if not isinstance(document.get("clients"), list) or not isinstance(document.get("projects"), list):
            return None

        def collection(name: str) -> list:
            value = document.get(name)
            return value if isinstance(value, list) else []

        biller_info = document.get("billerInfo")
        record = {
            "clients": document["clients"],
            "projects": document["projects"],
            "timeEntries": collection("timeEntries"),
            "invoices": collection("invoices"),
            "billerInfo": biller_info if isinstance(biller_info, dict) else biller_profile_to_record(BillerProfile()),
            "version": SCHEMA_VERSION,
            "lastModified": clock(),
        }
        for name in OPTIONAL_COLLECTIONS:
            record[name] = collection(name)
        return ParsedDocument(DocumentFormat.LEGACY, record, [LEGACY_FORMAT])

    return parse


class SnapshotCodec:
    """Serializes snapshots to checksummed documents and reads them back."""

    def __init__(self, clock: Clock = current_millis):
        """Initialize snapshot codec.

        Args:
            clock: Millisecond wall clock used for export and import stamps
        """
        self.clock = clock
        self._parsers = (_parse_checksummed, _parse_snapshot, _legacy_parser(clock))

    def export_snapshot(self, snapshot: Snapshot) -> str:
        """Serialize snapshot into a checksummed export document.

        Raises:
            InvalidSnapshotError: If the snapshot fails shape validation
        """
        if not validate_shape(snapshot):
            raise InvalidSnapshotError("Invalid data structure for export")

        data = snapshot_to_record(snapshot)
        exported_at = datetime.fromtimestamp(self.clock() / 1000, UTC)
        data["exportedAt"] = exported_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        data["exportVersion"] = SCHEMA_VERSION

        document = {
            "data": data,
            "checksum": checksum_payload(data),
            "exportedBy": EXPORTED_BY,
        }
        return json.dumps(document, indent=2, ensure_ascii=False, use_decimal=True)

    def parse_document(self, document: Any) -> Optional[ParsedDocument]:
        """Match a decoded document against the known layouts in order."""
        for parser in self._parsers:
            parsed = parser(document)
            if parsed is not None:
                return parsed
        return None

    def import_document(self, document: str, mode: MergeMode | str = MergeMode.MERGE) -> ImportResult:
        """Parse and validate an import document. Never raises.

        ``mode`` is carried on the result for the merge step that follows.
        """
        try:
            mode = MergeMode(mode)
        except ValueError:
            return ImportResult(success=False, errors=[f"Unknown import mode: {mode}"])
        try:
            result = self._import(document)
        except Exception as e:
            logger.exception("Import failed")
            result = ImportResult(success=False, errors=[f"Import failed: {e}"])
        result.mode = mode
        return result

    def _import(self, document: str) -> ImportResult:
        try:
            decoded = json.loads(document, use_decimal=True)
        except ValueError as e:
            return ImportResult(success=False, errors=[f"Import failed: {e}"])

        parsed = self.parse_document(decoded)
        if parsed is None:
            return ImportResult(success=False, errors=[INVALID_FORMAT])

        warnings = list(parsed.warnings)
        if not validate_shape(parsed.record):
            return ImportResult(
                success=False, errors=[FAILED_VALIDATION], warnings=warnings, source_format=parsed.format
            )
        try:
            snapshot = snapshot_from_record(parsed.record)
        except ValidationError as e:
            return ImportResult(
                success=False,
                errors=[f"{FAILED_VALIDATION}: {e}"],
                warnings=warnings,
                source_format=parsed.format,
            )

        if snapshot.version != SCHEMA_VERSION:
            warnings.append(f"Version mismatch: imported v{snapshot.version}, current v{SCHEMA_VERSION}")
        warnings.extend(validate_references(snapshot))

        snapshot = dataclasses.replace(snapshot, last_modified=self.clock())
        return ImportResult(success=True, data=snapshot, warnings=warnings, source_format=parsed.format)
