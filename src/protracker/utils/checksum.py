"""Integrity digest for serialized payloads.

The digest is a 32-bit rolling hash (``h = h * 31 + c`` over UTF-16 code
units, wrapped to a signed 32-bit integer). It detects accidental corruption
of a stored or exported payload. It is not a cryptographic hash and offers no
protection against deliberate tampering.
"""

from typing import Any

import simplejson as json

_MASK = 0xFFFFFFFF


def generate_checksum(data: str) -> str:
    """Return the rolling-hash digest of ``data`` as a decimal string."""
    value = 0
    encoded = data.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = ((value << 5) - value + code_unit) & _MASK
    if value & 0x80000000:
        value -= 1 << 32
    return str(value)


def canonical_json(payload: Any) -> str:
    """Serialize ``payload`` in the compact form checksums are computed over.

    Key order is preserved and decimals keep their exact digits, so a document
    parsed with ``use_decimal=True`` and re-serialized reproduces the bytes it
    was exported with.
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, use_decimal=True)


def checksum_payload(payload: Any) -> str:
    """Checksum the canonical serialization of a JSON-compatible payload."""
    return generate_checksum(canonical_json(payload))
