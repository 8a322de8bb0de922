"""
VaxLedger Event Store — Hash Computation
==========================================
Computes event_hash using SHA-256.

Formula:
    event_hash = SHA256(canonical_json(payload) + previous_event_hash)

The first event of a ledger links to GENESIS_HASH. Payloads are
JSON-native (strings, ints, bools, lists, dicts), so the digest is
identical before and after a round-trip through a JSON column.
"""

import hashlib
import json
from typing import Any


GENESIS_HASH = "GENESIS"


def canonical_serialize(payload: Any) -> str:
    """
    Deterministic JSON text for hashing.

    Sorted keys at every level, compact separators, ASCII output,
    str() for anything json cannot encode natively.
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def compute_event_hash(payload: Any, previous_event_hash: str) -> str:
    """
    Chain digest of one event.

    Returns:
        64-character lowercase hex SHA-256 digest.
    """
    hash_input = canonical_serialize(payload) + previous_event_hash
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
