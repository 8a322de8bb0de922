"""
VaxLedger Event Store — Hash Chain Tests
==========================================
Digest determinism and full-chain verification.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from core.event_store.hashing import (
    GENESIS_HASH,
    HashRejectionCode,
    canonical_serialize,
    compute_event_hash,
    verify_event_chain,
)
from core.event_store.persistence.memory import StoredEvent


LEDGER_ID = uuid.uuid4()
NOW = datetime(2026, 2, 19, 12, 0, tzinfo=timezone.utc)


def _chain(payloads: list[dict]) -> list[StoredEvent]:
    events = []
    previous = GENESIS_HASH
    for index, payload in enumerate(payloads, start=1):
        event_hash = compute_event_hash(payload, previous)
        events.append(StoredEvent(
            event_id=uuid.uuid4(),
            event_type="vaccination.record.recorded.v1",
            event_version=1,
            ledger_id=LEDGER_ID,
            sequence=index,
            source_engine="vaccination",
            actor_id="0xB0B",
            correlation_id=uuid.uuid4(),
            causation_id=None,
            payload=payload,
            created_at=NOW,
            previous_event_hash=previous,
            event_hash=event_hash,
        ))
        previous = event_hash
    return events


class TestCanonicalSerialize:
    def test_key_order_irrelevant(self):
        assert canonical_serialize({"b": 1, "a": 2}) == canonical_serialize({"a": 2, "b": 1})

    def test_compact_separators(self):
        assert canonical_serialize({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_non_ascii_escaped(self):
        assert canonical_serialize({"name": "Zoë"}) == '{"name":"Zo\\u00eb"}'

    def test_uuid_serialized_as_string(self):
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert canonical_serialize({"id": value}) == (
            '{"id":"12345678-1234-5678-1234-567812345678"}'
        )


class TestComputeEventHash:
    def test_hex_sha256(self):
        digest = compute_event_hash({"record_id": 1}, GENESIS_HASH)
        assert len(digest) == 64
        assert digest == digest.lower()

    def test_deterministic(self):
        payload = {"record_id": 1, "batch_number": "B-1"}
        assert compute_event_hash(payload, GENESIS_HASH) == compute_event_hash(
            dict(reversed(list(payload.items()))), GENESIS_HASH
        )

    def test_previous_hash_changes_digest(self):
        payload = {"record_id": 1}
        assert compute_event_hash(payload, GENESIS_HASH) != compute_event_hash(
            payload, "0" * 64
        )


class TestVerifyEventChain:
    def test_empty_chain_is_valid(self):
        result = verify_event_chain([])
        assert result.valid
        assert result.events_checked == 0
        assert result.head_hash == GENESIS_HASH

    def test_intact_chain(self):
        events = _chain([{"n": 1}, {"n": 2}, {"n": 3}])
        result = verify_event_chain(events)
        assert result.valid
        assert result.events_checked == 3
        assert result.head_hash == events[-1].event_hash

    def test_altered_payload_detected(self):
        events = _chain([{"n": 1}, {"n": 2}, {"n": 3}])
        events[1] = replace(events[1], payload={"n": 99})

        result = verify_event_chain(events)

        assert not result.valid
        assert result.failure_code == HashRejectionCode.HASH_COMPUTATION_MISMATCH
        assert result.failed_sequence == 2
        assert result.failed_event_id == events[1].event_id
        assert result.events_checked == 1

    def test_broken_link_detected(self):
        events = _chain([{"n": 1}, {"n": 2}])
        events[1] = replace(events[1], previous_event_hash="f" * 64)

        result = verify_event_chain(events)

        assert not result.valid
        assert result.failure_code == HashRejectionCode.HASH_CHAIN_BROKEN
        assert result.failed_sequence == 2

    def test_missing_event_detected(self):
        events = _chain([{"n": 1}, {"n": 2}, {"n": 3}])
        del events[1]

        result = verify_event_chain(events)

        assert not result.valid
        assert result.failure_code == HashRejectionCode.SEQUENCE_GAP
        assert result.failed_sequence == 3
