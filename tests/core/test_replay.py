"""
VaxLedger Replay — Tests
==========================
Verify-then-apply rebuild and persistence isolation.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from core.event_store.persistence import InMemoryEventStore, persist_event
from core.event_store.validators import EventTypeRegistry
from core.replay import (
    ReplayChainBrokenError,
    ReplayContext,
    ReplayIntegrityError,
    ReplayIsolationError,
    is_replay_active,
    replay_events,
)


EVENT_TYPE = "vaccination.record.recorded.v1"
NOW = datetime(2026, 2, 19, 12, 0, tzinfo=timezone.utc)


class RecordingProjection:
    def __init__(self):
        self.applied = []

    def apply(self, event_type: str, payload: dict) -> None:
        self.applied.append((event_type, payload))


def _filled_store(count: int = 3) -> InMemoryEventStore:
    store = InMemoryEventStore()
    registry = EventTypeRegistry()
    registry.register(EVENT_TYPE)
    for n in range(1, count + 1):
        result = persist_event(
            {
                "event_id": uuid.uuid4(),
                "event_type": EVENT_TYPE,
                "event_version": 1,
                "ledger_id": store.ledger_id,
                "source_engine": "vaccination",
                "actor_id": "0xB0B",
                "correlation_id": uuid.uuid4(),
                "causation_id": None,
                "payload": {"record_id": n},
                "created_at": NOW,
            },
            store,
            registry,
        )
        assert result.accepted
    return store


class TestReplayEvents:
    def test_applies_every_event_in_order(self):
        store = _filled_store(3)
        projection = RecordingProjection()

        result = replay_events(store.load_events(), projection)

        assert result.events_processed == 3
        assert result.chain_verified
        assert result.head_hash == store.head().event_hash
        assert [p["record_id"] for _, p in projection.applied] == [1, 2, 3]

    def test_tampered_payload_aborts_before_apply(self):
        events = list(_filled_store(3).load_events())
        events[2] = replace(events[2], payload={"record_id": 42})
        projection = RecordingProjection()

        with pytest.raises(ReplayIntegrityError):
            replay_events(events, projection)
        assert projection.applied == []

    def test_broken_linkage_aborts(self):
        events = list(_filled_store(2).load_events())
        events[1] = replace(events[1], previous_event_hash="GENESIS")
        projection = RecordingProjection()

        with pytest.raises(ReplayChainBrokenError):
            replay_events(events, projection, ledger_id=uuid.uuid4())
        assert projection.applied == []

    def test_projection_cannot_persist(self):
        store = _filled_store(1)

        class WritingProjection:
            def apply(self, event_type, payload):
                assert is_replay_active()
                persist_event(dict(payload), store, EventTypeRegistry())

        with pytest.raises(ReplayIsolationError):
            replay_events(store.load_events(), WritingProjection())
        assert not is_replay_active()


class TestReplayContext:
    def test_nested_contexts(self):
        assert not is_replay_active()
        with ReplayContext():
            with ReplayContext():
                assert is_replay_active()
            assert is_replay_active()
        assert not is_replay_active()
