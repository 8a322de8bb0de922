"""
VaxLedger Event Store — In-Memory Store and persist_event Tests
=================================================================
The single write path against the default store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from core.event_store.hashing import GENESIS_HASH, HashRejectionCode, compute_event_hash
from core.event_store.persistence import (
    ChainConflictError,
    DuplicateEventError,
    InMemoryEventStore,
    persist_event,
)
from core.event_store.validators import EventTypeRegistry, RejectionCode
from core.events.registry import SubscriberRegistry
from core.replay.context import ReplayContext
from core.replay.errors import ReplayIsolationError


EVENT_TYPE = "vaccination.provider.registered.v1"
LEDGER_ID = uuid.uuid4()
NOW = datetime(2026, 2, 19, 12, 0, tzinfo=timezone.utc)


def _build_registry() -> EventTypeRegistry:
    registry = EventTypeRegistry()
    registry.register(EVENT_TYPE)
    return registry


def _build_event(**overrides) -> dict:
    event = {
        "event_id": uuid.uuid4(),
        "event_type": EVENT_TYPE,
        "event_version": 1,
        "ledger_id": LEDGER_ID,
        "source_engine": "vaccination",
        "actor_id": "0xB0B",
        "correlation_id": uuid.uuid4(),
        "causation_id": None,
        "payload": {"provider_address": "0xB0B", "provider_name": "City Clinic"},
        "created_at": NOW,
    }
    event.update(overrides)
    return event


@pytest.fixture
def store():
    return InMemoryEventStore(ledger_id=LEDGER_ID)


@pytest.fixture
def registry():
    return _build_registry()


class TestPersistEvent:
    def test_first_event_links_to_genesis(self, store, registry):
        event = _build_event()

        result = persist_event(event, store, registry)

        assert result.accepted
        stored = result.event
        assert stored.sequence == 1
        assert stored.previous_event_hash == GENESIS_HASH
        assert stored.event_hash == compute_event_hash(event["payload"], GENESIS_HASH)

    def test_second_event_links_to_first(self, store, registry):
        first = persist_event(_build_event(), store, registry).event
        second = persist_event(
            _build_event(payload={"provider_address": "0xC4"}), store, registry,
        ).event

        assert second.sequence == 2
        assert second.previous_event_hash == first.event_hash
        assert store.count() == 2
        assert store.head() == second

    def test_input_dict_not_mutated(self, store, registry):
        event = _build_event()
        persist_event(event, store, registry)
        assert "event_hash" not in event
        assert "sequence" not in event

    def test_unregistered_type_refused(self, store, registry):
        result = persist_event(
            _build_event(event_type="vaccination.record.deleted.v1"), store, registry,
        )
        assert not result.accepted
        assert result.rejection.code == RejectionCode.EVENT_TYPE_UNKNOWN
        assert store.count() == 0

    def test_missing_field_refused(self, store, registry):
        event = _build_event()
        del event["correlation_id"]
        result = persist_event(event, store, registry)
        assert result.rejection.code == RejectionCode.MISSING_FIELD

    def test_blank_actor_refused(self, store, registry):
        result = persist_event(_build_event(actor_id="  "), store, registry)
        assert result.rejection.code == RejectionCode.EMPTY_ACTOR_ID

    def test_foreign_ledger_refused(self, store, registry):
        result = persist_event(_build_event(ledger_id=uuid.uuid4()), store, registry)
        assert result.rejection.code == RejectionCode.LEDGER_ID_MISMATCH

    def test_non_dict_payload_refused(self, store, registry):
        result = persist_event(_build_event(payload="text"), store, registry)
        assert result.rejection.code == RejectionCode.INVALID_PAYLOAD

    def test_duplicate_event_id_refused(self, store, registry):
        event = _build_event()
        assert persist_event(event, store, registry).accepted

        result = persist_event(event, store, registry)

        assert not result.accepted
        assert result.rejection.code == RejectionCode.DUPLICATE_EVENT_ID
        assert store.count() == 1

    def test_wrong_previous_hash_refused(self, store, registry):
        result = persist_event(
            _build_event(previous_event_hash="a" * 64), store, registry,
        )
        assert result.rejection.code == HashRejectionCode.HASH_CHAIN_BROKEN
        assert store.count() == 0

    def test_wrong_event_hash_refused(self, store, registry):
        result = persist_event(_build_event(event_hash="b" * 64), store, registry)
        assert result.rejection.code == HashRejectionCode.HASH_COMPUTATION_MISMATCH

    def test_matching_supplied_hashes_accepted(self, store, registry):
        event = _build_event()
        event["previous_event_hash"] = GENESIS_HASH
        event["event_hash"] = compute_event_hash(event["payload"], GENESIS_HASH)
        assert persist_event(event, store, registry).accepted

    def test_refused_during_replay(self, store, registry):
        with ReplayContext():
            with pytest.raises(ReplayIsolationError):
                persist_event(_build_event(), store, registry)
        assert store.count() == 0

    def test_subscribers_notified_after_append(self, store, registry):
        seen = []
        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(EVENT_TYPE, seen.append, "audit")

        result = persist_event(_build_event(), store, registry, subscribers)

        assert seen == [result.event]

    def test_failing_subscriber_does_not_undo_event(self, store, registry):
        def _explode(event):
            raise RuntimeError("audit sink down")

        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(EVENT_TYPE, _explode, "audit")

        result = persist_event(_build_event(), store, registry, subscribers)

        assert result.accepted
        assert store.count() == 1

    def test_subscriber_edits_stay_out_of_chain(self, store, registry):
        def _forge(event):
            event.payload["provider_name"] = "Forged Clinic"

        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(EVENT_TYPE, _forge, "audit")

        persist_event(_build_event(), store, registry, subscribers)

        assert store.load_events()[0].payload["provider_name"] == "City Clinic"
        assert store.head().payload["provider_name"] == "City Clinic"

    def test_dispatch_waits_for_atomic_block(self, store, registry):
        seen = []
        subscribers = SubscriberRegistry()
        subscribers.register_subscriber(EVENT_TYPE, seen.append, "audit")

        with store.atomic():
            persist_event(_build_event(), store, registry, subscribers)
            assert seen == []

        assert len(seen) == 1


class TestInMemoryEventStore:
    def test_generates_ledger_id(self):
        assert isinstance(InMemoryEventStore().ledger_id, uuid.UUID)

    def test_append_rejects_stale_head(self, store, registry):
        persist_event(_build_event(), store, registry)
        stale = _build_event()
        stale.update(sequence=1, previous_event_hash=GENESIS_HASH, event_hash="x")

        with pytest.raises(ChainConflictError):
            store.append(stale)

    def test_append_rejects_duplicate_id(self, store, registry):
        stored = persist_event(_build_event(), store, registry).event
        again = stored.to_dict()
        again.update(sequence=2, previous_event_hash=stored.event_hash)

        with pytest.raises(DuplicateEventError):
            store.append(again)

    def test_loaded_payloads_are_copies(self, store, registry):
        persist_event(_build_event(), store, registry)

        loaded = store.load_events()
        loaded[0].payload["provider_name"] = "Forged Clinic"

        assert store.load_events()[0].payload["provider_name"] == "City Clinic"

    def test_stored_events_frozen(self, store, registry):
        stored = persist_event(_build_event(), store, registry).event
        with pytest.raises(AttributeError):
            stored.event_hash = "0" * 64

    def test_contains(self, store, registry):
        event = _build_event()
        assert not store.contains(event["event_id"])
        persist_event(event, store, registry)
        assert store.contains(event["event_id"])

    def test_returned_payloads_are_copies(self, store, registry):
        stored = persist_event(_build_event(), store, registry).event
        stored.payload["provider_name"] = "Forged Clinic"
        store.head().payload["provider_address"] = "0xEVE"

        assert store.load_events()[0].payload == {
            "provider_address": "0xB0B",
            "provider_name": "City Clinic",
        }


class TestAtomicBlock:
    def test_on_commit_runs_immediately_outside_block(self, store):
        calls = []
        store.on_commit(lambda: calls.append("now"))
        assert calls == ["now"]

    def test_nested_blocks_commit_at_outermost_exit(self, store):
        calls = []
        with store.atomic():
            with store.atomic():
                store.on_commit(lambda: calls.append("inner"))
            assert calls == []
            store.on_commit(lambda: calls.append("outer"))

        assert calls == ["inner", "outer"]

    def test_error_discards_appends_and_callbacks(self, store, registry):
        persist_event(_build_event(), store, registry)
        calls = []
        later = _build_event(payload={"provider_address": "0xC4"})

        with pytest.raises(RuntimeError):
            with store.atomic():
                persist_event(later, store, registry)
                store.on_commit(lambda: calls.append("dispatched"))
                raise RuntimeError("projection refused event")

        assert calls == []
        assert store.count() == 1
        assert not store.contains(later["event_id"])
        assert persist_event(later, store, registry).event.sequence == 2
