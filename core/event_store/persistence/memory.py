"""
VaxLedger Event Store - In-Memory Store
=======================================
Append-only, hash-chained event list for one ledger.

Default store for embedded use and tests. Stored events are frozen;
payloads are deep-copied on the way in and on the way out so no caller can
reach into the chain and edit history.
"""

from __future__ import annotations

import copy
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Iterator, Optional

from core.event_store.hashing.hasher import GENESIS_HASH
from core.event_store.persistence.errors import (
    ChainConflictError,
    DuplicateEventError,
)


@dataclass(frozen=True)
class StoredEvent:
    """One persisted ledger event."""

    event_id: uuid.UUID
    event_type: str
    event_version: int
    ledger_id: uuid.UUID
    sequence: int
    source_engine: str
    actor_id: str
    correlation_id: uuid.UUID
    causation_id: Optional[uuid.UUID]
    payload: dict
    created_at: datetime
    previous_event_hash: str
    event_hash: str

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "event_version": self.event_version,
            "ledger_id": self.ledger_id,
            "sequence": self.sequence,
            "source_engine": self.source_engine,
            "actor_id": self.actor_id,
            "correlation_id": self.correlation_id,
            "causation_id": self.causation_id,
            "payload": copy.deepcopy(self.payload),
            "created_at": self.created_at,
            "previous_event_hash": self.previous_event_hash,
            "event_hash": self.event_hash,
        }


STORED_FIELDS = (
    "event_id",
    "event_type",
    "event_version",
    "ledger_id",
    "sequence",
    "source_engine",
    "actor_id",
    "correlation_id",
    "causation_id",
    "payload",
    "created_at",
    "previous_event_hash",
    "event_hash",
)


class InMemoryEventStore:
    """
    Thread-safe in-memory chain.

    Usage:
        store = InMemoryEventStore(ledger_id=uuid.uuid4())
        result = persist_event(event_data, store, registry)
        store.load_events()   # tuple of StoredEvent, sequence order
    """

    def __init__(self, ledger_id: uuid.UUID | None = None):
        self._ledger_id = ledger_id or uuid.uuid4()
        self._events: list[StoredEvent] = []
        self._event_ids: set[uuid.UUID] = set()
        self._lock = threading.Lock()
        self._depth = 0
        self._pending: list[Callable[[], None]] = []

    @property
    def ledger_id(self) -> uuid.UUID:
        return self._ledger_id

    def contains(self, event_id: uuid.UUID) -> bool:
        with self._lock:
            return event_id in self._event_ids

    def head(self) -> StoredEvent | None:
        with self._lock:
            return _detached(self._events[-1]) if self._events else None

    def append(self, event_data: dict) -> StoredEvent:
        """
        Append one fully resolved event (sequence + hashes set).

        Re-checks the chain head under the lock. The returned event is
        a copy; editing its payload never reaches the chain.
        """
        with self._lock:
            head_hash = self._events[-1].event_hash if self._events else GENESIS_HASH
            expected_sequence = len(self._events) + 1

            if event_data["event_id"] in self._event_ids:
                raise DuplicateEventError(event_data["event_id"])

            if (
                event_data["previous_event_hash"] != head_hash
                or event_data["sequence"] != expected_sequence
            ):
                raise ChainConflictError(
                    self._ledger_id,
                    event_data["previous_event_hash"],
                    head_hash,
                )

            stored = StoredEvent(
                **{
                    name: copy.deepcopy(event_data.get(name))
                    for name in STORED_FIELDS
                }
            )
            self._events.append(stored)
            self._event_ids.add(stored.event_id)
            return _detached(stored)

    def load_events(self) -> tuple[StoredEvent, ...]:
        with self._lock:
            return tuple(_detached(event) for event in self._events)

    def count(self) -> int:
        with self._lock:
            return len(self._events)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Group appends the way transaction.atomic() does for Django.

        Appends made inside the block are removed again if it raises.
        on_commit callbacks registered inside it run once the outermost
        block exits cleanly. Assumes a single writer at a time.
        """
        with self._lock:
            self._depth += 1
            mark = len(self._events)
            pending_mark = len(self._pending)

        try:
            yield
        except Exception:
            with self._lock:
                for event in self._events[mark:]:
                    self._event_ids.discard(event.event_id)
                del self._events[mark:]
                del self._pending[pending_mark:]
                self._depth -= 1
            raise

        with self._lock:
            self._depth -= 1
            if self._depth:
                return
            callbacks, self._pending = self._pending, []

        for callback in callbacks:
            callback()

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run now, or when the enclosing atomic() block commits."""
        with self._lock:
            if self._depth:
                self._pending.append(callback)
                return
        callback()


def _detached(event: StoredEvent) -> StoredEvent:
    return replace(event, payload=copy.deepcopy(event.payload))
