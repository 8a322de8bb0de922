"""
VaxLedger Event Store persistence public API.

DjangoEventStore lives in core.event_store.persistence.repository and
is imported explicitly so the in-memory path never needs Django.
"""

from core.event_store.persistence.errors import (
    ChainConflictError,
    DuplicateEventError,
    EventPersistenceError,
    EventStoreError,
)
from core.event_store.persistence.memory import InMemoryEventStore, StoredEvent
from core.event_store.persistence.service import EventStoreProtocol, persist_event

__all__ = [
    "persist_event",
    "EventStoreProtocol",
    "InMemoryEventStore",
    "StoredEvent",
    "EventStoreError",
    "ChainConflictError",
    "DuplicateEventError",
    "EventPersistenceError",
]
