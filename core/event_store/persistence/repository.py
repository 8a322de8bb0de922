"""
VaxLedger Event Store - Django Repository
=========================================
ORM-backed chain for one ledger.

Same contract as InMemoryEventStore. The chain head is re-read with
a row lock inside the append transaction, and the unique constraints
on (ledger_id, sequence) and (ledger_id, previous_event_hash) are the
last line of defence against concurrent appends.
"""

from __future__ import annotations

import uuid
from typing import Callable

from django.db import IntegrityError, transaction

from core.event_store.hashing.hasher import GENESIS_HASH
from core.event_store.models import LedgerEvent
from core.event_store.persistence.errors import (
    ChainConflictError,
    DuplicateEventError,
)
from core.event_store.persistence.memory import STORED_FIELDS


def _latest_event(ledger_id: uuid.UUID, *, lock: bool = False) -> LedgerEvent | None:
    query = LedgerEvent.objects.filter(ledger_id=ledger_id).order_by("-sequence")
    if lock:
        query = query.select_for_update()
    return query.first()


class DjangoEventStore:
    """
    Persistent chain stored in the vaxledger_event_store table.

    Usage:
        store = DjangoEventStore(ledger_id=LEDGER_ID)
        ledger = VaccinationLedgerService(authority_id="0xA", event_store=store)
    """

    def __init__(self, ledger_id: uuid.UUID):
        if not isinstance(ledger_id, uuid.UUID):
            raise ValueError("ledger_id must be UUID.")
        self._ledger_id = ledger_id

    @property
    def ledger_id(self) -> uuid.UUID:
        return self._ledger_id

    def contains(self, event_id: uuid.UUID) -> bool:
        return LedgerEvent.objects.filter(event_id=event_id).exists()

    def head(self) -> LedgerEvent | None:
        return _latest_event(self._ledger_id)

    def append(self, event_data: dict) -> LedgerEvent:
        try:
            with transaction.atomic():
                latest = _latest_event(self._ledger_id, lock=True)
                head_hash = latest.event_hash if latest else GENESIS_HASH
                expected_sequence = latest.sequence + 1 if latest else 1

                if (
                    event_data["previous_event_hash"] != head_hash
                    or event_data["sequence"] != expected_sequence
                ):
                    raise ChainConflictError(
                        self._ledger_id,
                        event_data["previous_event_hash"],
                        head_hash,
                    )

                if LedgerEvent.objects.filter(event_id=event_data["event_id"]).exists():
                    raise DuplicateEventError(event_data["event_id"])

                return LedgerEvent.objects.create(
                    **{name: event_data.get(name) for name in STORED_FIELDS}
                )
        except IntegrityError as exc:
            if "event_id" in str(exc) or "pkey" in str(exc):
                raise DuplicateEventError(event_data["event_id"]) from exc
            raise ChainConflictError(
                self._ledger_id,
                event_data["previous_event_hash"],
                self._current_head_hash(),
            ) from exc

    def _current_head_hash(self) -> str:
        latest = _latest_event(self._ledger_id)
        return latest.event_hash if latest else GENESIS_HASH

    def load_events(self) -> tuple[LedgerEvent, ...]:
        return tuple(
            LedgerEvent.objects.filter(ledger_id=self._ledger_id).order_by("sequence")
        )

    def count(self) -> int:
        return LedgerEvent.objects.filter(ledger_id=self._ledger_id).count()

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback)

    def atomic(self):
        return transaction.atomic()
