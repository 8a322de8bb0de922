"""
VaxLedger Event Store — Persistence Service
=============================================
The single controlled write path for ledger events:

    persist_event(event_data, store, registry, subscriber_registry)

Write flow:
    1. Refuse while replay is active
    2. Validate envelope structure and event type
    3. Reject a duplicate event_id
    4. Resolve sequence + hash fields against the chain head
    5. Append (store re-checks the head atomically)
    6. Dispatch to subscribers after commit (deferred while the
       caller holds store.atomic() open)
    7. Return accepted (with the stored event) or an explicit rejection

If any step fails the chain is untouched.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, ContextManager, Optional, Protocol

from core.event_store.hashing.errors import (
    HashRejectionCode,
    HashViolatedRule,
)
from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.event_store.persistence.errors import (
    ChainConflictError,
    DuplicateEventError,
    EventStoreError,
    PersistenceRejectionCode,
    PersistenceViolatedRule,
)
from core.event_store.validators.errors import (
    Rejection,
    RejectionCode,
    ValidationResult,
    ViolatedRule,
)
from core.event_store.validators.event_validator import validate_event
from core.event_store.validators.registry import EventTypeRegistry
from core.replay.context import is_replay_active
from core.replay.errors import ReplayIsolationError

logger = logging.getLogger("vaxledger.event_store")


# ══════════════════════════════════════════════════════════════
# STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class EventStoreProtocol(Protocol):
    """Contract shared by InMemoryEventStore and DjangoEventStore."""

    @property
    def ledger_id(self) -> uuid.UUID:
        ...

    def contains(self, event_id: uuid.UUID) -> bool:
        ...

    def head(self) -> Any:
        ...

    def append(self, event_data: dict) -> Any:
        ...

    def load_events(self) -> tuple:
        ...

    def count(self) -> int:
        ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        ...

    def atomic(self) -> ContextManager[Any]:
        ...


# ══════════════════════════════════════════════════════════════
# REJECTION BUILDERS
# ══════════════════════════════════════════════════════════════

def _duplicate_rejection(event_id) -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=RejectionCode.DUPLICATE_EVENT_ID,
            message=f"Event with ID {event_id} already exists.",
            violated_rule=ViolatedRule.EVENT_IDEMPOTENCY,
        ),
    )


def _chain_broken_rejection(provided: str, expected: str) -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=HashRejectionCode.HASH_CHAIN_BROKEN,
            message=(
                "Previous event hash does not match the chain head. "
                f"Provided: '{provided}', expected: '{expected}'."
            ),
            violated_rule=HashViolatedRule.EVENT_HASH_CHAIN,
        ),
    )


def _hash_mismatch_rejection(provided: str, expected: str) -> ValidationResult:
    return ValidationResult(
        accepted=False,
        rejection=Rejection(
            code=HashRejectionCode.HASH_COMPUTATION_MISMATCH,
            message=(
                "Provided event_hash does not match computed hash. "
                f"Provided: '{provided}', computed: '{expected}'."
            ),
            violated_rule=HashViolatedRule.EVENT_HASH_CHAIN,
        ),
    )


# ══════════════════════════════════════════════════════════════
# HASH RESOLUTION
# ══════════════════════════════════════════════════════════════

def _resolve_hash_fields(
    record: dict[str, Any],
    store: EventStoreProtocol,
) -> ValidationResult | None:
    """
    Fill sequence/previous_event_hash/event_hash from the chain head.

    Caller-supplied hash fields are checked, never overwritten.
    """
    head = store.head()
    expected_previous = head.event_hash if head is not None else GENESIS_HASH
    record["sequence"] = head.sequence + 1 if head is not None else 1

    provided_previous = record.get("previous_event_hash")
    if provided_previous is None:
        record["previous_event_hash"] = expected_previous
    elif provided_previous != expected_previous:
        return _chain_broken_rejection(str(provided_previous), expected_previous)

    expected_hash = compute_event_hash(
        record["payload"],
        record["previous_event_hash"],
    )
    provided_hash = record.get("event_hash")
    if provided_hash is None:
        record["event_hash"] = expected_hash
    elif provided_hash != expected_hash:
        return _hash_mismatch_rejection(str(provided_hash), expected_hash)

    return None


# ══════════════════════════════════════════════════════════════
# PERSIST
# ══════════════════════════════════════════════════════════════

def persist_event(
    event_data: dict[str, Any],
    store: EventStoreProtocol,
    registry: EventTypeRegistry,
    subscriber_registry: Optional["SubscriberRegistry"] = None,
) -> ValidationResult:
    """
    The ONE lawful entry point for appending to a ledger chain.

    Args:
        event_data:          Envelope dict. Hash fields optional.
        store:               Target chain.
        registry:            Permitted event types.
        subscriber_registry: Optional bus registry for post-commit dispatch.

    Returns:
        ValidationResult — accepted=True with `event` set to the stored
        event, or accepted=False with an explicit Rejection.

    Raises:
        ReplayIsolationError: if called while replay is active.
    """

    # ── Step 1: Replay isolation guard ────────────────────────
    if is_replay_active():
        raise ReplayIsolationError("Persistence forbidden during replay mode.")

    record = dict(event_data)

    # ── Step 2: Envelope validation ───────────────────────────
    validation_result = validate_event(record, registry, store.ledger_id)
    if not validation_result.accepted:
        return validation_result

    # ── Step 3: Idempotency ───────────────────────────────────
    if store.contains(record["event_id"]):
        return _duplicate_rejection(record["event_id"])

    # ── Step 4: Hash-chain resolution ─────────────────────────
    hash_rejection = _resolve_hash_fields(record, store)
    if hash_rejection is not None:
        return hash_rejection

    # ── Step 5: Append ────────────────────────────────────────
    try:
        stored = store.append(record)
    except ChainConflictError as exc:
        return _chain_broken_rejection(
            exc.provided_previous_hash,
            exc.actual_head_hash,
        )
    except DuplicateEventError as exc:
        return _duplicate_rejection(exc.event_id)
    except EventStoreError as exc:
        logger.error(f"Append aborted for event {record['event_id']}: {exc}")
        return ValidationResult(
            accepted=False,
            rejection=Rejection(
                code=PersistenceRejectionCode.TRANSACTION_ABORTED,
                message=f"Transaction aborted: {exc}",
                violated_rule=PersistenceViolatedRule.ATOMIC_PERSISTENCE,
            ),
        )

    logger.debug(
        f"Event persisted: {stored.event_type} #{stored.sequence} "
        f"({stored.event_id})"
    )

    # ── Step 6: Dispatch after commit ─────────────────────────
    if subscriber_registry is not None:
        store.on_commit(
            lambda: _dispatch_after_commit(stored, subscriber_registry)
        )

    return ValidationResult(accepted=True, event=stored)


def _dispatch_after_commit(event, subscriber_registry) -> None:
    """
    Dispatch a committed event. A failing bus must never affect the
    event that is already in the chain.
    """
    from core.events.dispatcher import dispatch

    try:
        dispatch(event, subscriber_registry)
    except Exception as exc:
        logger.error(
            f"Post-commit dispatch failed for event "
            f"{event.event_id}: {exc}",
            exc_info=True,
        )
