"""
VaxLedger Replay — Event Replayer
===================================
Rebuilds a state projection from a stored chain.

Replay doctrine:
- Read events only, never write (ReplayContext blocks persistence)
- Verify the whole chain before applying anything
- Apply in sequence order through the projection's apply()
- A tampered chain is refused, never partially applied
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Protocol

from core.event_store.hashing.errors import HashRejectionCode
from core.event_store.hashing.hasher import compute_event_hash
from core.event_store.hashing.verifier import (
    ChainVerificationResult,
    verify_event_chain,
)
from core.replay.context import ReplayContext
from core.replay.errors import ReplayChainBrokenError, ReplayIntegrityError

logger = logging.getLogger("vaxledger.replay")


class ProjectionProtocol(Protocol):
    def apply(self, event_type: str, payload: dict) -> None:
        ...


@dataclass(frozen=True)
class ReplayResult:
    """Structured result of a replay run."""

    events_processed: int
    head_hash: str
    chain_verified: bool = True


def verify_chain_before_replay(
    events: tuple,
    ledger_id: Any = None,
) -> ChainVerificationResult:
    """
    Full hash recomputation over the chain.

    Raises:
        ReplayIntegrityError:   a stored hash does not match its payload.
        ReplayChainBrokenError: linkage or sequence is broken.
    """
    verification = verify_event_chain(events)
    if verification.valid:
        return verification

    if verification.failure_code == HashRejectionCode.HASH_COMPUTATION_MISMATCH:
        failed = next(e for e in events if e.event_id == verification.failed_event_id)
        raise ReplayIntegrityError(
            failed.event_id,
            failed.event_hash,
            compute_event_hash(failed.payload, failed.previous_event_hash),
        )

    raise ReplayChainBrokenError(ledger_id, verification.detail)


def replay_events(
    events: Iterable[Any],
    projection: ProjectionProtocol,
    *,
    ledger_id: Any = None,
) -> ReplayResult:
    """
    Verify then apply every event to `projection`.

    Args:
        events:     Stored events in sequence order.
        projection: Object with apply(event_type, payload).
        ledger_id:  For error reporting only.
    """
    ordered = tuple(events)
    verification = verify_chain_before_replay(ordered, ledger_id)

    with ReplayContext():
        for event in ordered:
            projection.apply(event.event_type, event.payload)

    logger.info(
        f"Replay complete for ledger {ledger_id}: "
        f"{verification.events_checked} events applied"
    )
    return ReplayResult(
        events_processed=verification.events_checked,
        head_hash=verification.head_hash,
    )
