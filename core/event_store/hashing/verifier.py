"""
VaxLedger Event Store — Hash-Chain Verifier
=============================================
Walks a full event sequence and proves it is untampered.

For every event, in sequence order:
1. sequence is exactly previous sequence + 1 (first is 1)
2. previous_event_hash equals the prior event's event_hash
   (GENESIS_HASH for the first event)
3. event_hash equals the recomputed digest of the stored payload

The first failing event is reported. Nothing is corrected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from core.event_store.hashing.errors import HashRejectionCode
from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash


@dataclass(frozen=True)
class ChainVerificationResult:
    """Outcome of a full-chain walk."""

    valid: bool
    events_checked: int
    head_hash: str
    failure_code: Optional[str] = None
    failed_event_id: Optional[Any] = None
    failed_sequence: Optional[int] = None
    detail: Optional[str] = None


def verify_event_chain(events: Iterable[Any]) -> ChainVerificationResult:
    """
    Verify linkage and digests of stored events.

    Args:
        events: Stored events (objects exposing event_id, sequence,
                payload, previous_event_hash, event_hash), in
                sequence order.
    """
    expected_previous = GENESIS_HASH
    expected_sequence = 1
    checked = 0

    for event in events:
        if event.sequence != expected_sequence:
            return ChainVerificationResult(
                valid=False,
                events_checked=checked,
                head_hash=expected_previous,
                failure_code=HashRejectionCode.SEQUENCE_GAP,
                failed_event_id=event.event_id,
                failed_sequence=event.sequence,
                detail=(
                    f"Expected sequence {expected_sequence}, "
                    f"found {event.sequence}."
                ),
            )

        if event.previous_event_hash != expected_previous:
            return ChainVerificationResult(
                valid=False,
                events_checked=checked,
                head_hash=expected_previous,
                failure_code=HashRejectionCode.HASH_CHAIN_BROKEN,
                failed_event_id=event.event_id,
                failed_sequence=event.sequence,
                detail=(
                    f"previous_event_hash '{event.previous_event_hash}' "
                    f"does not link to '{expected_previous}'."
                ),
            )

        recomputed = compute_event_hash(event.payload, event.previous_event_hash)
        if event.event_hash != recomputed:
            return ChainVerificationResult(
                valid=False,
                events_checked=checked,
                head_hash=expected_previous,
                failure_code=HashRejectionCode.HASH_COMPUTATION_MISMATCH,
                failed_event_id=event.event_id,
                failed_sequence=event.sequence,
                detail=(
                    f"Stored hash '{event.event_hash}' != "
                    f"recomputed hash '{recomputed}'."
                ),
            )

        expected_previous = event.event_hash
        expected_sequence += 1
        checked += 1

    return ChainVerificationResult(
        valid=True,
        events_checked=checked,
        head_hash=expected_previous,
    )
