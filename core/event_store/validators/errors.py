"""
VaxLedger Event Store — Validation Errors & Results
=====================================================
Every refused event is refused with an explicit, auditable reason.
"""

from dataclasses import dataclass
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# REJECTION CODES
# ══════════════════════════════════════════════════════════════

class RejectionCode:
    """Rejection codes for event validation."""

    MISSING_FIELD = "MISSING_FIELD"
    EMPTY_ACTOR_ID = "EMPTY_ACTOR_ID"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    LEDGER_ID_MISMATCH = "LEDGER_ID_MISMATCH"
    EVENT_TYPE_UNKNOWN = "EVENT_TYPE_UNKNOWN"
    DUPLICATE_EVENT_ID = "DUPLICATE_EVENT_ID"


class ViolatedRule:
    """Which rule of the event store was broken."""

    SCHEMA_PRESENCE = "SCHEMA_PRESENCE"
    ACTOR_VALIDITY = "ACTOR_VALIDITY"
    LEDGER_SCOPE = "LEDGER_SCOPE"
    EVENT_TYPE_REGISTRY = "EVENT_TYPE_REGISTRY"
    EVENT_IDEMPOTENCY = "EVENT_IDEMPOTENCY"


# ══════════════════════════════════════════════════════════════
# REJECTION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Rejection:
    """One explicit reason for refusing an event."""

    code: str
    message: str
    violated_rule: str


# ══════════════════════════════════════════════════════════════
# VALIDATION RESULT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validation or persistence.

    accepted=True  → event passed (and, from persist_event, was stored;
                     the stored event is attached as `event`)
    accepted=False → event refused with explicit rejection
    """

    accepted: bool
    rejection: Optional[Rejection] = None
    event: Any = None
