"""
VaxLedger Event Store — Event Validator
=========================================
Structural law for events before they touch a store.

This validator:
- Checks mandatory envelope fields
- Checks the actor identity is present
- Checks the event targets the store's ledger
- Enforces the event type registry
- Checks the payload is a dict

It does NOT interpret payloads, compute hashes or write anything.
Pure function: data in → ValidationResult out.
"""

from typing import Any

from core.event_store.validators.errors import (
    Rejection,
    RejectionCode,
    ValidationResult,
    ViolatedRule,
)
from core.event_store.validators.registry import EventTypeRegistry


MANDATORY_FIELDS = (
    "event_id",
    "event_type",
    "event_version",
    "ledger_id",
    "source_engine",
    "actor_id",
    "correlation_id",
    "payload",
    "created_at",
)


def _validate_schema_presence(event_data: dict[str, Any]) -> Rejection | None:
    for field in MANDATORY_FIELDS:
        if field not in event_data or event_data[field] is None:
            return Rejection(
                code=RejectionCode.MISSING_FIELD,
                message=f"Mandatory field '{field}' is missing or None.",
                violated_rule=ViolatedRule.SCHEMA_PRESENCE,
            )
    return None


def _validate_actor(event_data: dict[str, Any]) -> Rejection | None:
    actor_id = event_data.get("actor_id", "")
    if not isinstance(actor_id, str) or not actor_id.strip():
        return Rejection(
            code=RejectionCode.EMPTY_ACTOR_ID,
            message="actor_id must be a non-empty string.",
            violated_rule=ViolatedRule.ACTOR_VALIDITY,
        )
    return None


def _validate_ledger_scope(
    event_data: dict[str, Any],
    ledger_id,
) -> Rejection | None:
    if event_data.get("ledger_id") != ledger_id:
        return Rejection(
            code=RejectionCode.LEDGER_ID_MISMATCH,
            message=(
                f"Event ledger_id ({event_data.get('ledger_id')}) does not "
                f"match store ledger_id ({ledger_id})."
            ),
            violated_rule=ViolatedRule.LEDGER_SCOPE,
        )
    return None


def _validate_event_type(
    event_data: dict[str, Any],
    registry: EventTypeRegistry,
) -> Rejection | None:
    event_type = event_data.get("event_type", "")
    if not registry.is_registered(event_type):
        return Rejection(
            code=RejectionCode.EVENT_TYPE_UNKNOWN,
            message=(
                f"Event type '{event_type}' is not registered. "
                f"Free-text event types are forbidden."
            ),
            violated_rule=ViolatedRule.EVENT_TYPE_REGISTRY,
        )
    return None


def _validate_payload(event_data: dict[str, Any]) -> Rejection | None:
    if not isinstance(event_data.get("payload"), dict):
        return Rejection(
            code=RejectionCode.INVALID_PAYLOAD,
            message="payload must be a dict.",
            violated_rule=ViolatedRule.SCHEMA_PRESENCE,
        )
    return None


def validate_event(
    event_data: dict[str, Any],
    registry: EventTypeRegistry,
    ledger_id,
) -> ValidationResult:
    """
    Validate an event envelope. Stops at the first rejection.

    Args:
        event_data: Raw envelope dict (before hash fields are resolved).
        registry:   Event type registry.
        ledger_id:  Ledger the target store is scoped to.
    """
    checks = (
        lambda: _validate_schema_presence(event_data),
        lambda: _validate_actor(event_data),
        lambda: _validate_ledger_scope(event_data, ledger_id),
        lambda: _validate_event_type(event_data, registry),
        lambda: _validate_payload(event_data),
    )
    for check in checks:
        rejection = check()
        if rejection:
            return ValidationResult(accepted=False, rejection=rejection)

    return ValidationResult(accepted=True)
