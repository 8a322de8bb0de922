"""
VaxLedger Vaccination Engine — Event Types and Payload Builders
=================================================================
Engine: Vaccination

Payloads are JSON-native (str/int/bool only, timestamps as ISO-8601
strings) so an event hashes identically before and after a round trip
through a JSON column.
"""

from __future__ import annotations

import uuid
from typing import Optional

from core.commands.base import Command


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

VACCINATION_LEDGER_INITIALIZED_V1 = "vaccination.ledger.initialized.v1"
VACCINATION_PROVIDER_REGISTERED_V1 = "vaccination.provider.registered.v1"
VACCINATION_PROVIDER_APPROVED_V1 = "vaccination.provider.approved.v1"
VACCINATION_RECORD_RECORDED_V1 = "vaccination.record.recorded.v1"
VACCINATION_RECORD_VERIFICATION_UPDATED_V1 = (
    "vaccination.record.verification_updated.v1"
)

VACCINATION_EVENT_TYPES = (
    VACCINATION_LEDGER_INITIALIZED_V1,
    VACCINATION_PROVIDER_REGISTERED_V1,
    VACCINATION_PROVIDER_APPROVED_V1,
    VACCINATION_RECORD_RECORDED_V1,
    VACCINATION_RECORD_VERIFICATION_UPDATED_V1,
)

EVENT_VERSION = 1


# ══════════════════════════════════════════════════════════════
# COMMAND → EVENT MAPPING
# ══════════════════════════════════════════════════════════════

COMMAND_TO_EVENT_TYPE = {
    "vaccination.ledger.initialize.request": VACCINATION_LEDGER_INITIALIZED_V1,
    "vaccination.provider.register.request": VACCINATION_PROVIDER_REGISTERED_V1,
    "vaccination.provider.approve.request": VACCINATION_PROVIDER_APPROVED_V1,
    "vaccination.record.create.request": VACCINATION_RECORD_RECORDED_V1,
    "vaccination.record.verification_update.request": (
        VACCINATION_RECORD_VERIFICATION_UPDATED_V1
    ),
}


def resolve_vaccination_event_type(command_type: str) -> str | None:
    return COMMAND_TO_EVENT_TYPE.get(command_type)


def register_vaccination_event_types(event_type_registry) -> None:
    for event_type in sorted(VACCINATION_EVENT_TYPES):
        event_type_registry.register(event_type)


# ══════════════════════════════════════════════════════════════
# EVENT ENVELOPE
# ══════════════════════════════════════════════════════════════

def build_event_data(
    *,
    command: Command,
    event_type: str,
    payload: dict,
    event_id: Optional[uuid.UUID] = None,
) -> dict:
    """
    Wrap a payload in an event envelope.

    Hash fields and sequence are left out; persist_event resolves them
    against the chain head.
    """
    return {
        "event_id": event_id or uuid.uuid4(),
        "event_type": event_type,
        "event_version": EVENT_VERSION,
        "ledger_id": command.ledger_id,
        "source_engine": command.source_engine,
        "actor_id": command.actor_id,
        "correlation_id": command.correlation_id,
        "causation_id": command.command_id,
        "payload": payload,
        "created_at": command.issued_at,
    }


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def _base_payload(command: Command) -> dict:
    return {
        "actor_id": command.actor_id,
        "command_id": str(command.command_id),
        "correlation_id": str(command.correlation_id),
    }


def build_ledger_initialized_payload(command: Command, state) -> dict:
    payload = _base_payload(command)
    payload.update({
        "ledger_id": str(command.ledger_id),
        "authority_id": command.actor_id,
        "initialized_at": command.issued_at.isoformat(),
    })
    return payload


def build_provider_registered_payload(command: Command, state) -> dict:
    payload = _base_payload(command)
    payload.update({
        "provider_address": command.actor_id,
        "provider_name": command.payload["provider_name"],
        "license_number": command.payload["license_number"],
        "registration_date": command.issued_at.isoformat(),
    })
    return payload


def build_provider_approved_payload(command: Command, state) -> dict:
    payload = _base_payload(command)
    payload.update({
        "provider_address": command.payload["provider_address"],
        "approved_by": command.actor_id,
        "approved_at": command.issued_at.isoformat(),
    })
    return payload


def build_vaccine_recorded_payload(command: Command, state) -> dict:
    """The record id is assigned here, from the state's counter."""
    timestamp = command.issued_at.isoformat()
    payload = _base_payload(command)
    payload.update({
        "record_id": state.next_record_id,
        "patient_address": command.payload["patient_address"],
        "patient_name": command.payload["patient_name"],
        "vaccine_name": command.payload["vaccine_name"],
        "manufacturer": command.payload["manufacturer"],
        "batch_number": command.payload["batch_number"],
        "location": command.payload["location"],
        "healthcare_provider": command.actor_id,
        "vaccination_date": timestamp,
        "timestamp": timestamp,
    })
    return payload


def build_record_verification_updated_payload(command: Command, state) -> dict:
    payload = _base_payload(command)
    payload.update({
        "record_id": command.payload["record_id"],
        "updated_by": command.actor_id,
        "is_verified": command.payload["status"],
        "timestamp": command.issued_at.isoformat(),
    })
    return payload
