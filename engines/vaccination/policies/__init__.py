"""
VaxLedger Vaccination Engine — Policies
=========================================
Role and precondition checks for ledger commands.

Every policy has the dispatcher signature
    (command, state) → Optional[RejectionReason]
and ignores command types it does not govern. The dispatcher runs
them in VACCINATION_POLICIES order and the first rejection wins, so
role checks sit ahead of input checks.
"""

from __future__ import annotations

from typing import Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason
from core.context.actor_context import is_null_identity
from engines.vaccination.commands import (
    VACCINATION_LEDGER_INITIALIZE_REQUEST,
    VACCINATION_PROVIDER_APPROVE_REQUEST,
    VACCINATION_PROVIDER_REGISTER_REQUEST,
    VACCINATION_RECORD_CREATE_REQUEST,
    VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST,
)
from engines.vaccination.errors import LedgerStateError


AUTHORITY_COMMANDS = frozenset({
    VACCINATION_PROVIDER_APPROVE_REQUEST,
    VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST,
})

REQUIRED_FIELDS = {
    VACCINATION_PROVIDER_REGISTER_REQUEST: ("provider_name", "license_number"),
    VACCINATION_RECORD_CREATE_REQUEST: (
        "patient_name", "vaccine_name", "batch_number",
    ),
}


def ledger_initialization_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    """Genesis exactly once, and nothing before it."""
    if command.command_type == VACCINATION_LEDGER_INITIALIZE_REQUEST:
        if state.is_initialized:
            return RejectionReason(
                code=LedgerStateError.code,
                message=f"Ledger already has authority {state.authority}.",
                policy_name="ledger_initialization_policy",
            )
        return None

    if not state.is_initialized:
        return RejectionReason(
            code=LedgerStateError.code,
            message="Ledger has no authority; it was never initialized.",
            policy_name="ledger_initialization_policy",
        )
    return None


def authority_only_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    if command.command_type not in AUTHORITY_COMMANDS:
        return None

    if not state.is_authority(command.actor_id):
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=f"Caller {command.actor_id} is not the ledger authority.",
            policy_name="authority_only_policy",
        )
    return None


def approved_provider_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    """Only approved providers may create records."""
    if command.command_type != VACCINATION_RECORD_CREATE_REQUEST:
        return None

    provider = state.get_provider(command.actor_id)
    if provider is None:
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=f"Caller {command.actor_id} is not a registered provider.",
            policy_name="approved_provider_policy",
        )
    if not provider.is_approved:
        return RejectionReason(
            code=ReasonCode.UNAUTHORIZED,
            message=f"Provider {command.actor_id} is not approved.",
            policy_name="approved_provider_policy",
        )
    return None


def required_fields_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    fields = REQUIRED_FIELDS.get(command.command_type)
    if fields is None:
        return None

    for field in fields:
        if not command.payload.get(field):
            return RejectionReason(
                code=ReasonCode.INVALID_INPUT,
                message=f"{field} must be non-empty.",
                policy_name="required_fields_policy",
            )
    return None


def patient_address_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    if command.command_type != VACCINATION_RECORD_CREATE_REQUEST:
        return None

    if is_null_identity(command.payload.get("patient_address")):
        return RejectionReason(
            code=ReasonCode.INVALID_INPUT,
            message="patient_address must not be the null identity.",
            policy_name="patient_address_policy",
        )
    return None


def provider_not_registered_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    if command.command_type != VACCINATION_PROVIDER_REGISTER_REQUEST:
        return None

    if state.get_provider(command.actor_id) is not None:
        return RejectionReason(
            code=ReasonCode.ALREADY_REGISTERED,
            message=f"Provider {command.actor_id} is already registered.",
            policy_name="provider_not_registered_policy",
        )
    return None


def provider_exists_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    if command.command_type != VACCINATION_PROVIDER_APPROVE_REQUEST:
        return None

    address = command.payload.get("provider_address")
    if state.get_provider(address) is None:
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=f"Provider {address} is not registered.",
            policy_name="provider_exists_policy",
        )
    return None


def record_exists_policy(
    command: Command,
    state,
) -> Optional[RejectionReason]:
    if command.command_type != VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST:
        return None

    record_id = command.payload.get("record_id")
    if not state.record_exists(record_id):
        return RejectionReason(
            code=ReasonCode.NOT_FOUND,
            message=(
                f"Record {record_id} does not exist "
                f"(total records: {state.record_counter})."
            ),
            policy_name="record_exists_policy",
        )
    return None


VACCINATION_POLICIES = (
    ledger_initialization_policy,
    authority_only_policy,
    approved_provider_policy,
    patient_address_policy,
    required_fields_policy,
    provider_not_registered_policy,
    provider_exists_policy,
    record_exists_policy,
)
