"""
VaxLedger Vaccination Engine — Request Commands
=================================================
Typed ledger requests that convert into canonical Command objects.

Requests only check argument types. Content rules (empty fields,
null patient) are policies, so they are evaluated after the caller's
role has been checked.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from core.commands.base import Command
from engines.vaccination.errors import InvalidInput


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

VACCINATION_LEDGER_INITIALIZE_REQUEST = "vaccination.ledger.initialize.request"
VACCINATION_PROVIDER_REGISTER_REQUEST = "vaccination.provider.register.request"
VACCINATION_PROVIDER_APPROVE_REQUEST = "vaccination.provider.approve.request"
VACCINATION_RECORD_CREATE_REQUEST = "vaccination.record.create.request"
VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST = (
    "vaccination.record.verification_update.request"
)

VACCINATION_COMMAND_TYPES = frozenset({
    VACCINATION_LEDGER_INITIALIZE_REQUEST,
    VACCINATION_PROVIDER_REGISTER_REQUEST,
    VACCINATION_PROVIDER_APPROVE_REQUEST,
    VACCINATION_RECORD_CREATE_REQUEST,
    VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST,
})

SOURCE_ENGINE = "vaccination"


def _require_str(name: str, value) -> None:
    if not isinstance(value, str):
        raise InvalidInput(
            f"{name} must be a string, got {type(value).__name__}."
        )


def _command(
    command_type: str,
    payload: dict,
    *,
    ledger_id: uuid.UUID,
    actor_id: str,
    command_id: uuid.UUID,
    correlation_id: uuid.UUID,
    issued_at: datetime,
) -> Command:
    return Command(
        command_id=command_id,
        command_type=command_type,
        ledger_id=ledger_id,
        actor_id=actor_id,
        payload=payload,
        issued_at=issued_at,
        correlation_id=correlation_id,
        source_engine=SOURCE_ENGINE,
    )


# ══════════════════════════════════════════════════════════════
# REQUEST COMMANDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerInitializeRequest:
    """Genesis request. The issuing actor becomes the ledger authority."""

    def to_command(self, **kwargs) -> Command:
        return _command(VACCINATION_LEDGER_INITIALIZE_REQUEST, {}, **kwargs)


@dataclass(frozen=True)
class ProviderRegisterRequest:
    """Self-registration of the calling identity as a provider."""
    provider_name: str
    license_number: str

    def __post_init__(self):
        _require_str("provider_name", self.provider_name)
        _require_str("license_number", self.license_number)

    def to_command(self, **kwargs) -> Command:
        return _command(
            VACCINATION_PROVIDER_REGISTER_REQUEST,
            {
                "provider_name": self.provider_name,
                "license_number": self.license_number,
            },
            **kwargs,
        )


@dataclass(frozen=True)
class ProviderApproveRequest:
    """Authority approval of a registered provider."""
    provider_address: str

    def __post_init__(self):
        _require_str("provider_address", self.provider_address)

    def to_command(self, **kwargs) -> Command:
        return _command(
            VACCINATION_PROVIDER_APPROVE_REQUEST,
            {"provider_address": self.provider_address},
            **kwargs,
        )


@dataclass(frozen=True)
class RecordCreateRequest:
    """A vaccination administered by the calling provider."""
    patient_address: str
    patient_name: str
    vaccine_name: str
    manufacturer: str
    batch_number: str
    location: str

    def __post_init__(self):
        # patient_address may be None; the null-patient policy rejects it.
        if self.patient_address is not None:
            _require_str("patient_address", self.patient_address)
        _require_str("patient_name", self.patient_name)
        _require_str("vaccine_name", self.vaccine_name)
        _require_str("manufacturer", self.manufacturer)
        _require_str("batch_number", self.batch_number)
        _require_str("location", self.location)

    def to_command(self, **kwargs) -> Command:
        return _command(
            VACCINATION_RECORD_CREATE_REQUEST,
            {
                "patient_address": self.patient_address,
                "patient_name": self.patient_name,
                "vaccine_name": self.vaccine_name,
                "manufacturer": self.manufacturer,
                "batch_number": self.batch_number,
                "location": self.location,
            },
            **kwargs,
        )


@dataclass(frozen=True)
class RecordVerificationUpdateRequest:
    """Authority override of one record's verification flag."""
    record_id: int
    status: bool

    def __post_init__(self):
        if isinstance(self.record_id, bool) or not isinstance(self.record_id, int):
            raise InvalidInput("record_id must be an integer.")
        if not isinstance(self.status, bool):
            raise InvalidInput("status must be a bool.")

    def to_command(self, **kwargs) -> Command:
        return _command(
            VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST,
            {"record_id": self.record_id, "status": self.status},
            **kwargs,
        )


__all__ = [
    # ── Command Types ─────────────────────────────────────────
    "VACCINATION_LEDGER_INITIALIZE_REQUEST",
    "VACCINATION_PROVIDER_REGISTER_REQUEST",
    "VACCINATION_PROVIDER_APPROVE_REQUEST",
    "VACCINATION_RECORD_CREATE_REQUEST",
    "VACCINATION_RECORD_VERIFICATION_UPDATE_REQUEST",
    "VACCINATION_COMMAND_TYPES",
    "SOURCE_ENGINE",
    # ── Requests ──────────────────────────────────────────────
    "LedgerInitializeRequest",
    "ProviderRegisterRequest",
    "ProviderApproveRequest",
    "RecordCreateRequest",
    "RecordVerificationUpdateRequest",
]
