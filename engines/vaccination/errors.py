"""
VaxLedger Vaccination Engine — Errors
=======================================
Typed failures surfaced to ledger callers.

Rejected commands come back from the bus as a RejectionReason; the
service turns the reason code into one of these exceptions. Every
one of them means "nothing was changed".
"""

from __future__ import annotations

from typing import NoReturn, Optional

from core.commands.rejection import ReasonCode, RejectionReason


class LedgerError(Exception):
    """Base class for every rejected ledger operation."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, *, policy_name: Optional[str] = None):
        self.message = message
        self.policy_name = policy_name
        super().__init__(f"[{self.code}] {message}")


class InvalidInput(LedgerError, ValueError):
    """Empty required field or null patient address."""

    code = ReasonCode.INVALID_INPUT


class Unauthorized(LedgerError):
    """Caller is not the authority, or not an approved provider."""

    code = ReasonCode.UNAUTHORIZED


class AlreadyRegistered(LedgerError):
    """Caller already has a provider profile."""

    code = ReasonCode.ALREADY_REGISTERED


class NotFound(LedgerError, LookupError):
    """Unknown provider or record id outside [1, total records]."""

    code = ReasonCode.NOT_FOUND


class NotVerified(LedgerError):
    """Record exists but its verification flag is false."""

    code = ReasonCode.NOT_VERIFIED


class LedgerStateError(LedgerError):
    """Ledger initialization or replayed history is inconsistent."""

    code = "LEDGER_STATE"


ERROR_BY_CODE = {
    ReasonCode.INVALID_INPUT: InvalidInput,
    ReasonCode.UNAUTHORIZED: Unauthorized,
    ReasonCode.ALREADY_REGISTERED: AlreadyRegistered,
    ReasonCode.NOT_FOUND: NotFound,
    ReasonCode.NOT_VERIFIED: NotVerified,
    ReasonCode.INVALID_COMMAND_STRUCTURE: InvalidInput,
    ReasonCode.INVALID_COMMAND_TYPE: InvalidInput,
    ReasonCode.INVALID_NAMESPACE: InvalidInput,
    ReasonCode.INVALID_CONTEXT: LedgerStateError,
    ReasonCode.LEDGER_ID_MISMATCH: LedgerStateError,
    LedgerStateError.code: LedgerStateError,
}


def raise_for_rejection(reason: RejectionReason) -> NoReturn:
    """Raise the exception that matches a rejection code."""
    error_class = ERROR_BY_CODE.get(reason.code, LedgerError)
    raise error_class(reason.message, policy_name=reason.policy_name)
