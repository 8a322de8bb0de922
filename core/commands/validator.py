"""
VaxLedger Command Layer — Command Validator
=============================================
Structural checks that run before any policy.

This validator does NOT:
- Evaluate roles or ledger preconditions (policies do that)
- Emit events
- Mutate state

It only checks:
- The object is a Command
- The context is usable and targets the same ledger
- command_type format and namespace
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.commands.base import Command
from core.commands.rejection import ReasonCode


# ══════════════════════════════════════════════════════════════
# LEDGER CONTEXT PROTOCOL (dependency injection)
# ══════════════════════════════════════════════════════════════

@runtime_checkable
class CommandContextProtocol(Protocol):
    """Context interface required by command validation."""

    def get_ledger_id(self):
        """Return the ledger_id (UUID) this context represents."""
        ...


# ══════════════════════════════════════════════════════════════
# VALIDATION ERRORS
# ══════════════════════════════════════════════════════════════

class CommandValidationError(Exception):
    """Structured validation failure for commands."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


# ══════════════════════════════════════════════════════════════
# VALIDATOR
# ══════════════════════════════════════════════════════════════

def validate_command(
    command: Command,
    context: CommandContextProtocol,
) -> None:
    """
    Validate command structure against the ledger context.

    Raises:
        CommandValidationError: If any check fails.
    """

    # ── 1. Type check ─────────────────────────────────────────
    if not isinstance(command, Command):
        raise CommandValidationError(
            code=ReasonCode.INVALID_COMMAND_STRUCTURE,
            message=f"Expected Command, got {type(command).__name__}.",
        )

    # ── 2. Context shape ──────────────────────────────────────
    if context is None or not isinstance(context, CommandContextProtocol):
        raise CommandValidationError(
            code=ReasonCode.INVALID_CONTEXT,
            message="Commands require a ledger context.",
        )

    # ── 3. ledger_id matches context ──────────────────────────
    ledger_id = context.get_ledger_id()
    if command.ledger_id != ledger_id:
        raise CommandValidationError(
            code=ReasonCode.LEDGER_ID_MISMATCH,
            message=(
                f"Command ledger_id ({command.ledger_id}) does not "
                f"match ledger ({ledger_id})."
            ),
        )

    # ── 4. command_type format ────────────────────────────────
    parts = command.command_type.split(".")
    if not command.command_type.endswith(".request") or len(parts) < 4:
        raise CommandValidationError(
            code=ReasonCode.INVALID_COMMAND_TYPE,
            message=(
                f"command_type '{command.command_type}' must follow "
                f"engine.domain.action.request format."
            ),
        )

    # ── 5. Namespace matches source_engine ────────────────────
    if parts[0] != command.source_engine:
        raise CommandValidationError(
            code=ReasonCode.INVALID_NAMESPACE,
            message=(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{command.source_engine}'."
            ),
        )
