"""
VaxLedger Command Layer — Command Base Contract
=================================================
Every mutation of the ledger begins as a Command.

A Command is a frozen declaration of intent by one authenticated
caller against one ledger. It carries identity, time and payload.

Rules:
- Immutable once created (frozen dataclass)
- No ledger logic inside
- No persistence, no event emission
- command_type follows engine.domain.action.request format
- issued_at is the single clock reading for the whole operation
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from core.context.actor_context import is_null_identity


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical ledger Command.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'vaccination.record.create.request').
        ledger_id:      Chain scope (UUID) the command targets.
        actor_id:       Authenticated caller identity.
        payload:        Intent data (dict).
        issued_at:      Clock reading taken when the call arrived.
        correlation_id: Groups related commands/events.
        source_engine:  Engine that owns this command.
    """

    command_id: uuid.UUID
    command_type: str
    ledger_id: uuid.UUID
    actor_id: str
    payload: dict
    issued_at: datetime
    correlation_id: uuid.UUID
    source_engine: str

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'vaccination.record.create.request')."
            )

        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        if not isinstance(self.ledger_id, uuid.UUID):
            raise ValueError("ledger_id must be UUID.")

        if not isinstance(self.actor_id, str) or is_null_identity(self.actor_id):
            raise ValueError("actor_id must be a non-null identity string.")

        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")

        if not isinstance(self.correlation_id, uuid.UUID):
            raise ValueError("correlation_id must be UUID.")


def derive_source_engine(command_type: str) -> str:
    """
    Extract source engine from command type.

    vaccination.record.create.request → vaccination
    """
    return command_type.split(".")[0]
