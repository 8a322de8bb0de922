"""
VaxLedger Command Layer — Command Bus
=======================================
High-level orchestration of the command lifecycle.

Flow:
    1. Dispatch command → Outcome
    2. ACCEPTED → engine handler executes (persists event, applies state)
    3. REJECTED → nothing is executed, nothing is persisted

The bus orchestrates, it does not decide and it does not persist.
Rejected commands leave no trace in the event store; the reason is
returned to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol, runtime_checkable

from core.commands.base import Command
from core.commands.dispatcher import CommandDispatcher
from core.commands.outcomes import CommandOutcome

logger = logging.getLogger("vaxledger.commands")


@runtime_checkable
class EngineServiceProtocol(Protocol):
    """Handler that executes an accepted command."""

    def execute(self, command: Command) -> Any:
        ...


# ══════════════════════════════════════════════════════════════
# COMMAND BUS ERRORS
# ══════════════════════════════════════════════════════════════

class CommandBusError(Exception):
    """Base error for command bus operations."""
    pass


class NoHandlerRegistered(CommandBusError):
    """No engine handler registered for command type."""

    def __init__(self, command_type: str):
        self.command_type = command_type
        super().__init__(
            f"No engine service handler registered for "
            f"command type '{command_type}'."
        )


# ══════════════════════════════════════════════════════════════
# COMMAND BUS RESULT
# ══════════════════════════════════════════════════════════════

class CommandResult:
    """Result of CommandBus.handle() — outcome + execution result."""

    def __init__(
        self,
        outcome: CommandOutcome,
        execution_result: Any = None,
    ):
        self.outcome = outcome
        self.execution_result = execution_result

    @property
    def is_accepted(self) -> bool:
        return self.outcome.is_accepted

    @property
    def is_rejected(self) -> bool:
        return self.outcome.is_rejected

    @property
    def reason(self):
        return self.outcome.reason


# ══════════════════════════════════════════════════════════════
# COMMAND BUS
# ══════════════════════════════════════════════════════════════

class CommandBus:
    """
    Orchestration layer for command lifecycle.

    Usage:
        bus = CommandBus(dispatcher=dispatcher)
        bus.register_handler("vaccination.record.create.request", handler)
        result = bus.handle(command)

    The bus is not a concurrency boundary. Callers that share a bus
    across threads serialize handle() themselves.
    """

    def __init__(self, dispatcher: CommandDispatcher):
        self._dispatcher = dispatcher
        self._handlers: Dict[str, EngineServiceProtocol] = {}

    def register_handler(
        self, command_type: str, handler: EngineServiceProtocol,
    ) -> None:
        if not command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{command_type}' must end with '.request'."
            )

        if not isinstance(handler, EngineServiceProtocol) or not callable(
            handler.execute
        ):
            raise TypeError("Handler must have callable .execute() method.")

        self._handlers[command_type] = handler
        logger.info(f"Handler registered: {command_type}")

    def has_handler(self, command_type: str) -> bool:
        return command_type in self._handlers

    def handle(self, command: Command) -> CommandResult:
        outcome = self._dispatcher.dispatch(command)

        if outcome.is_rejected:
            return CommandResult(outcome=outcome)

        handler = self._handlers.get(command.command_type)
        if handler is None:
            raise NoHandlerRegistered(command.command_type)

        logger.info(
            f"Executing accepted command {command.command_id} "
            f"({command.command_type})"
        )
        execution_result = handler.execute(command)

        return CommandResult(
            outcome=outcome,
            execution_result=execution_result,
        )
