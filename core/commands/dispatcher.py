"""
VaxLedger Command Layer — Command Dispatcher
==============================================
Accept Command → Validate → Evaluate Policies → Produce Outcome.

The Dispatcher is the DECISION MAKER. It decides ACCEPTED or REJECTED
by reading the ledger context; it never mutates it.

Policies are callables returning Optional[RejectionReason], evaluated
in registration order. First rejection wins.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from core.commands.base import Command
from core.commands.outcomes import CommandOutcome, CommandStatus
from core.commands.rejection import RejectionReason
from core.commands.validator import (
    CommandContextProtocol,
    CommandValidationError,
    validate_command,
)

logger = logging.getLogger("vaxledger.commands")


# A policy is a callable:
#   (Command, context) → Optional[RejectionReason]
PolicyEvaluator = Callable[
    [Command, CommandContextProtocol],
    Optional[RejectionReason],
]


class CommandDispatcher:
    """
    Evaluate a command through validation and policies.

    Usage:
        dispatcher = CommandDispatcher(context=ledger_state)
        dispatcher.register_policy(authority_only_policy)
        outcome = dispatcher.dispatch(command)
    """

    def __init__(self, context: CommandContextProtocol):
        self._context = context
        self._policies: List[PolicyEvaluator] = []

    def register_policy(self, policy: PolicyEvaluator) -> None:
        if not callable(policy):
            raise TypeError(
                f"Policy must be callable, got {type(policy).__name__}."
            )
        self._policies.append(policy)

        policy_name = getattr(policy, "__qualname__", str(policy))
        logger.debug(f"Policy registered: {policy_name}")

    @property
    def policy_count(self) -> int:
        return len(self._policies)

    def dispatch(self, command: Command) -> CommandOutcome:
        """
        Evaluate command and produce outcome.

        The outcome is stamped with command.issued_at so the decision
        and the resulting event share one clock reading.
        """
        occurred_at = command.issued_at

        # ── Step 1: Structural validation ─────────────────────
        try:
            validate_command(command, self._context)
        except CommandValidationError as exc:
            logger.info(
                f"Command {command.command_id} validation failed: "
                f"[{exc.code}] {exc.message}"
            )
            return CommandOutcome(
                command_id=command.command_id,
                status=CommandStatus.REJECTED,
                reason=RejectionReason(
                    code=exc.code,
                    message=exc.message,
                    policy_name="command_validator",
                ),
                occurred_at=occurred_at,
            )

        # ── Step 2: Policy evaluation ─────────────────────────
        for policy in self._policies:
            rejection = policy(command, self._context)
            if rejection is None:
                continue

            if not isinstance(rejection, RejectionReason):
                raise TypeError(
                    f"Policy must return RejectionReason or None, "
                    f"got {type(rejection).__name__}."
                )

            logger.info(
                f"Command {command.command_id} ({command.command_type}) "
                f"rejected by policy '{rejection.policy_name}': "
                f"[{rejection.code}] {rejection.message}"
            )
            return CommandOutcome(
                command_id=command.command_id,
                status=CommandStatus.REJECTED,
                reason=rejection,
                occurred_at=occurred_at,
            )

        # ── Step 3: All clear → ACCEPTED ──────────────────────
        logger.info(
            f"Command {command.command_id} ({command.command_type}) ACCEPTED"
        )
        return CommandOutcome(
            command_id=command.command_id,
            status=CommandStatus.ACCEPTED,
            reason=None,
            occurred_at=occurred_at,
        )
