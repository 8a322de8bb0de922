"""
VaxLedger Context — Public API
================================
Caller identity as supplied by the hosting environment.
"""

from core.context.actor_context import (
    NULL_ADDRESS,
    ActorContext,
    CallerLike,
    is_null_identity,
    resolve_actor,
)

__all__ = [
    "ActorContext",
    "CallerLike",
    "NULL_ADDRESS",
    "is_null_identity",
    "resolve_actor",
]
