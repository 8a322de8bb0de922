"""
VaxLedger Context - ActorContext
================================
Immutable caller identity handed to the ledger by the host.

The host environment authenticates callers. The ledger never does:
it only receives an opaque identity handle and compares it against
the authority and the provider registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


# Default identity. Never a valid caller, never a valid patient.
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_null_identity(identity: Optional[str]) -> bool:
    """True for None, blank strings and the zero address (any case)."""
    if identity is None:
        return True
    if not isinstance(identity, str):
        return False
    stripped = identity.strip()
    return not stripped or stripped.lower() == NULL_ADDRESS


@dataclass(frozen=True)
class ActorContext:
    """
    Authenticated caller of a ledger operation.

    actor_id is the opaque identity handle (wallet address,
    principal id, ...). It is compared verbatim.
    """

    actor_id: str

    def __post_init__(self):
        if not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a string.")

        if is_null_identity(self.actor_id):
            raise ValueError("actor_id must be a non-null identity.")


CallerLike = Union[ActorContext, str]


def resolve_actor(caller: CallerLike) -> ActorContext:
    """Accept an ActorContext or a bare identity string."""
    if isinstance(caller, ActorContext):
        return caller
    return ActorContext(actor_id=caller)
