"""
VaxLedger Replay — Public API
===============================
Chain verification and state rebuild from stored events.
"""

from core.replay.context import ReplayContext, is_replay_active
from core.replay.errors import (
    ReplayChainBrokenError,
    ReplayError,
    ReplayIntegrityError,
    ReplayIsolationError,
)
from core.replay.event_replayer import (
    ReplayResult,
    replay_events,
    verify_chain_before_replay,
)

__all__ = [
    "ReplayContext",
    "is_replay_active",
    "ReplayError",
    "ReplayChainBrokenError",
    "ReplayIntegrityError",
    "ReplayIsolationError",
    "ReplayResult",
    "replay_events",
    "verify_chain_before_replay",
]
