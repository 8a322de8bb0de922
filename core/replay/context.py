"""
VaxLedger Replay — Replay Context
===================================
Thread-local flag that marks "history is being re-read".

While it is set, persist_event() refuses to write. Rebuilding a
ledger from its chain must never extend the chain.
"""

import logging
import threading

logger = logging.getLogger("vaxledger.replay")

_replay_state = threading.local()


def is_replay_active() -> bool:
    """True while a ReplayContext is open on this thread."""
    return getattr(_replay_state, "depth", 0) > 0


class ReplayContext:
    """
    Context manager that blocks persistence on the current thread.

    Usage:
        with ReplayContext():
            state = replay_events(store.load_events(), LedgerState(...))
    """

    def __enter__(self):
        _replay_state.depth = getattr(_replay_state, "depth", 0) + 1
        logger.debug("Replay mode entered; persistence blocked.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _replay_state.depth -= 1
        logger.debug("Replay mode exited.")
        return False
