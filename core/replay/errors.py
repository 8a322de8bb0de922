"""
VaxLedger Replay — Errors
===========================
Raised when a chain cannot be trusted or replay would write history.
"""


class ReplayError(Exception):
    """Base error for all replay operations."""
    pass


class ReplayChainBrokenError(ReplayError):
    """Linkage or sequence of the chain is broken; replay refused."""

    def __init__(self, ledger_id, detail: str):
        self.ledger_id = ledger_id
        self.detail = detail
        super().__init__(
            f"Replay refused — hash-chain broken for ledger "
            f"{ledger_id}: {detail}"
        )


class ReplayIsolationError(ReplayError):
    """Attempt to persist an event during replay mode."""

    def __init__(self, message: str = None):
        super().__init__(
            message or "Cannot persist events during replay. "
            "Replay mode is read-only."
        )


class ReplayIntegrityError(ReplayError):
    """Stored hash does not match the recomputed hash; event tampered."""

    def __init__(self, event_id, expected_hash: str, actual_hash: str):
        self.event_id = event_id
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Replay integrity failure — event {event_id}: "
            f"stored hash '{expected_hash}' != "
            f"recomputed hash '{actual_hash}'."
        )
