"""
VaxLedger Event Store - Persistence Errors
==========================================
Codes and exceptions for the append stage.
"""


class PersistenceRejectionCode:
    """Rejection codes for persistence-stage failures."""

    TRANSACTION_ABORTED = "TRANSACTION_ABORTED"


class PersistenceViolatedRule:
    """Rule identifiers for audit trail during persistence failures."""

    ATOMIC_PERSISTENCE = "ATOMIC_PERSISTENCE"


class EventStoreError(Exception):
    """Base error raised by event store implementations."""
    pass


class ChainConflictError(EventStoreError):
    """The chain head moved between hash resolution and append."""

    def __init__(self, ledger_id, provided_previous_hash: str, actual_head_hash: str):
        self.ledger_id = ledger_id
        self.provided_previous_hash = provided_previous_hash
        self.actual_head_hash = actual_head_hash
        super().__init__(
            f"Concurrent append conflict on ledger {ledger_id}: "
            f"previous_event_hash '{provided_previous_hash}' is no longer "
            f"the chain head ('{actual_head_hash}')."
        )


class DuplicateEventError(EventStoreError):
    """An event with this event_id is already stored."""

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Event with ID {event_id} already exists.")


class EventPersistenceError(EventStoreError):
    """
    Raised by engine services when persist_event refuses an event.

    Carries the Rejection so callers can see which store rule failed.
    Ledger state is never touched when this is raised.
    """

    def __init__(self, rejection):
        self.rejection = rejection
        super().__init__(
            f"Event persistence refused: [{rejection.code}] {rejection.message}"
        )
