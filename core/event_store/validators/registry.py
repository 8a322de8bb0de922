"""
VaxLedger Event Store — Event Type Registry
=============================================
Controls which event types may be written to a ledger.

Rules:
- Registry starts EMPTY
- Engines register their types when their service is built
- Unregistered event types are refused by the validator
- Format: engine.domain.action[.vN]
"""

from threading import Lock


class EventTypeRegistry:
    """
    Thread-safe registry of permitted event types.

    Usage:
        registry = EventTypeRegistry()
        registry.register("vaccination.record.recorded.v1")
        registry.is_registered("vaccination.record.recorded.v1")  # True
    """

    def __init__(self):
        self._registered_types: set[str] = set()
        self._lock = Lock()

    def register(self, event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise ValueError("Event type must be a non-empty string.")

        parts = event_type.strip().split(".")
        if len(parts) < 3:
            raise ValueError(
                f"Event type '{event_type}' does not follow "
                f"engine.domain.action format."
            )

        with self._lock:
            self._registered_types.add(event_type)

    def is_registered(self, event_type: str) -> bool:
        with self._lock:
            return event_type in self._registered_types

    def get_all_registered(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._registered_types)

    def count(self) -> int:
        with self._lock:
            return len(self._registered_types)
