"""
VaxLedger Event Bus — Errors
==============================
Raised while wiring subscribers, never while dispatching.

A subscriber that fails during dispatch is reported in the dispatch
result instead; the chain does not care who was listening.
"""


class EventBusError(Exception):
    """Base error for subscriber registration."""


class InvalidEventTypeFormat(EventBusError):
    """Subscribed event type is not engine.domain.action[.vN]."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(
            f"Cannot subscribe to '{event_type}': expected "
            f"engine.domain.action[.vN]."
        )


class DuplicateSubscriberError(EventBusError):
    """The same handler object is already listening to this event type."""

    def __init__(self, event_type: str, handler_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        super().__init__(
            f"'{handler_name}' is already subscribed to '{event_type}'."
        )


class SelfSubscriptionError(EventBusError):
    """
    An engine tried to listen to the events it emits.

    Engines react to their own commands directly; listening to their
    own events needs allow_self_subscription=True.
    """

    def __init__(self, engine: str, event_type: str):
        self.engine = engine
        self.event_type = event_type
        super().__init__(
            f"'{engine}' emits '{event_type}' and may not subscribe to it "
            f"unless allow_self_subscription=True."
        )
