"""
VaxLedger Event Bus — Subscriber Registry
===========================================
Who listens to which committed ledger events.

Audit consumers, notifiers and read models register here. This is
not the EventTypeRegistry: that one decides what may be written,
this one decides who hears about it.

Rules:
- Event types follow engine.domain.action format
- Many subscribers per event type; the same handler only once
- An engine may not subscribe to its own events unless explicit
- Thread-safe, in-memory
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("vaxledger.events")


class SubscriberRegistry:
    """Maps event_type → [(handler, subscriber_engine), ...]."""

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")

        if len(event_type.strip().split(".")) < 3:
            raise InvalidEventTypeFormat(event_type)

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:   Bad event type format
            DuplicateSubscriberError: Handler already registered
            SelfSubscriptionError:    Engine subscribing to own events
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        source_engine = event_type.split(".")[0]
        if source_engine == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            entries = self._subscribers.setdefault(event_type, [])
            for existing_handler, _ in entries:
                if existing_handler is handler:
                    raise DuplicateSubscriberError(event_type, handler_name)
            entries.append((handler, subscriber_engine))

        logger.info(
            f"Subscriber registered: {handler_name} → {event_type} "
            f"(from engine: {subscriber_engine})"
        )

    def get_subscribers(self, event_type: str) -> list[tuple[Callable, str]]:
        with self._lock:
            return list(self._subscribers.get(event_type, []))

    def has_subscribers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._subscribers.get(event_type))

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))
