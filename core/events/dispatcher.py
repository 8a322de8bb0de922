"""
VaxLedger Event Bus — Dispatcher
==================================
Routes committed ledger events to their subscribers.

1. Look up subscribers by event_type
2. Call each handler in registration order
3. A failing handler is logged and reported; the others still run
4. The persisted event is never touched

The event is already in the chain before anyone hears about it.
"""

import logging
from typing import Any

from core.events.registry import SubscriberRegistry

logger = logging.getLogger("vaxledger.events")


def dispatch(event: Any, registry: SubscriberRegistry) -> dict:
    """
    Dispatch a stored event to all registered subscribers.

    Returns:
        {
            'event_type': str,
            'event_id': str,
            'subscribers_notified': int,
            'subscribers_failed': int,
            'failures': list[dict]
        }

    Handler exceptions are caught, logged and reported, never raised.
    """
    event_type = event.event_type
    event_id = str(event.event_id)

    result = {
        "event_type": event_type,
        "event_id": event_id,
        "subscribers_notified": 0,
        "subscribers_failed": 0,
        "failures": [],
    }

    subscribers = registry.get_subscribers(event_type)
    if not subscribers:
        logger.debug(f"No subscribers for '{event_type}' (event_id: {event_id})")
        return result

    for handler, subscriber_engine in subscribers:
        handler_name = getattr(handler, "__qualname__", str(handler))

        try:
            handler(event)
            result["subscribers_notified"] += 1
        except Exception as exc:
            result["subscribers_failed"] += 1
            result["failures"].append({
                "handler": handler_name,
                "engine": subscriber_engine,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            logger.error(
                f"Subscriber failed: {handler_name} for "
                f"{event_type} (event_id: {event_id}): {exc}",
                exc_info=True,
            )

    logger.info(
        f"Dispatch complete: {event_type} (event_id: {event_id}) — "
        f"{result['subscribers_notified']} notified, "
        f"{result['subscribers_failed']} failed"
    )
    return result
