"""Synchronous publish/subscribe dispatcher.

Handlers are registered per event type and called in registration order,
in-process, before publish() returns. A handler that raises is logged and
skipped; it never aborts the publisher or the remaining handlers.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"

Handler = Callable[[Any], None]


class EventDispatcher:
    """In-process pub/sub keyed by event type.

    Usage:
        dispatcher = EventDispatcher()
        dispatcher.subscribe("move_made", on_move)
        dispatcher.publish("move_made", event)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Register a handler for an event type."""
        if handler not in self._handlers[event_type]:
            self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        """Register a handler that receives every event."""
        self.subscribe(ALL_EVENTS, handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        """Remove a handler."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._handlers[event_type]

    def publish(self, event_type: str, payload: Any) -> int:
        """Deliver payload to every handler of event_type, then to wildcard handlers.

        Returns:
            Number of handlers that completed without raising.
        """
        handlers = list(self._handlers.get(event_type, ())) + list(
            self._handlers.get(ALL_EVENTS, ())
        )
        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception:
                logger.exception("Handler error for event %s", event_type)
        return delivered

    def listener_count(self, event_type: str) -> int:
        return len(self._handlers.get(event_type, ()))

    def event_types(self) -> list[str]:
        return [event_type for event_type, handlers in self._handlers.items() if handlers]

    def clear(self, event_type: str | None = None) -> None:
        """Remove the handlers of one event type, or all handlers."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)
