# aquadash/realtime/bus.py
"""
Publish/subscribe over named socket events.

One connection feeds the bus (see socket.bind_socket); every page-level
collection subscribes only to the events of its entity.

    unsubscribe = bus.subscribe("cageUpdated", handler)
    bus.publish("cageUpdated", {"id": "c1", ...})
    unsubscribe()
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Callable

log = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register a handler; returns an idempotent unsubscribe function."""
        with self._lock:
            self._handlers[event].append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event)
                if handlers and handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, event: str, payload: Any) -> int:
        """
        Deliver to every handler of `event` in subscription order.
        A failing handler is logged and does not stop the others.
        Returns the number of handlers called.
        """
        with self._lock:
            handlers = list(self._handlers.get(event, ()))

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                log.exception("handler for %s failed", event)
        return len(handlers)

    def handler_count(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, ()))
