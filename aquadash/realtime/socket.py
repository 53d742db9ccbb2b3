# aquadash/realtime/socket.py
"""
Bridge between the socket connection and the EventBus.

The connection is anything with `.on(event, handler)` (a socket.io client
does). One connection, every named event forwarded to the bus.
"""

import logging
from typing import Any, Iterable, Protocol

from aquadash.realtime.bus import EventBus

log = logging.getLogger(__name__)

REQUEST_EVENTS = (
    "requestCreated",
    "requestUpdated",
    "requestDeleted",
    "requestStatusChanged",
    "requestItemUpdated",
    "requestItemProcurementNeeded",
)


def crud_events(prefix: str) -> tuple[str, str, str]:
    return (f"{prefix}Created", f"{prefix}Updated", f"{prefix}Deleted")


ALL_EVENTS: tuple[str, ...] = (
    *REQUEST_EVENTS,
    *crud_events("cage"),
    *crud_events("laboratoryBox"),
    *crud_events("medication"),
    *crud_events("feed"),
)


class Connection(Protocol):
    def on(self, event: str, handler: Any) -> Any: ...


def bind_socket(connection: Connection, bus: EventBus, events: Iterable[str] = ALL_EVENTS) -> list[str]:
    """Register a forwarder per event; returns the bound event names."""
    bound = []
    for event in events:
        connection.on(event, _forwarder(bus, event))
        bound.append(event)
    log.info("socket bound to %d events", len(bound))
    return bound


def _forwarder(bus: EventBus, event: str):
    def forward(payload: Any = None) -> None:
        bus.publish(event, payload)
    return forward
