# aquadash/realtime/store.py
"""
LiveCollection - a list fetched once from the API and kept current by
socket events.

The page asks for a snapshot; the first call loads through the service,
later calls return the reconciled state. Confirmed mutations (the API's
answer to approve, reject, mark ordered, ...) go in through `replace`.
Server wins: whatever arrives last overwrites what is held.
"""

import logging
import threading
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from aquadash.realtime import reducers
from aquadash.realtime.bus import EventBus
from aquadash.schemas.asset_requests import AssetRequest, AssetRequestItem
from aquadash.services.notifications import INFO, SUCCESS, Notifier

log = logging.getLogger(__name__)

T = TypeVar("T")

Loader = Callable[[], list]
Reducer = Callable[[Sequence[Any], Any], list]


class LiveCollection(Generic[T]):
    def __init__(
        self,
        name: str,
        *,
        loader: Optional[Loader] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.name = name
        self._loader = loader
        self._notifier = notifier
        self._state: Optional[list[T]] = None
        self._lock = threading.RLock()
        # event -> (reducer, parse, message builder, toast kind)
        self._routes: dict[str, tuple[Reducer, Optional[Callable], Optional[Callable], str]] = {}
        self._unsubscribers: list[Callable[[], None]] = []

    # ── wiring ──

    def on(
        self,
        event: str,
        reducer: Reducer,
        *,
        parse: Optional[Callable[[Any], Any]] = None,
        message: Optional[Callable[[Any], str]] = None,
        kind: str = SUCCESS,
    ) -> "LiveCollection[T]":
        self._routes[event] = (reducer, parse, message, kind)
        return self

    def bind(self, bus: EventBus) -> "LiveCollection[T]":
        for event in self._routes:
            self._unsubscribers.append(
                bus.subscribe(event, lambda payload, _e=event: self.apply(_e, payload))
            )
        return self

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    @property
    def events(self) -> list[str]:
        return list(self._routes)

    # ── state ──

    @property
    def loaded(self) -> bool:
        return self._state is not None

    def snapshot(self, loader: Optional[Loader] = None) -> list[T]:
        with self._lock:
            if self._state is None:
                self._load(loader)
            return list(self._state)

    def reload(self, loader: Optional[Loader] = None) -> list[T]:
        with self._lock:
            self._load(loader)
            return list(self._state)

    def _load(self, loader: Optional[Loader]) -> None:
        loader = loader or self._loader
        if loader is None:
            raise RuntimeError(f"no loader for live collection {self.name!r}")
        self._state = list(loader())
        log.debug("%s loaded: %d rows", self.name, len(self._state))

    def apply(self, event: str, payload: Any) -> None:
        route = self._routes.get(event)
        if route is None:
            return
        reducer, parse, message, kind = route
        value = parse(payload) if parse else payload

        with self._lock:
            if self._state is None:
                # nothing fetched yet, the first load will bring this in
                log.debug("%s: %s before first load, skipped", self.name, event)
                return
            self._state = reducer(self._state, value)

        log.debug("%s: applied %s", self.name, event)
        if self._notifier and message:
            self._notifier.notify(kind, message(payload))

    def replace(self, entity: T) -> None:
        """Put an entity returned by a confirmed mutation in place."""
        with self._lock:
            if self._state is not None:
                self._state = reducers.insert_entity(self._state, entity)

    def update(self, reducer: Reducer, value: Any) -> None:
        with self._lock:
            if self._state is not None:
                self._state = reducer(self._state, value)

    def remove(self, id: Any) -> None:
        with self._lock:
            if self._state is not None:
                self._state = reducers.remove_entity(self._state, {"id": id})

    def get(self, id: Any) -> Optional[T]:
        with self._lock:
            for entity in self._state or ():
                if reducers.entity_id(entity) == id:
                    return entity
        return None


# ═══════════════════════════════════════════════════════════
# Collections per entity
# ═══════════════════════════════════════════════════════════

def entity_collection(
    name: str,
    prefix: str,
    model: type,
    *,
    label: str,
    loader: Optional[Loader] = None,
    notifier: Optional[Notifier] = None,
) -> LiveCollection:
    """
    {prefix}Created / {prefix}Updated / {prefix}Deleted for a plain entity,
    e.g. prefix="cage" → cageCreated, cageUpdated, cageDeleted.
    """
    parse = model.model_validate
    return (
        LiveCollection(name, loader=loader, notifier=notifier)
        .on(f"{prefix}Created", reducers.insert_entity, parse=parse,
            message=lambda p: f"{label} {p.get('id')} created")
        .on(f"{prefix}Updated", reducers.replace_entity, parse=parse,
            message=lambda p: f"{label} {p.get('id')} updated")
        .on(f"{prefix}Deleted", reducers.remove_entity,
            message=lambda p: f"{label} {p.get('id')} deleted")
    )


def asset_request_collection(
    *,
    loader: Optional[Loader] = None,
    notifier: Optional[Notifier] = None,
) -> LiveCollection[AssetRequest]:
    parse_request = AssetRequest.model_validate
    parse_item = AssetRequestItem.model_validate
    return (
        LiveCollection("asset_requests", loader=loader, notifier=notifier)
        .on("requestCreated", reducers.insert_entity, parse=parse_request,
            message=lambda p: f"Request {p.get('id')} created")
        .on("requestUpdated", reducers.replace_request, parse=parse_request,
            message=lambda p: f"Request {p.get('id')} updated")
        .on("requestDeleted", reducers.remove_entity,
            message=lambda p: f"Request {p.get('id')} deleted")
        .on("requestStatusChanged", reducers.apply_status_changed,
            message=lambda p: f"Status changed to {p.get('status')}", kind=INFO)
        .on("requestItemUpdated", reducers.apply_item_updated, parse=parse_item,
            message=lambda p: f"Item {p.get('id')} updated")
        .on("requestItemProcurementNeeded", reducers.apply_procurement_needed, parse=parse_item,
            message=lambda p: f"Item {p.get('id')} needs procurement", kind=INFO)
    )
