# aquadash/realtime/reducers.py
"""
Pure reducers: (state, payload) -> new state.

State is a list of entities (pydantic models or dicts with "id").
Inputs are never mutated; untouched entities are reused as-is.

Generic:
  insert_entity   - *Created  (an id already present is replaced, not duplicated)
  replace_entity  - *Updated  (same position; unknown id → unchanged)
  remove_entity   - *Deleted  (unknown id → unchanged)

Asset requests:
  apply_status_changed     - requestStatusChanged {id, status}
  apply_item_updated       - requestItemUpdated item
  apply_procurement_needed - requestItemProcurementNeeded item
  replace_request          - requestUpdated, merged over the held request
  upsert_request           - confirmed mutations, merged or appended
"""

from enum import Enum
from typing import Any, Mapping, Optional, Sequence, TypeVar

from aquadash.schemas.asset_requests import (
    AssetRequest,
    AssetRequestItem,
    ItemStatus,
    RequestStatus,
)

T = TypeVar("T")


def entity_id(entity: Any) -> Any:
    if isinstance(entity, Mapping):
        return entity.get("id")
    return getattr(entity, "id", None)


def insert_entity(state: Sequence[T], entity: T) -> list[T]:
    new_id = entity_id(entity)
    if any(entity_id(e) == new_id for e in state):
        return replace_entity(state, entity)
    return [*state, entity]


def replace_entity(state: Sequence[T], entity: T) -> list[T]:
    new_id = entity_id(entity)
    return [entity if entity_id(e) == new_id else e for e in state]


def remove_entity(state: Sequence[T], payload: Any) -> list[T]:
    gone = entity_id(payload)
    return [e for e in state if entity_id(e) != gone]


def _coerce(enum_cls: type[Enum], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def apply_status_changed(state: Sequence[AssetRequest], payload: Mapping[str, Any]) -> list[AssetRequest]:
    """The id may name a request or one of its items."""
    target = payload.get("id")
    status = payload.get("status")
    result = []
    for request in state:
        if request.id == target:
            result.append(request.model_copy(update={"status": _coerce(RequestStatus, status)}))
            continue
        if any(i.id == target for i in request.items):
            items = [
                i.model_copy(update={"status": _coerce(ItemStatus, status)}) if i.id == target else i
                for i in request.items
            ]
            result.append(request.model_copy(update={"items": items}))
            continue
        result.append(request)
    return result


def merge_item(held: Optional[AssetRequestItem], item: AssetRequestItem) -> AssetRequestItem:
    """Mutation answers and item events come without the embedded asset."""
    if held is None or item.asset is not None or held.asset is None:
        return item
    return item.model_copy(update={"asset": held.asset})


def _merge_items(held: Sequence[AssetRequestItem], item: AssetRequestItem) -> list[AssetRequestItem]:
    previous = next((i for i in held if i.id == item.id), None)
    if previous is None:
        return [*held, item]
    return replace_entity(held, merge_item(previous, item))


def merge_request(held: Optional[AssetRequest], request: AssetRequest) -> AssetRequest:
    """
    Lay a request from the API over the one held. Bare rows (no items, no
    employee) keep what was held; items keep their embedded asset.
    """
    if held is None:
        return request
    # fields the answer did not carry at all
    update: dict[str, Any] = {
        name: getattr(held, name)
        for name in type(request).model_fields
        if name not in request.model_fields_set
    }
    if "items" in request.model_fields_set:
        held_items = {i.id: i for i in held.items}
        update["items"] = [merge_item(held_items.get(i.id), i) for i in request.items]
    if request.employee is None and held.employee is not None:
        update["employee"] = held.employee
    return request.model_copy(update=update)


def replace_request(state: Sequence[AssetRequest], request: AssetRequest) -> list[AssetRequest]:
    held = next((r for r in state if r.id == request.id), None)
    if held is None:
        return list(state)
    return replace_entity(state, merge_request(held, request))


def upsert_request(state: Sequence[AssetRequest], request: AssetRequest) -> list[AssetRequest]:
    held = next((r for r in state if r.id == request.id), None)
    if held is None:
        return [*state, request]
    return replace_entity(state, merge_request(held, request))


def apply_item_updated(state: Sequence[AssetRequest], item: AssetRequestItem) -> list[AssetRequest]:
    result = []
    for request in state:
        if any(i.id == item.id for i in request.items):
            request = request.model_copy(update={"items": _merge_items(request.items, item)})
        result.append(request)
    return result


def apply_procurement_needed(state: Sequence[AssetRequest], item: AssetRequestItem) -> list[AssetRequest]:
    """Replace or append the item inside the request it belongs to."""
    result = []
    for request in state:
        if request.id == item.requestId:
            request = request.model_copy(update={"items": _merge_items(request.items, item)})
        result.append(request)
    return result
