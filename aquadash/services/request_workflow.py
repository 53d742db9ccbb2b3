# aquadash/services/request_workflow.py
"""
Asset request workflow as the dashboard sees it.

The API owns the state machine: it validates every transition, decides the
resulting item and request statuses and broadcasts them. This module only
answers "which action can the operator take now" and shapes the payloads
the dashboard sends, so nothing here ever writes a status into local state.

Request:     PENDING → ISSUED | PARTIALLY_ISSUED (approve & issue)
             PENDING → REJECTED
             PARTIALLY_ISSUED → CLOSED (everything procured and issued)
Item:        PENDING → ISSUED | PARTIALLY_ISSUED | PENDING_PROCUREMENT
Procurement: NOT_REQUIRED → REQUIRED → ORDERED → COMPLETED
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from aquadash.errors import FormValidationError
from aquadash.schemas.asset_requests import (
    AssetRequest,
    AssetRequestItem,
    IssuedItem,
    ItemStatus,
    ProcurementStatus,
    RequestStatus,
)

TERMINAL_REQUEST_STATUSES = frozenset({RequestStatus.REJECTED, RequestStatus.CLOSED})

# Transitions the API accepts on a request. Used for display only.
REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({
        RequestStatus.ISSUED,
        RequestStatus.PARTIALLY_ISSUED,
        RequestStatus.REJECTED,
    }),
    RequestStatus.APPROVED: frozenset({RequestStatus.ISSUED, RequestStatus.PARTIALLY_ISSUED}),
    RequestStatus.ISSUED: frozenset({RequestStatus.CLOSED}),
    RequestStatus.PARTIALLY_ISSUED: frozenset({RequestStatus.ISSUED, RequestStatus.CLOSED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CLOSED: frozenset(),
}

PROCUREMENT_TRANSITIONS: dict[ProcurementStatus, Optional[ProcurementStatus]] = {
    ProcurementStatus.NOT_REQUIRED: ProcurementStatus.REQUIRED,
    ProcurementStatus.REQUIRED: ProcurementStatus.ORDERED,
    ProcurementStatus.ORDERED: ProcurementStatus.COMPLETED,
    ProcurementStatus.COMPLETED: None,
}


# ═══════════════════════════════════════════════════════════
# Guards
# ═══════════════════════════════════════════════════════════

def is_terminal(status: RequestStatus) -> bool:
    return status in TERMINAL_REQUEST_STATUSES


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in REQUEST_TRANSITIONS.get(current, frozenset())


def can_modify(request: AssetRequest) -> bool:
    """Only PENDING requests can be edited."""
    return request.status == RequestStatus.PENDING


def can_delete(request: AssetRequest) -> bool:
    return request.status == RequestStatus.PENDING


def can_approve(request: AssetRequest) -> bool:
    return request.status == RequestStatus.PENDING


def can_reject(request: AssetRequest) -> bool:
    return request.status == RequestStatus.PENDING


def can_mark_ordered(item: AssetRequestItem) -> bool:
    return item.procurementStatus == ProcurementStatus.REQUIRED


def can_complete_procurement(item: AssetRequestItem) -> bool:
    return item.procurementStatus == ProcurementStatus.ORDERED


# ═══════════════════════════════════════════════════════════
# Quantities
# ═══════════════════════════════════════════════════════════

def needed_quantity(item: AssetRequestItem) -> int:
    """Requested minus already issued, never below zero."""
    return max(item.quantity - item.issued, 0)


def available_quantity(item: AssetRequestItem) -> int:
    """Stock on hand for the item's asset as last reported by the API."""
    if item.asset is None:
        return 0
    return max(item.asset.quantity, 0)


def max_issuable(item: AssetRequestItem, available: Optional[int] = None) -> int:
    if available is None:
        available = available_quantity(item)
    return max(min(needed_quantity(item), available), 0)


def clamp_issued_quantity(value: Any, available: int, needed: Optional[int] = None) -> int:
    """
    Bring an operator-typed quantity into 0..available (and 0..needed when
    given). Anything that is not a number becomes 0.
    """
    try:
        qty = int(float(value))
    except (TypeError, ValueError):
        return 0
    upper = max(available, 0)
    if needed is not None:
        upper = min(upper, max(needed, 0))
    return min(max(qty, 0), upper)


def clamp_procured_quantity(value: Any) -> int:
    """Procured quantity is at least 1."""
    try:
        qty = int(float(value))
    except (TypeError, ValueError):
        return 1
    return max(qty, 1)


def default_issue_quantities(request: AssetRequest) -> dict[str, int]:
    """Initial values of the approve form: as much as stock allows."""
    return {item.id: max_issuable(item) for item in request.items}


# ═══════════════════════════════════════════════════════════
# Approve & issue payload
# ═══════════════════════════════════════════════════════════

def _parse_quantity(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    text = str(raw).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        try:
            as_float = float(text)
        except ValueError:
            return None
        return int(as_float) if as_float.is_integer() else None


def build_approve_payload(
    request: AssetRequest,
    edited: Optional[Mapping[str, Any]] = None,
) -> dict:
    """
    Build the body of PATCH /asset-requests/{id}/approve.

    One entry per item in request order. `edited` maps item id to the value
    the operator typed; missing items fall back to `default_issue_quantities`.
    Items with nothing left to issue always send 0.

    Raises FormValidationError (field per item) when a value is negative,
    not a whole number, or above the stock the API last reported.
    """
    edited = edited or {}
    defaults = default_issue_quantities(request)
    errors: dict[str, str] = {}
    issued: list[IssuedItem] = []

    for index, item in enumerate(request.items, start=1):
        needed = needed_quantity(item)
        if needed == 0:
            issued.append(IssuedItem(itemId=item.id, issuedQuantity=0))
            continue

        raw = edited.get(item.id, defaults[item.id])
        qty = _parse_quantity(raw)
        available = available_quantity(item)

        if qty is None:
            errors[item.id] = f"Item {index}: issued quantity must be a whole number"
            continue
        if qty < 0:
            errors[item.id] = f"Item {index}: issued quantity cannot be negative"
            continue
        if qty > available:
            errors[item.id] = f"Item {index}: only {available} in stock"
            continue

        issued.append(IssuedItem(itemId=item.id, issuedQuantity=min(qty, needed)))

    if errors:
        raise FormValidationError(errors)

    return {"issuedItems": [i.model_dump() for i in issued]}


def expected_item_outcome(
    item: AssetRequestItem, issued: int
) -> tuple[ItemStatus, ProcurementStatus]:
    """
    What the API answers for one item issued with `issued` units. Shown as a
    preview in the approve form; the real statuses always come back from
    the API.
    """
    if issued >= item.quantity:
        return ItemStatus.ISSUED, ProcurementStatus.NOT_REQUIRED
    return ItemStatus.PARTIALLY_ISSUED, ProcurementStatus.REQUIRED


# ═══════════════════════════════════════════════════════════
# Aggregates for display
# ═══════════════════════════════════════════════════════════

@dataclass
class RequestSummary:
    items: int
    requested: int
    issued: int
    needed: int


def request_summary(request: AssetRequest) -> RequestSummary:
    return RequestSummary(
        items=len(request.items),
        requested=sum(i.quantity for i in request.items),
        issued=sum(i.issued for i in request.items),
        needed=sum(needed_quantity(i) for i in request.items),
    )
