# aquadash/routers/procurement.py
"""
Procurement page: request items the API flagged for purchase, grouped by asset.

- GET  /procurement                          - grouped table (status filter, search, page)
- POST /procurement/items/{item_id}/order    - REQUIRED → ORDERED
- POST /procurement/items/{item_id}/complete - ORDERED → COMPLETED with procured quantity
"""

import logging

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.realtime import reducers
from aquadash.realtime.hub import LiveHub
from aquadash.routers.asset_requests import load_requests
from aquadash.schemas.asset_requests import AssetRequestItem
from aquadash.services.asset_request_service import AssetRequestService
from aquadash.services.list_query import ALL, DESC, ListFilters, query_list
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.services.procurement import aggregate_by_asset, derive_procurement_items, procurement_stats
from aquadash.services.request_workflow import (
    can_complete_procurement,
    can_mark_ordered,
    clamp_procured_quantity,
)
from aquadash.web.templates import render

log = logging.getLogger(__name__)

router = APIRouter(prefix="/procurement", tags=["procurement"])


@router.get("", response_class=HTMLResponse)
def procurement_page(
    request: Request,
    search: str = Query(""),
    status: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    groups = aggregate_by_asset(derive_procurement_items(load_requests(hub, api, flash)))
    filters = ListFilters(
        search=search,
        search_fields=("assetName", "assetId"),
        equals={"procurementStatus": status},
    )
    result = query_list(groups, filters, "latestCreatedAt", DESC, page)

    return render(request, "procurement.html", {
        "page": result,
        "stats": procurement_stats(groups),
        "search": search,
        "status": status,
        "can_mark_ordered": can_mark_ordered,
        "can_complete": can_complete_procurement,
    })


def _apply_item(hub: LiveHub, item: AssetRequestItem) -> None:
    hub.asset_requests.update(reducers.apply_item_updated, item)


def _held_item(hub: LiveHub, item_id: str):
    """The item as last seen on the page, if the collection is loaded."""
    if not hub.asset_requests.loaded:
        return None
    for req in hub.asset_requests.snapshot():
        for item in req.items:
            if item.id == item_id:
                return item
    return None


@router.post("/items/{item_id}/order")
def mark_ordered(
    item_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    held = _held_item(hub, item_id)
    if held is not None and not can_mark_ordered(held):
        flash.notify(ERROR, "Only items that require procurement can be ordered")
        return RedirectResponse("/procurement", status_code=303)

    service = AssetRequestService(api)
    item = run_action(
        flash,
        lambda: service.mark_ordered(item_id),
        success="Item marked as ordered",
        fallback="Failed to mark item as ordered",
    )
    if item is not None:
        _apply_item(hub, item)
    return RedirectResponse("/procurement", status_code=303)


@router.post("/items/{item_id}/complete")
def complete_procurement(
    item_id: str,
    procured_quantity: str = Form("1"),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    held = _held_item(hub, item_id)
    if held is not None and not can_complete_procurement(held):
        flash.notify(ERROR, "Only ordered items can be completed")
        return RedirectResponse("/procurement", status_code=303)

    quantity = clamp_procured_quantity(procured_quantity)
    service = AssetRequestService(api)
    item = run_action(
        flash,
        lambda: service.complete_procurement(item_id, quantity),
        success=f"Procurement completed ({quantity} received)",
        fallback="Failed to complete procurement",
    )
    if item is not None:
        _apply_item(hub, item)
    return RedirectResponse("/procurement", status_code=303)
