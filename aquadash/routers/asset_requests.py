# aquadash/routers/asset_requests.py
"""
Asset requests: list, approve & issue, reject, Excel export.

Pages:
- GET  /asset-requests                       - table (search, status, sort, page)
- GET  /asset-requests/export.xlsx           - filtered table as a workbook
- GET  /asset-requests/{id}/approve          - approve & issue form
- POST /asset-requests/{id}/approve          - send issued quantities
- POST /asset-requests/{id}/reject

Nothing changes locally until the API answers; the returned request is then
merged over the one in the live collection (answers omit the embedded
employee and assets).
"""

import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, StreamingResponse
from openpyxl import Workbook

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.errors import ApiError, FormValidationError
from aquadash.realtime import reducers
from aquadash.realtime.hub import LiveHub
from aquadash.schemas.asset_requests import AssetRequest, IssuedItem
from aquadash.services.asset_request_service import AssetRequestService
from aquadash.services.list_query import ALL, DESC, ListFilters, filter_items, query_list, sort_items
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.services.request_workflow import (
    build_approve_payload,
    can_approve,
    can_reject,
    default_issue_quantities,
    expected_item_outcome,
    request_summary,
)
from aquadash.utils.dates import format_datetime
from aquadash.web.templates import render

log = logging.getLogger(__name__)

router = APIRouter(prefix="/asset-requests", tags=["asset-requests"])

SEARCH_FIELDS = ("id", "description", "employee.full_name", "status")
SORT_KEYS = ("createdAt", "updatedAt", "status", "employee.full_name")


def load_requests(hub: LiveHub, api: ApiClient, flash: SessionFlash) -> list[AssetRequest]:
    """Snapshot of the live collection; a failed first load shows an empty table."""
    service = AssetRequestService(api)
    try:
        return hub.asset_requests.snapshot(service.list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        return []


def _filters(search: str, status: str) -> ListFilters:
    return ListFilters(search=search, search_fields=SEARCH_FIELDS, equals={"status": status})


def _find(hub: LiveHub, api: ApiClient, flash: SessionFlash, request_id: str) -> Optional[AssetRequest]:
    found = hub.asset_requests.get(request_id)
    if found is None:
        found = run_action(flash, lambda: AssetRequestService(api).get(request_id))
    return found


# ═══════════════════════════════════════════════════════════
# List
# ═══════════════════════════════════════════════════════════

@router.get("", response_class=HTMLResponse)
def asset_requests_page(
    request: Request,
    search: str = Query(""),
    status: str = Query(ALL),
    sort: str = Query("createdAt"),
    order: str = Query(DESC),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    requests = load_requests(hub, api, flash)
    sort = sort if sort in SORT_KEYS else "createdAt"
    result = query_list(requests, _filters(search, status), sort, order, page)

    return render(request, "asset_requests.html", {
        "page": result,
        "summaries": {r.id: request_summary(r) for r in result.items},
        "search": search,
        "status": status,
        "sort": sort,
        "order": order,
        "can_approve": can_approve,
        "can_reject": can_reject,
    })


@router.get("/export.xlsx")
def asset_requests_xlsx(
    search: str = Query(""),
    status: str = Query(ALL),
    sort: str = Query("createdAt"),
    order: str = Query(DESC),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    requests = load_requests(hub, api, flash)
    sort = sort if sort in SORT_KEYS else "createdAt"
    rows = sort_items(filter_items(requests, _filters(search, status)), sort, order)

    wb = Workbook()
    ws = wb.active
    ws.title = "Asset requests"

    ws.append(["Request", "Employee", "Status", "Asset", "Requested", "Issued", "Item status", "Procurement", "Created"])

    for r in rows:
        employee = r.employee.full_name if r.employee else r.employeeId
        for item in r.items or [None]:
            ws.append([
                r.id,
                employee,
                r.status.value,
                item.asset.name if item and item.asset else "",
                item.quantity if item else "",
                item.issued if item else "",
                item.status.value if item else "",
                item.procurementStatus.value if item else "",
                format_datetime(r.createdAt) if r.createdAt else "",
            ])

    stream = io.BytesIO()
    wb.save(stream)
    stream.seek(0)

    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="asset_requests.xlsx"'},
    )


# ═══════════════════════════════════════════════════════════
# Approve & issue
# ═══════════════════════════════════════════════════════════

def _approve_context(req: AssetRequest, quantities: dict, errors: dict) -> dict:
    previews = {}
    for item in req.items:
        try:
            qty = int(quantities.get(item.id, 0))
        except (TypeError, ValueError):
            qty = 0
        previews[item.id] = expected_item_outcome(item, item.issued + qty)
    return {
        "req": req,
        "quantities": quantities,
        "previews": previews,
        "errors": errors,
        "summary": request_summary(req),
    }


@router.get("/{request_id}/approve", response_class=HTMLResponse)
def approve_form(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    req = _find(hub, api, flash, request_id)
    if req is None:
        flash.notify(ERROR, "Asset request not found")
        return RedirectResponse("/asset-requests", status_code=303)
    if not can_approve(req):
        flash.notify(ERROR, f"Only pending requests can be approved (current: {req.status.value})")
        return RedirectResponse("/asset-requests", status_code=303)

    return render(request, "approve.html", _approve_context(req, default_issue_quantities(req), {}))


@router.post("/{request_id}/approve")
async def approve_submit(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    form = await request.form()
    req = _find(hub, api, flash, request_id)
    if req is None or not can_approve(req):
        flash.notify(ERROR, "Only pending requests can be approved")
        return RedirectResponse("/asset-requests", status_code=303)

    edited = {item.id: form.get(f"qty_{item.id}", "") for item in req.items}
    try:
        payload = build_approve_payload(req, edited)
    except FormValidationError as e:
        return render(request, "approve.html", _approve_context(req, edited, e.errors), status_code=422)

    issued = [IssuedItem(**row) for row in payload["issuedItems"]]
    service = AssetRequestService(api)
    updated = run_action(
        flash,
        lambda: service.approve_and_issue(request_id, issued),
        success="Request approved and assets issued",
        fallback="Failed to approve and issue asset request",
    )
    if updated is None:
        return RedirectResponse(f"/asset-requests/{request_id}/approve", status_code=303)

    hub.asset_requests.update(reducers.upsert_request, updated)
    return RedirectResponse("/asset-requests", status_code=303)


@router.post("/{request_id}/reject")
def reject_request(
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    req = _find(hub, api, flash, request_id)
    if req is None or not can_reject(req):
        flash.notify(ERROR, "Only pending requests can be rejected")
        return RedirectResponse("/asset-requests", status_code=303)

    service = AssetRequestService(api)
    updated = run_action(
        flash,
        lambda: service.reject(request_id),
        success="Request rejected",
        fallback="Failed to reject asset request",
    )
    if updated is not None:
        # the answer is the bare request row
        hub.asset_requests.update(reducers.upsert_request, updated)
    return RedirectResponse("/asset-requests", status_code=303)
