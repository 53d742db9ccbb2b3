# aquadash/routers/stock_requests.py
"""
Site requisitions (stock requests), open to admins and employees.

- GET  /stock-requests                   - list (search, status, page)
- GET  /stock-requests/{id}              - detail with items, attachments, comments
- POST /stock-requests/{id}/attachments  - upload a PDF / PNG / JPEG (≤ 5 MB)
- POST /stock-requests/{id}/comments
- POST /stock-requests/{id}/approve      - admin; approved quantity per item
- POST /stock-requests/{id}/reject       - admin
- POST /stock-requests/{id}/issue        - admin; issued quantity per item
- POST /stock-requests/{id}/receive      - site confirms what arrived
"""

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.auth import ADMIN, ROLE_KEY
from aquadash.deps import get_api_client, get_current_admin, get_current_user, get_flash
from aquadash.errors import ApiError, FormValidationError
from aquadash.schemas.stock_requests import (
    ActorRole,
    IssueLine,
    IssueMaterials,
    ItemModification,
    ModifyAndApprove,
    ReceiveLine,
    ReceiveMaterials,
    StockRequestStatus,
)
from aquadash.services.list_query import ALL, DESC, ListFilters, query_list
from aquadash.services.notifications import ERROR, SUCCESS, SessionFlash, run_action
from aquadash.services.stock_request_service import StockRequestService
from aquadash.settings import settings
from aquadash.web.templates import render

log = logging.getLogger(__name__)

router = APIRouter(prefix="/stock-requests", tags=["stock-requests"])


def _actor_role(request: Request) -> ActorRole:
    return ActorRole.ADMIN if request.session.get(ROLE_KEY) == ADMIN else ActorRole.EMPLOYEE


@router.get("", response_class=HTMLResponse)
def stock_requests_page(
    request: Request,
    search: str = Query(""),
    status: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_user: dict = Depends(get_current_user),
):
    try:
        requests = StockRequestService(api).list_all()
    except ApiError as e:
        flash.notify(ERROR, e.message)
        requests = []

    filters = ListFilters(search=search, search_fields=("ref_no", "notes", "site.name"), equals={"status": status})
    return render(request, "stock_requests.html", {
        "page": query_list(requests, filters, "createdAt", DESC, page),
        "search": search,
        "status": status,
    })


@router.get("/{request_id}", response_class=HTMLResponse)
def stock_request_detail(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_user: dict = Depends(get_current_user),
):
    stock_request = run_action(flash, lambda: StockRequestService(api).get(request_id))
    if stock_request is None:
        flash.notify(ERROR, "Requisition not found")
        return RedirectResponse("/stock-requests", status_code=303)

    return render(request, "stock_request_detail.html", {"sr": stock_request})


@router.post("/{request_id}/attachments")
async def upload_attachment(
    request: Request,
    request_id: str,
    file: UploadFile = File(...),
    description: str = Form(""),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_user: dict = Depends(get_current_user),
):
    # one byte past the limit is enough to reject an oversized file
    content = await file.read(settings.ATTACHMENT_MAX_BYTES + 1)
    service = StockRequestService(api)
    try:
        run_action(
            flash,
            lambda: service.upload_attachment(
                request_id,
                filename=file.filename or "",
                content=content,
                content_type=file.content_type,
                role=_actor_role(request),
                user_id=str(current_user.get("id", "")),
                description=description.strip() or None,
            ),
            success="Attachment uploaded",
            fallback="Failed to upload attachment",
        )
    except FormValidationError as e:
        for message in e.messages:
            flash.notify(ERROR, message)
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)


@router.post("/{request_id}/comments")
def add_comment(
    request: Request,
    request_id: str,
    description: str = Form(""),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_user: dict = Depends(get_current_user),
):
    service = StockRequestService(api)
    try:
        comments = service.add_comment(
            request_id,
            user_id=str(current_user.get("id", "")),
            role=_actor_role(request),
            description=description,
        )
    except FormValidationError as e:
        for message in e.messages:
            flash.notify(ERROR, message)
    except ApiError as e:
        flash.notify(ERROR, e.message or "Failed to add comment")
    else:
        flash.notify(SUCCESS, f"Comment added ({len(comments)} in total)")
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)


# ═══════════════════════════════════════════════════════════
# Approve / reject / issue / receive
# ═══════════════════════════════════════════════════════════

APPROVABLE = {StockRequestStatus.PENDING}
ISSUABLE = {StockRequestStatus.APPROVED, StockRequestStatus.PARTIALLY_ISSUED}
RECEIVABLE = {StockRequestStatus.ISSUED, StockRequestStatus.PARTIALLY_ISSUED}


def _quantities(form, prefix: str, items) -> dict[str, float]:
    """`{prefix}_{item id}` form fields → non-negative numbers; blank fields are skipped."""
    values, errors = {}, []
    for index, item in enumerate(items, start=1):
        raw = str(form.get(f"{prefix}_{item.id}") or "").strip()
        if not raw:
            continue
        try:
            qty = float(raw)
        except ValueError:
            errors.append(f"Item {index}: quantity must be a number")
            continue
        if qty < 0:
            errors.append(f"Item {index}: quantity cannot be negative")
            continue
        values[item.id] = qty
    if errors:
        raise FormValidationError(errors)
    return values


def _load_for(flash: SessionFlash, service: StockRequestService, request_id: str, allowed: set, action: str):
    stock_request = run_action(flash, lambda: service.get(request_id))
    if stock_request is None:
        flash.notify(ERROR, "Requisition not found")
        return None
    if stock_request.status not in allowed:
        flash.notify(ERROR, f"Requisition cannot be {action} (current: {stock_request.status.value})")
        return None
    return stock_request


@router.post("/{request_id}/approve")
async def approve_stock_request(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    form = await request.form()
    service = StockRequestService(api)
    stock_request = _load_for(flash, service, request_id, APPROVABLE, "approved")
    if stock_request is None:
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    try:
        approved = _quantities(form, "approve", stock_request.requestItems)
    except FormValidationError as e:
        for message in e.messages:
            flash.notify(ERROR, message)
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    data = ModifyAndApprove(
        userId=str(current_admin.get("id", "")),
        userRole=ActorRole.ADMIN,
        notes=str(form.get("notes") or "").strip() or None,
        itemModifications=[
            ItemModification(requestItemId=item_id, qtyApproved=qty) for item_id, qty in approved.items()
        ],
    )
    run_action(
        flash,
        lambda: service.modify_and_approve(request_id, data),
        success="Requisition approved",
        fallback="Failed to update request",
    )
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)


@router.post("/{request_id}/reject")
def reject_stock_request(
    request_id: str,
    notes: str = Form(""),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    service = StockRequestService(api)
    if _load_for(flash, service, request_id, APPROVABLE, "rejected") is not None:
        run_action(
            flash,
            lambda: service.reject(request_id, notes.strip() or None),
            success="Requisition rejected",
            fallback="Failed to reject request",
        )
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)


@router.post("/{request_id}/issue")
async def issue_stock_request(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    form = await request.form()
    service = StockRequestService(api)
    stock_request = _load_for(flash, service, request_id, ISSUABLE, "issued")
    if stock_request is None:
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    try:
        issued = _quantities(form, "issue", stock_request.requestItems)
    except FormValidationError as e:
        for message in e.messages:
            flash.notify(ERROR, message)
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    lines = [IssueLine(requestItemId=item_id, qtyIssued=qty) for item_id, qty in issued.items() if qty > 0]
    if not lines:
        flash.notify(ERROR, "Enter at least one quantity to issue")
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    data = IssueMaterials(requestId=request_id, issuedByAdminId=str(current_admin.get("id", "")), items=lines)
    run_action(flash, lambda: service.issue_materials(data), success="Materials issued", fallback="Failed to issue materials")
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)


@router.post("/{request_id}/receive")
async def receive_stock_request(
    request: Request,
    request_id: str,
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_user: dict = Depends(get_current_user),
):
    form = await request.form()
    service = StockRequestService(api)
    stock_request = _load_for(flash, service, request_id, RECEIVABLE, "received")
    if stock_request is None:
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    try:
        received = _quantities(form, "receive", stock_request.requestItems)
    except FormValidationError as e:
        for message in e.messages:
            flash.notify(ERROR, message)
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    lines = [ReceiveLine(requestItemId=item_id, qtyReceived=qty) for item_id, qty in received.items() if qty > 0]
    if not lines:
        flash.notify(ERROR, "Enter at least one quantity received")
        return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)

    user_id = str(current_user.get("id", ""))
    if _actor_role(request) == ActorRole.ADMIN:
        data = ReceiveMaterials(requestId=request_id, receivedByAdminId=user_id, items=lines)
    else:
        data = ReceiveMaterials(requestId=request_id, receivedByEmployeeId=user_id, items=lines)
    run_action(flash, lambda: service.receive_materials(data), success="Materials received", fallback="Failed to receive materials")
    return RedirectResponse(f"/stock-requests/{request_id}", status_code=303)
