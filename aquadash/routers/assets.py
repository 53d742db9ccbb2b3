# aquadash/routers/assets.py
"""
Asset catalogue: list (search, status, page), create with optional image,
status change. Not kept live; every visit fetches.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash
from aquadash.errors import ApiError
from aquadash.schemas.assets import AssetStatus
from aquadash.services.asset_service import AssetService
from aquadash.services.list_query import ALL, ListFilters, query_list
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.web.templates import render

router = APIRouter(prefix="/assets", tags=["assets"])


@router.get("", response_class=HTMLResponse)
def assets_page(
    request: Request,
    search: str = Query(""),
    status: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        assets = AssetService(api).list_all()
    except ApiError as e:
        flash.notify(ERROR, e.message)
        assets = []

    filters = ListFilters(
        search=search,
        search_fields=("name", "category", "location"),
        equals={"status": status},
    )
    return render(request, "assets.html", {
        "page": query_list(assets, filters, "name", page=page),
        "search": search,
        "status": status,
        "asset_statuses": list(AssetStatus),
    })


@router.post("")
async def create_asset(
    name: str = Form(""),
    category: str = Form(""),
    quantity: str = Form("0"),
    location: str = Form(""),
    value: str = Form(""),
    description: str = Form(""),
    image: Optional[UploadFile] = File(None),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    if not name.strip():
        flash.notify(ERROR, "Name is required")
        return RedirectResponse("/assets", status_code=303)

    fields = {
        "name": name.strip(),
        "category": category.strip() or None,
        "quantity": quantity.strip() or "0",
        "location": location.strip() or None,
        "value": value.strip() or None,
        "description": description.strip() or None,
    }
    upload = None
    if image is not None and image.filename:
        upload = (image.filename, await image.read(), image.content_type)

    run_action(flash, lambda: AssetService(api).create(fields, upload), success="Asset created")
    return RedirectResponse("/assets", status_code=303)


@router.post("/{asset_id}/status")
def change_status(
    asset_id: str,
    status: str = Form(...),
    api: ApiClient = Depends(get_api_client),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        new_status = AssetStatus(status)
    except ValueError:
        flash.notify(ERROR, f"Unknown asset status: {status}")
        return RedirectResponse("/assets", status_code=303)

    run_action(
        flash,
        lambda: AssetService(api).update_status(asset_id, new_status),
        success=f"Asset marked {new_status.value.lower()}",
    )
    return RedirectResponse("/assets", status_code=303)
