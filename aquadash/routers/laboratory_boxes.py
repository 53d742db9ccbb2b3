# aquadash/routers/laboratory_boxes.py
"""
Laboratory boxes: list with code / name search, create, delete.
"""

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.errors import ApiError
from aquadash.realtime.hub import LiveHub
from aquadash.schemas.laboratory_boxes import LaboratoryBoxData
from aquadash.services.laboratory_box_service import (
    LaboratoryBoxService,
    search_boxes,
    validate_laboratory_box_data,
)
from aquadash.services.list_query import paginate, sort_items
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.web.templates import render

router = APIRouter(prefix="/laboratory-boxes", tags=["laboratory-boxes"])


@router.get("", response_class=HTMLResponse)
def laboratory_boxes_page(
    request: Request,
    search: str = Query(""),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        boxes = hub.laboratory_boxes.snapshot(LaboratoryBoxService(api).list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        boxes = []

    found = sort_items(search_boxes(boxes, search), "code")
    return render(request, "laboratory_boxes.html", {
        "page": paginate(found, page),
        "search": search,
    })


@router.post("")
def create_laboratory_box(
    name: str = Form(""),
    code: str = Form(""),
    description: str = Form(""),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    raw = {"name": name.strip(), "code": code.strip(), "description": description.strip() or None}
    check = validate_laboratory_box_data(raw)
    if not check.is_valid:
        for message in check.errors:
            flash.notify(ERROR, message)
        return RedirectResponse("/laboratory-boxes", status_code=303)

    box = run_action(
        flash,
        lambda: LaboratoryBoxService(api).create(LaboratoryBoxData(**raw)),
        success="Laboratory box created",
    )
    if box is not None:
        hub.laboratory_boxes.replace(box)
    return RedirectResponse("/laboratory-boxes", status_code=303)


@router.post("/{box_id}/delete")
def delete_laboratory_box(
    box_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    deleted = run_action(
        flash,
        lambda: LaboratoryBoxService(api).delete(box_id),
        success="Laboratory box deleted",
    )
    if deleted is not None:
        hub.laboratory_boxes.remove(box_id)
    return RedirectResponse("/laboratory-boxes", status_code=303)
