# aquadash/routers/cages.py
"""
Cages: list with search / status filter / paging, create, update, delete.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.errors import ApiError
from aquadash.realtime.hub import LiveHub
from aquadash.schemas.cages import CageData, CageNetType, CageStatus
from aquadash.services.cage_service import CageService, validate_cage_data
from aquadash.services.list_query import ALL, ListFilters, query_list
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.web.templates import render

router = APIRouter(prefix="/cages", tags=["cages"])

FIELDS = (
    "cageCode", "cageName", "cageNetType", "cageDepth", "cageStatus",
    "cageCapacity", "cageType", "cageVolume", "stockingDate",
)


async def _read_form(request: Request) -> dict:
    form = await request.form()
    return {name: (str(form.get(name) or "").strip() or None) for name in FIELDS}


def _to_data(raw: dict, flash: SessionFlash):
    """Form values → CageData, or None after flashing every problem."""
    check = validate_cage_data(raw)
    if not check.is_valid:
        for message in check.errors:
            flash.notify(ERROR, message)
        return None
    return CageData(**{k: v for k, v in raw.items() if v is not None})


@router.get("", response_class=HTMLResponse)
def cages_page(
    request: Request,
    search: str = Query(""),
    status: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        cages = hub.cages.snapshot(CageService(api).list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        cages = []

    filters = ListFilters(
        search=search,
        search_fields=("cageCode", "cageName", "cageType"),
        equals={"cageStatus": status},
    )
    return render(request, "cages.html", {
        "page": query_list(cages, filters, "cageCode", page=page),
        "search": search,
        "status": status,
        "net_types": list(CageNetType),
        "cage_statuses": list(CageStatus),
    })


@router.post("")
async def create_cage(
    request: Request,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    data = _to_data(await _read_form(request), flash)
    if data is not None:
        cage = run_action(flash, lambda: CageService(api).create(data), success="Cage created")
        if cage is not None:
            hub.cages.replace(cage)
    return RedirectResponse("/cages", status_code=303)


@router.post("/{cage_id}/update")
async def update_cage(
    cage_id: str,
    request: Request,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    data = _to_data(await _read_form(request), flash)
    if data is not None:
        cage = run_action(flash, lambda: CageService(api).update(cage_id, data), success="Cage updated")
        if cage is not None:
            hub.cages.replace(cage)
    return RedirectResponse("/cages", status_code=303)


@router.post("/{cage_id}/delete")
def delete_cage(
    cage_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    deleted = run_action(flash, lambda: CageService(api).delete(cage_id), success="Cage deleted")
    if deleted is not None:
        hub.cages.remove(cage_id)
    return RedirectResponse("/cages", status_code=303)
