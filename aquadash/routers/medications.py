# aquadash/routers/medications.py
"""
Medications given to cages: list (search, cage and method filter, page),
record, update, delete.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.errors import ApiError
from aquadash.realtime.hub import LiveHub
from aquadash.routers.feeds import load_cages
from aquadash.schemas.medications import MedicationData, MedicationMethod
from aquadash.services.employee_service import EmployeeService
from aquadash.services.list_query import ALL, DESC, ListFilters, query_list
from aquadash.services.medication_service import MedicationService, validate_medication_data
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.web.templates import render

router = APIRouter(prefix="/medications", tags=["medications"])

FIELDS = ("name", "dosage", "method", "reason", "startDate", "endDate", "cageId", "administeredBy")


async def _read_form(request: Request) -> dict:
    form = await request.form()
    return {name: (str(form.get(name) or "").strip() or None) for name in FIELDS}


def _to_data(raw: dict, flash: SessionFlash):
    check = validate_medication_data(raw)
    if not check.is_valid:
        for message in check.errors:
            flash.notify(ERROR, message)
        return None
    return MedicationData(**{k: v for k, v in raw.items() if v is not None})


@router.get("", response_class=HTMLResponse)
def medications_page(
    request: Request,
    search: str = Query(""),
    cage: str = Query(ALL),
    method: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        medications = hub.medications.snapshot(MedicationService(api).list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        medications = []

    # employees for the "administered by" picker, not kept live
    employees = run_action(flash, lambda: EmployeeService(api).list_all()) or []

    cages = load_cages(hub, api, flash)
    filters = ListFilters(
        search=search,
        search_fields=("name", "dosage", "reason", "cage.cageName"),
        equals={"cageId": cage, "method": method},
    )
    return render(request, "medications.html", {
        "page": query_list(medications, filters, "startDate", DESC, page),
        "cages": cages,
        "cage_names": {c.id: c.cageName for c in cages},
        "employees": employees,
        "methods": list(MedicationMethod),
        "search": search,
        "cage": cage,
        "method": method,
    })


@router.post("")
async def record_medication(
    request: Request,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    data = _to_data(await _read_form(request), flash)
    if data is not None:
        medication = run_action(flash, lambda: MedicationService(api).create(data), success="Medication recorded")
        if medication is not None:
            hub.medications.replace(medication)
    return RedirectResponse("/medications", status_code=303)


@router.post("/{medication_id}/update")
async def update_medication(
    medication_id: str,
    request: Request,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    data = _to_data(await _read_form(request), flash)
    if data is not None:
        medication = run_action(
            flash,
            lambda: MedicationService(api).update(medication_id, data),
            success="Medication updated",
        )
        if medication is not None:
            hub.medications.replace(medication)
    return RedirectResponse("/medications", status_code=303)


@router.post("/{medication_id}/delete")
def delete_medication(
    medication_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    deleted = run_action(flash, lambda: MedicationService(api).delete(medication_id), success="Medication deleted")
    if deleted is not None:
        hub.medications.remove(medication_id)
    return RedirectResponse("/medications", status_code=303)
