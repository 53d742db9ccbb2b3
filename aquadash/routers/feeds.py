# aquadash/routers/feeds.py
"""
Feed records: feed given to a cage. List (search, cage filter, page),
record, delete.
"""

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from aquadash.api_client import ApiClient
from aquadash.deps import get_api_client, get_current_admin, get_flash, get_hub
from aquadash.errors import ApiError
from aquadash.realtime.hub import LiveHub
from aquadash.schemas.cages import Cage
from aquadash.schemas.feeds import FeedData
from aquadash.services.cage_service import CageService
from aquadash.services.feed_service import FeedService, validate_feed_data
from aquadash.services.list_query import ALL, DESC, ListFilters, query_list
from aquadash.services.notifications import ERROR, SessionFlash, run_action
from aquadash.web.templates import render

router = APIRouter(prefix="/feeds", tags=["feeds"])


def load_cages(hub: LiveHub, api: ApiClient, flash: SessionFlash) -> list[Cage]:
    """Cages for the pickers; shares the live collection with the cages page."""
    try:
        return hub.cages.snapshot(CageService(api).list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        return []


@router.get("", response_class=HTMLResponse)
def feeds_page(
    request: Request,
    search: str = Query(""),
    cage: str = Query(ALL),
    page: int = Query(1),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    try:
        feeds = hub.feeds.snapshot(FeedService(api).list_all)
    except ApiError as e:
        flash.notify(ERROR, e.message)
        feeds = []

    cages = load_cages(hub, api, flash)
    filters = ListFilters(
        search=search,
        search_fields=("feed.name", "cage.cageName", "cage.cageCode", "notes"),
        equals={"cageId": cage},
    )
    return render(request, "feeds.html", {
        "page": query_list(feeds, filters, "createdAt", DESC, page),
        "cages": cages,
        "cage_names": {c.id: c.cageName for c in cages},
        "search": search,
        "cage": cage,
    })


@router.post("")
def record_feed(
    cageId: str = Form(""),
    feedId: str = Form(""),
    quantityGiven: str = Form(""),
    notes: str = Form(""),
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    raw = {"cageId": cageId.strip(), "feedId": feedId.strip(), "quantityGiven": quantityGiven.strip()}
    check = validate_feed_data(raw)
    if not check.is_valid:
        for message in check.errors:
            flash.notify(ERROR, message)
        return RedirectResponse("/feeds", status_code=303)

    data = FeedData(**raw, notes=notes.strip() or None)
    record = run_action(flash, lambda: FeedService(api).create(data), success="Feed recorded")
    if record is not None:
        hub.feeds.replace(record)
    return RedirectResponse("/feeds", status_code=303)


@router.post("/{feed_id}/delete")
def delete_feed(
    feed_id: str,
    api: ApiClient = Depends(get_api_client),
    hub: LiveHub = Depends(get_hub),
    flash: SessionFlash = Depends(get_flash),
    current_admin: dict = Depends(get_current_admin),
):
    deleted = run_action(flash, lambda: FeedService(api).delete(feed_id), success="Feed record deleted")
    if deleted is not None:
        hub.feeds.remove(feed_id)
    return RedirectResponse("/feeds", status_code=303)
