# aquadash/app.py
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.middleware.sessions import SessionMiddleware

from aquadash.api_client import ApiClient
from aquadash.auth import ADMIN, EMPLOYEE, EmployeeSessionProvider, SessionProvider, provider_for
from aquadash.deps import get_api_client, get_current_user, get_session_provider
from aquadash.errors import ApiError
from aquadash.realtime.hub import LiveHub
from aquadash.routers import (
    asset_requests,
    assets,
    cages,
    events,
    feeds,
    laboratory_boxes,
    medications,
    procurement,
    stock_requests,
)
from aquadash.settings import settings
from aquadash.web.templates import render

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


app = FastAPI(title=settings.APP_TITLE)

app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

# one hub per process: bus, activity feed, live collections
app.state.hub = LiveHub()


@app.on_event("shutdown")
def close_hub():
    app.state.hub.close()


app.include_router(asset_requests.router)
app.include_router(procurement.router)
app.include_router(assets.router)
app.include_router(cages.router)
app.include_router(feeds.router)
app.include_router(medications.router)
app.include_router(laboratory_boxes.router)
app.include_router(stock_requests.router)
app.include_router(events.router)


@app.get("/", include_in_schema=False)
def root(request: Request, current_user: dict = Depends(get_current_user)):
    if request.session.get("role") == ADMIN:
        return RedirectResponse("/asset-requests")
    return RedirectResponse("/stock-requests")


# ═══════════════════════════════════════════════════════════
# Login / logout
# ═══════════════════════════════════════════════════════════

def _login_page(request: Request, error: str | None = None, role: str = ADMIN, status_code: int = 200):
    return render(request, "login.html", {
        "error": error,
        "login_role": role,
        "otp_pending": bool(request.session.get("pending_employee_id")),
    }, status_code=status_code)


@app.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return _login_page(request)


@app.post("/login")
async def login_submit(request: Request, api: ApiClient = Depends(get_api_client)):
    form = await request.form()
    role = form.get("role", ADMIN)
    identifier = str(form.get("identifier", "")).strip()
    password = str(form.get("password", ""))

    if not identifier or not password:
        return _login_page(request, "Please enter your login and password", role, status_code=400)

    provider = provider_for(request.session, api, role if role in (ADMIN, EMPLOYEE) else ADMIN)
    try:
        body = provider.login_with(identifier, password)
    except ApiError as e:
        return _login_page(request, e.message, role, status_code=400)

    if body.get("twoFARequired"):
        return RedirectResponse("/login/otp", status_code=status.HTTP_303_SEE_OTHER)

    if not provider.is_authenticated:
        return _login_page(request, body.get("message") or "Invalid credentials", role, status_code=400)

    log.info("login: %s %s", provider.role, provider.display_name)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/login/otp", response_class=HTMLResponse)
def otp_page(request: Request):
    if not request.session.get("pending_employee_id"):
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "otp.html", {"error": None})


@app.post("/login/otp")
async def otp_submit(request: Request, api: ApiClient = Depends(get_api_client)):
    form = await request.form()
    provider = EmployeeSessionProvider(request.session, api)
    if not provider.otp_pending:
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    try:
        provider.verify_otp(str(form.get("otp", "")).strip())
    except ApiError as e:
        return render(request, "otp.html", {"error": e.message}, status_code=400)

    if not provider.is_authenticated:
        return render(request, "otp.html", {"error": "Invalid or expired code"}, status_code=400)
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/logout")
def logout(request: Request, provider: SessionProvider = Depends(get_session_provider)):
    provider.logout()
    request.session.clear()
    return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/profile/refresh")
def refresh_profile(provider: SessionProvider = Depends(get_session_provider)):
    """Re-read the profile; an expired API session sends the user to /login."""
    if provider.refresh() is None:
        return RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
