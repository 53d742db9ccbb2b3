# aquadash/deps.py
"""
FastAPI dependencies shared by the routers.

- get_api_client      - ApiClient carrying the session token / API cookies
- get_session_provider - admin or employee provider for the logged-in role
- get_current_user    - 303 to /login when nobody is logged in
- get_current_admin   - 403 for employees
- get_flash           - per-operator toasts
- get_hub             - live collections (app.state.hub)
"""

from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from aquadash.api_client import ApiClient, open_client
from aquadash.auth import ADMIN, COOKIES_KEY, ROLE_KEY, TOKEN_KEY, SessionProvider, provider_for
from aquadash.realtime.hub import LiveHub
from aquadash.services.notifications import SessionFlash
from aquadash.settings import settings


def get_api_client(request: Request) -> Iterator[ApiClient]:
    yield from open_client(
        token=request.session.get(TOKEN_KEY),
        cookies=request.session.get(COOKIES_KEY),
    )


def get_session_provider(
    request: Request,
    api: ApiClient = Depends(get_api_client),
) -> SessionProvider:
    return provider_for(request.session, api)


def get_current_user(provider: SessionProvider = Depends(get_session_provider)) -> dict:
    """
    The logged-in user's profile from the session.
    Not logged in: 303 to /login.
    """
    user = provider.current_user
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Not authenticated",
            headers={"Location": "/login"},
        )
    return user


def get_current_admin(
    request: Request,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Approvals, procurement and farm records are admin-only."""
    if request.session.get(ROLE_KEY) != ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can manage this section.",
        )
    return current_user


def get_flash(request: Request) -> SessionFlash:
    return SessionFlash(request.session)


def get_hub(request: Request) -> LiveHub:
    return request.app.state.hub


def verify_events_secret(x_events_secret: Optional[str] = Header(None)) -> None:
    """The socket relay signs its posts with X-Events-Secret."""
    if not settings.EVENTS_SECRET or x_events_secret != settings.EVENTS_SECRET:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid events secret")
