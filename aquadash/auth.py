# aquadash/auth.py
"""
Session providers for the two kinds of dashboard users.

A provider is built per request around the Starlette session and the
request's ApiClient (see deps.get_session_provider). It exposes
current_user / login / logout / refresh; nothing is kept in module globals.

Session keys:
  "role"        - "admin" | "employee"
  "user"        - the profile dict the API returned
  "token"       - bearer token, when the API hands one out
  "api_cookies" - auth cookies set by the API
"""

import logging
from typing import Any, MutableMapping, Optional

from aquadash.api_client import ApiClient
from aquadash.errors import ApiError

log = logging.getLogger(__name__)

ROLE_KEY = "role"
USER_KEY = "user"
TOKEN_KEY = "token"
COOKIES_KEY = "api_cookies"
PENDING_OTP_KEY = "pending_employee_id"

ADMIN = "admin"
EMPLOYEE = "employee"


class SessionProvider:
    role: str = ""
    login_path: str = ""
    logout_path: str = ""
    profile_path: str = ""
    # where the profile sits in the API answer: {"admin": {...}} / {"employee": {...}}
    user_field: str = ""

    def __init__(self, session: MutableMapping[str, Any], api: ApiClient):
        self.session = session
        self.api = api

    # ── state ──

    @property
    def current_user(self) -> Optional[dict]:
        if self.session.get(ROLE_KEY) != self.role:
            return None
        return self.session.get(USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def _store(self, user: dict, body: Any) -> None:
        self.session[ROLE_KEY] = self.role
        self.session[USER_KEY] = user
        token = body.get("token") if isinstance(body, dict) else None
        if token:
            self.session[TOKEN_KEY] = token
            self.api.set_token(token)
        cookies = self.api.cookies
        if cookies:
            self.session[COOKIES_KEY] = cookies

    def clear(self) -> None:
        for key in (ROLE_KEY, USER_KEY, TOKEN_KEY, COOKIES_KEY, PENDING_OTP_KEY):
            self.session.pop(key, None)
        self.api.set_token(None)

    def _user_from(self, body: Any) -> Optional[dict]:
        if not isinstance(body, dict):
            return None
        nested = body.get(self.user_field)
        if isinstance(nested, dict):
            return nested
        if "id" in body:
            return body
        return None

    # ── operations ──

    def login(self, credentials: dict) -> dict:
        """
        POST the credentials; on success load the profile and keep it in
        the session. Returns the API's login answer.
        """
        body = self.api.post(self.login_path, credentials, fallback="Failed to login") or {}
        if body.get("authenticated") or body.get("token") or self._user_from(body):
            self._store({}, body)
            user = self._user_from(body) or self._fetch_profile() or {}
            self._store(user, body)
            log.info("%s logged in: %s", self.role, user.get("id"))
        return body

    def logout(self) -> None:
        """The session is cleared even when the API call fails."""
        try:
            self.api.post(self.logout_path, fallback="Failed to logout")
        except ApiError as e:
            log.warning("%s logout failed: %s", self.role, e.message)
        finally:
            self.clear()

    def refresh(self) -> Optional[dict]:
        """
        Re-read the profile. A 401/403 or {"authenticated": false} ends the
        session; other failures leave it as it was.
        """
        try:
            body = self.api.get(self.profile_path, fallback="Failed to fetch profile")
        except ApiError as e:
            if e.status_code in (401, 403):
                self.clear()
                return None
            raise
        if isinstance(body, dict) and body.get("authenticated") is False:
            self.clear()
            return None
        user = self._user_from(body)
        if user is None:
            self.clear()
            return None
        self._store(user, body)
        return user

    def _fetch_profile(self) -> Optional[dict]:
        try:
            return self._user_from(self.api.get(self.profile_path, fallback="Failed to fetch profile"))
        except ApiError as e:
            log.warning("profile fetch after login failed: %s", e.message)
            return None


class AdminSessionProvider(SessionProvider):
    role = ADMIN
    login_path = "/admin/login"
    logout_path = "/admin/logout"
    profile_path = "/admin/profile"
    user_field = "admin"

    def login_with(self, email: str, password: str) -> dict:
        return self.login({"adminEmail": email, "password": password})

    @property
    def display_name(self) -> str:
        user = self.current_user or {}
        return user.get("adminName") or user.get("adminEmail") or ""


class EmployeeSessionProvider(SessionProvider):
    role = EMPLOYEE
    login_path = "/employee/login"
    logout_path = "/employee/logout"
    profile_path = "/employee/profile"
    user_field = "employee"

    def login_with(self, identifier: str, password: str) -> dict:
        """
        Employees with 2FA get {"twoFARequired": true, "employeeId": ...}
        back; the id waits in the session until verify_otp.
        """
        body = self.api.post(
            self.login_path,
            {"identifier": identifier, "password": password},
            fallback="Failed to login",
        ) or {}
        if body.get("twoFARequired"):
            self.session[PENDING_OTP_KEY] = body.get("employeeId")
            return body
        if body.get("authenticated") or body.get("token"):
            self._store({}, body)
            user = self._user_from(body) or self._fetch_profile() or {}
            self._store(user, body)
        return body

    @property
    def otp_pending(self) -> bool:
        return bool(self.session.get(PENDING_OTP_KEY))

    def verify_otp(self, otp: str) -> dict:
        employee_id = self.session.get(PENDING_OTP_KEY)
        body = self.api.post(
            "/employee/verify-otp",
            {"employeeId": employee_id, "otp": otp},
            fallback="Failed to verify OTP",
        ) or {}
        user = self._user_from(body)
        if body.get("authenticated") and user:
            self.session.pop(PENDING_OTP_KEY, None)
            self._store(user, body)
        return body

    @property
    def display_name(self) -> str:
        user = self.current_user or {}
        return f"{user.get('first_name', '')} {user.get('last_name', '')}".strip()


PROVIDERS: dict[str, type[SessionProvider]] = {
    ADMIN: AdminSessionProvider,
    EMPLOYEE: EmployeeSessionProvider,
}


def provider_for(session: MutableMapping[str, Any], api: ApiClient, role: Optional[str] = None) -> SessionProvider:
    """Provider matching the logged-in role (admin when nobody is logged in)."""
    role = role or session.get(ROLE_KEY) or ADMIN
    return PROVIDERS.get(role, AdminSessionProvider)(session, api)
