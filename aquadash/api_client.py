# aquadash/api_client.py
"""
HTTP client for the farm REST API.

One ApiClient per dashboard request (see deps.get_api_client), the session
token is sent as a Bearer header. Every call either returns the decoded JSON
body or raises ApiError with a message fit for a toast.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import httpx

from aquadash.errors import ApiError
from aquadash.settings import settings

log = logging.getLogger(__name__)

DEFAULT_FALLBACK = "Request failed"


def extract_message(response: httpx.Response, fallback: str) -> str:
    """
    Pull a human readable message out of an error response.

    The API answers with {"message": "..."}, {"message": ["...", "..."]}
    (validation pipes) or {"error": "..."}; anything else gets the fallback.
    """
    try:
        body = response.json()
    except ValueError:
        return fallback

    if not isinstance(body, dict):
        return fallback

    message = body.get("message")
    if isinstance(message, list):
        parts = [str(m) for m in message if m]
        if parts:
            return "; ".join(parts)
    elif isinstance(message, str) and message.strip():
        return message

    error = body.get("error")
    if isinstance(error, str) and error.strip():
        return error

    return fallback


class ApiClient:
    """Thin wrapper over httpx.Client bound to API_BASE_URL."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        cookies: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
            cookies=cookies,
        )
        self.set_token(token)

    @property
    def cookies(self) -> dict[str, str]:
        """Auth cookies the API set on this client (kept in the dashboard session)."""
        return dict(self._client.cookies.items())

    def set_token(self, token: Optional[str]) -> None:
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ── core ──

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        params: Optional[dict] = None,
        fallback: str = DEFAULT_FALLBACK,
    ) -> Any:
        """
        Perform a call and return the decoded body (None for an empty body).

        Raises ApiError for transport errors, non-2xx statuses and for 2xx
        bodies shaped like {"error": "..."} - some endpoints report failures
        that way instead of using a status code.
        """
        try:
            response = self._client.request(
                method,
                path,
                json=json,
                data=data,
                files=files,
                params=params,
            )
        except httpx.HTTPError as e:
            log.error("%s %s failed: %s", method, path, e)
            raise ApiError(fallback) from e

        if response.is_error:
            message = extract_message(response, fallback)
            log.error("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code, payload=_safe_json(response))

        if not response.content:
            return None

        body = _safe_json(response)
        if isinstance(body, dict) and set(body) == {"error"}:
            message = body["error"] or fallback
            log.error("%s %s reported error: %s", method, path, message)
            raise ApiError(str(message), status_code=response.status_code, payload=body)

        return body

    def get(self, path: str, *, params: Optional[dict] = None, fallback: str = DEFAULT_FALLBACK) -> Any:
        return self.request("GET", path, params=params, fallback=fallback)

    def get_or_none(self, path: str, *, fallback: str = DEFAULT_FALLBACK) -> Any:
        """GET a single resource; a 404 means "absent" and returns None."""
        try:
            return self.get(path, fallback=fallback)
        except ApiError as e:
            if e.is_not_found:
                return None
            raise

    def post(self, path: str, json: Any = None, *, data=None, files=None, fallback: str = DEFAULT_FALLBACK) -> Any:
        return self.request("POST", path, json=json, data=data, files=files, fallback=fallback)

    def put(self, path: str, json: Any = None, *, data=None, files=None, fallback: str = DEFAULT_FALLBACK) -> Any:
        return self.request("PUT", path, json=json, data=data, files=files, fallback=fallback)

    def patch(self, path: str, json: Any = None, *, fallback: str = DEFAULT_FALLBACK) -> Any:
        return self.request("PATCH", path, json=json, fallback=fallback)

    def delete(self, path: str, *, fallback: str = DEFAULT_FALLBACK) -> Any:
        return self.request("DELETE", path, fallback=fallback)


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def open_client(
    token: Optional[str] = None,
    cookies: Optional[dict[str, str]] = None,
) -> Iterator[ApiClient]:
    """FastAPI dependency body: one client per request, closed afterwards."""
    client = ApiClient(token=token, cookies=cookies)
    try:
        yield client
    finally:
        client.close()
