"""
Tests for ApiClient error handling.
"""

import httpx
import pytest

from aquadash.errors import ApiError


def _json(status, body):
    return lambda request: httpx.Response(status, json=body)


class TestApiClient:

    def test_returns_decoded_body(self, api_factory):
        api = api_factory(_json(200, [{"id": "c1"}]))
        assert api.get("/cages") == [{"id": "c1"}]

    def test_empty_body_is_none(self, api_factory):
        api = api_factory(lambda r: httpx.Response(204))
        assert api.delete("/cages/1") is None

    def test_error_message_from_body(self, api_factory):
        api = api_factory(_json(400, {"message": "Cage code already exists"}))
        with pytest.raises(ApiError) as exc:
            api.post("/cages", {}, fallback="Failed to create cage")
        assert exc.value.message == "Cage code already exists"
        assert exc.value.status_code == 400

    def test_message_list_joined(self, api_factory):
        api = api_factory(_json(400, {"message": ["name should not be empty", "code must be a string"]}))
        with pytest.raises(ApiError) as exc:
            api.post("/laboratory-box", {})
        assert exc.value.message == "name should not be empty; code must be a string"

    def test_error_field_used(self, api_factory):
        api = api_factory(_json(500, {"error": "Database unavailable"}))
        with pytest.raises(ApiError, match="Database unavailable"):
            api.get("/feeds")

    def test_fallback_when_body_is_not_json(self, api_factory):
        api = api_factory(lambda r: httpx.Response(502, text="<html>Bad gateway</html>"))
        with pytest.raises(ApiError) as exc:
            api.get("/asset-requests", fallback="Failed to fetch asset requests")
        assert exc.value.message == "Failed to fetch asset requests"

    def test_error_body_with_success_status(self, api_factory):
        """Some endpoints report failures as 200 {"error": "..."}."""
        api = api_factory(_json(200, {"error": "Insufficient stock"}))
        with pytest.raises(ApiError, match="Insufficient stock"):
            api.patch("/asset-requests/r1/approve", {})

    def test_transport_error_uses_fallback(self, api_factory):
        def down(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = api_factory(down)
        with pytest.raises(ApiError) as exc:
            api.get("/cages", fallback="Failed to fetch cages")
        assert exc.value.message == "Failed to fetch cages"
        assert exc.value.status_code is None

    def test_get_or_none_on_404(self, api_factory):
        api = api_factory(_json(404, {"message": "Not found"}))
        assert api.get_or_none("/cages/zzz") is None

    def test_get_or_none_raises_other_errors(self, api_factory):
        api = api_factory(_json(500, {"message": "boom"}))
        with pytest.raises(ApiError):
            api.get_or_none("/cages/zzz")

    def test_bearer_token_sent(self, api_factory):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        api = api_factory(handler, token="t0k")
        api.get("/admin/profile")
        assert seen["auth"] == "Bearer t0k"

        api.set_token(None)
        api.get("/admin/profile")
        assert seen["auth"] is None
