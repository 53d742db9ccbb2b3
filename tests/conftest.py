"""
Shared fixtures.

- make_item / make_request - asset request factories with sane defaults
- api_factory              - ApiClient over httpx.MockTransport
"""

import httpx
import pytest

from aquadash.api_client import ApiClient
from aquadash.schemas.asset_requests import AssetRequest, AssetRequestItem


def _item(id="i1", request_id="r1", asset_id="a1", quantity=1, issued=None, stock=0, **extra):
    data = {
        "id": id,
        "requestId": request_id,
        "assetId": asset_id,
        "quantity": quantity,
        "quantityIssued": issued,
        "asset": {"id": asset_id, "name": f"Asset {asset_id}", "quantity": str(stock)},
    }
    data.update(extra)
    return AssetRequestItem.model_validate(data)


def _request(id="r1", status="PENDING", items=None, employee_id="e1", **extra):
    data = {
        "id": id,
        "employeeId": employee_id,
        "status": status,
        "employee": {"id": employee_id, "first_name": "Aline", "last_name": "Uwase"},
        "items": [i.model_dump() for i in (items or [])],
    }
    data.update(extra)
    return AssetRequest.model_validate(data)


@pytest.fixture
def make_item():
    return _item


@pytest.fixture
def make_request():
    return _request


@pytest.fixture
def api_factory():
    """
    api_factory(handler) → ApiClient whose calls go to `handler(request)`.
    Clients are closed after the test.
    """
    clients = []

    def build(handler, **kwargs):
        client = ApiClient("http://api.test", transport=httpx.MockTransport(handler), **kwargs)
        clients.append(client)
        return client

    yield build
    for client in clients:
        client.close()
