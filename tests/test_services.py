"""
Tests for the REST service wrappers against a mocked API.

Tests cover:
- CRUD paths and methods per resource
- Client-side validation before any call
- Asset request transitions and procurement updates
- Stock request envelope, attachments and comments
"""

import json

import httpx
import pytest

from aquadash.errors import ApiError, FormValidationError
from aquadash.schemas.asset_requests import (
    AssetRequestCreate,
    AssetRequestItemIn,
    IssuedItem,
    ItemStatus,
    ProcurementStatus,
    RequestStatus,
)
from aquadash.schemas.assets import AssetStatus
from aquadash.schemas.cages import CageData
from aquadash.schemas.laboratory_boxes import LaboratoryBoxData
from aquadash.schemas.stock_requests import (
    ActorRole,
    IssueLine,
    IssueMaterials,
    ItemModification,
    ModifyAndApprove,
    ReceiveLine,
    ReceiveMaterials,
)
from aquadash.services.asset_request_service import AssetRequestService, validate_request_data
from aquadash.services.asset_service import AssetService
from aquadash.services.cage_service import CageService, validate_cage_data
from aquadash.services.employee_service import EmployeeService
from aquadash.services.feed_service import FeedService, validate_feed_data
from aquadash.services.laboratory_box_service import (
    LaboratoryBoxService,
    search_boxes,
    validate_laboratory_box_data,
)
from aquadash.services.medication_service import MedicationService, validate_medication_data
from aquadash.services.stock_request_service import StockRequestService, validate_attachment


class Recorder:
    """MockTransport handler that records calls and replies from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = (request.method, request.url.path)
        status, body = self.routes.get(key, (404, {"message": "Not found"}))
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.calls[-1]

    def last_json(self):
        return json.loads(self.last.content)


def _request_body(status="PENDING", issued=None, procurement="NOT_REQUIRED", item_status="PENDING"):
    return {
        "id": "r1",
        "employeeId": "e1",
        "status": status,
        "items": [{
            "id": "i1",
            "requestId": "r1",
            "assetId": "a1",
            "quantity": 10,
            "quantityIssued": issued,
            "status": item_status,
            "procurementStatus": procurement,
            "asset": {"id": "a1", "name": "Net", "quantity": "0"},
        }],
    }


# ============================================================================
# Asset requests
# ============================================================================


class TestAssetRequestService:

    def test_validation_messages(self):
        result = validate_request_data({"employeeId": "", "items": [{"assetId": "", "quantity": 0}, {"assetId": "a", "quantity": 1.5}]})
        assert result.errors == [
            "Employee ID is required",
            "Item 1: Asset ID is required",
            "Item 1: Quantity must be at least 1",
            "Item 2: Quantity must be a whole number",
        ]

    def test_validation_needs_items(self):
        assert validate_request_data({"employeeId": "e1", "items": []}).errors == ["At least one item is required"]
        assert validate_request_data({"employeeId": "e1"}).errors == ["Items array is required"]

    def test_create_invalid_sends_nothing(self, api_factory):
        rec = Recorder({})
        service = AssetRequestService(api_factory(rec))
        with pytest.raises(FormValidationError):
            service.create(AssetRequestCreate(employeeId="e1", items=[AssetRequestItemIn(assetId="a1", quantity=0)]))
        assert rec.calls == []

    def test_create(self, api_factory):
        rec = Recorder({("POST", "/asset-requests"): (201, _request_body())})
        service = AssetRequestService(api_factory(rec))
        created = service.create(AssetRequestCreate(employeeId="e1", items=[AssetRequestItemIn(assetId="a1", quantity=10)]))
        assert created.id == "r1"
        assert rec.last_json() == {"employeeId": "e1", "items": [{"assetId": "a1", "quantity": 10}]}

    def test_approve_sends_batch(self, api_factory):
        rec = Recorder({
            ("PATCH", "/asset-requests/r1/approve"): (200, _request_body(
                status="PARTIALLY_ISSUED", issued=4, procurement="REQUIRED", item_status="PARTIALLY_ISSUED",
            )),
        })
        service = AssetRequestService(api_factory(rec))
        updated = service.approve_and_issue("r1", [IssuedItem(itemId="i1", issuedQuantity=4)])

        assert rec.last_json() == {"issuedItems": [{"itemId": "i1", "issuedQuantity": 4}]}
        assert updated.status == RequestStatus.PARTIALLY_ISSUED
        assert updated.items[0].status == ItemStatus.PARTIALLY_ISSUED
        assert updated.items[0].procurementStatus == ProcurementStatus.REQUIRED

    def test_approve_error_surfaces_server_message(self, api_factory):
        rec = Recorder({("PATCH", "/asset-requests/r1/approve"): (400, {"message": "Request is not pending"})})
        service = AssetRequestService(api_factory(rec))
        with pytest.raises(ApiError, match="Request is not pending"):
            service.approve_and_issue("r1", [])

    def test_reject(self, api_factory):
        rec = Recorder({("PATCH", "/asset-requests/r1/reject"): (200, _request_body(status="REJECTED"))})
        assert AssetRequestService(api_factory(rec)).reject("r1").status == RequestStatus.REJECTED

    def test_get_missing_is_none(self, api_factory):
        assert AssetRequestService(api_factory(Recorder({}))).get("nope") is None

    def test_client_side_filters(self, api_factory):
        other = dict(_request_body(status="REJECTED"), id="r2", employeeId="e2")
        rec = Recorder({("GET", "/asset-requests"): (200, [_request_body(), other])})
        service = AssetRequestService(api_factory(rec))
        assert [r.id for r in service.list_by_status(RequestStatus.PENDING)] == ["r1"]
        assert [r.id for r in service.list_by_employee("e2")] == ["r2"]

    def test_mark_ordered(self, api_factory):
        item = _request_body(procurement="ORDERED")["items"][0]
        rec = Recorder({("PATCH", "/asset-requests/procurement/update"): (200, item)})
        result = AssetRequestService(api_factory(rec)).mark_ordered("i1")
        assert rec.last_json() == {"itemId": "i1", "procurementStatus": "ORDERED"}
        assert result.procurementStatus == ProcurementStatus.ORDERED

    def test_complete_clamps_quantity(self, api_factory):
        item = _request_body(procurement="COMPLETED")["items"][0]
        rec = Recorder({("PATCH", "/asset-requests/procurement/update"): (200, item)})
        AssetRequestService(api_factory(rec)).complete_procurement("i1", 0)
        assert rec.last_json() == {"itemId": "i1", "procurementStatus": "COMPLETED", "procuredQuantity": 1}

    def test_list_procurement_items(self, api_factory):
        item = _request_body(procurement="REQUIRED")["items"][0]
        rec = Recorder({("GET", "/asset-requests/procurement"): (200, [item])})
        items = AssetRequestService(api_factory(rec)).list_procurement_items()
        assert [i.id for i in items] == ["i1"]


# ============================================================================
# Cages, feeds, medications, laboratory boxes
# ============================================================================


CAGE = {
    "id": "c1", "cageCode": "C-01", "cageName": "North", "cageNetType": "ADULT",
    "cageDepth": 5, "cageStatus": "ACTIVE", "cageCapacity": 1200,
}


class TestCageService:

    def test_validation(self):
        errors = validate_cage_data({"cageCode": "", "cageNetType": "BIG", "cageDepth": 0, "cageCapacity": "x"}).errors
        assert "Cage code is required" in errors
        assert "Net type must be FINGERLING, JUVENILE or ADULT" in errors
        assert "Depth must be greater than 0" in errors
        assert "Capacity must be greater than 0" in errors

    def test_crud_paths(self, api_factory):
        rec = Recorder({
            ("GET", "/cages"): (200, [CAGE]),
            ("POST", "/cages"): (201, CAGE),
            ("PUT", "/cages/c1"): (200, dict(CAGE, cageName="South")),
            ("DELETE", "/cages/c1"): (200, {"message": "Cage deleted successfully"}),
            ("GET", "/cages/c1"): (200, CAGE),
        })
        service = CageService(api_factory(rec))
        data = CageData(**{k: v for k, v in CAGE.items() if k != "id"})

        assert [c.id for c in service.list_all()] == ["c1"]
        assert service.create(data).cageCode == "C-01"
        assert service.update("c1", data).cageName == "South"
        assert service.delete("c1").message == "Cage deleted successfully"
        assert service.exists("c1")
        assert not service.exists("c2")


class TestFeedAndMedication:

    def test_feed_validation(self):
        assert validate_feed_data({"cageId": "c1", "feedId": "f1", "quantityGiven": 2}).is_valid
        assert not validate_feed_data({"cageId": "c1", "feedId": "f1", "quantityGiven": 0}).is_valid

    def test_medication_end_before_start(self):
        data = {
            "name": "Oxytetracycline", "dosage": "5mg", "method": "FEED",
            "startDate": "2025-03-10", "endDate": "2025-03-01",
            "cageId": "c1", "administeredBy": "e1",
        }
        assert not validate_medication_data(data).is_valid
        assert validate_medication_data(dict(data, endDate="2025-03-12")).is_valid

    def test_list_by_cage(self, api_factory):
        rec = Recorder({
            ("GET", "/feeds/cage/c1"): (200, []),
            ("GET", "/medications/cage/c1"): (200, []),
        })
        api = api_factory(rec)
        assert FeedService(api).list_by_cage("c1") == []
        assert MedicationService(api).list_by_cage("c1") == []
        assert [r.url.path for r in rec.calls] == ["/feeds/cage/c1", "/medications/cage/c1"]


class TestLaboratoryBoxes:

    @pytest.fixture
    def boxes(self, api_factory):
        rows = [
            {"id": "b1", "name": "Water samples", "code": "LB-12"},
            {"id": "b2", "name": "Fry samples", "code": "LB-19"},
            {"id": "b3", "name": "Feed samples", "code": "LB-07"},
        ]
        rec = Recorder({("GET", "/laboratory-box"): (200, rows)})
        return LaboratoryBoxService(api_factory(rec)).list_all()

    def test_search_by_code_case_insensitive(self, boxes):
        assert [b.code for b in search_boxes(boxes, "lb-12")] == ["LB-12"]
        assert [b.id for b in search_boxes(boxes, "LB-07")] == ["b3"]

    def test_search_by_code_prefix_matches_longer_codes(self, boxes):
        assert [b.id for b in search_boxes(boxes, "lb-1")] == ["b1", "b2"]

    def test_search_by_name(self, boxes):
        assert [b.id for b in search_boxes(boxes, "FRY")] == ["b2"]

    def test_blank_search_returns_all(self, boxes):
        assert len(search_boxes(boxes, "  ")) == 3

    def test_validation(self):
        assert validate_laboratory_box_data({"name": "", "code": ""}).errors == ["Name is required", "Code is required"]

    def test_update_uses_patch(self, api_factory):
        rec = Recorder({("PATCH", "/laboratory-box/b1"): (200, {"id": "b1", "name": "X", "code": "LB-1"})})
        LaboratoryBoxService(api_factory(rec)).update("b1", LaboratoryBoxData(name="X", code="LB-1"))
        assert rec.last.method == "PATCH"


# ============================================================================
# Stock requests
# ============================================================================


STOCK_REQUEST = {"id": "s1", "ref_no": "REQ-001", "siteId": "site1", "status": "PENDING"}


class TestStockRequestService:

    def test_list_unwraps_envelope(self, api_factory):
        rec = Recorder({("GET", "/stock-requests"): (200, {"success": True, "data": {"requests": [STOCK_REQUEST]}})})
        assert [r.ref_no for r in StockRequestService(api_factory(rec)).list_all()] == ["REQ-001"]

    @pytest.mark.parametrize(
        "name, content_type, size, ok",
        [
            ("a.pdf", "application/pdf", 1024, True),
            ("a.png", "image/png", 5 * 1024 * 1024, True),
            ("a.png", "image/png", 5 * 1024 * 1024 + 1, False),
            ("a.gif", "image/gif", 10, False),
            ("", "application/pdf", 10, False),
        ],
    )
    def test_attachment_rules(self, name, content_type, size, ok):
        assert validate_attachment(name, content_type, size).is_valid is ok

    def test_upload_attachment(self, api_factory):
        rec = Recorder({("POST", "/stock-requests/s1/attachments"): (200, [
            {"fileUrl": "https://files.test/a.pdf", "role": "ADMIN", "userId": "u1"},
        ])})
        result = StockRequestService(api_factory(rec)).upload_attachment(
            "s1", filename="a.pdf", content=b"%PDF-1.4", content_type="application/pdf",
            role=ActorRole.ADMIN, user_id="u1", description="Delivery note",
        )
        assert result[0].fileUrl == "https://files.test/a.pdf"
        body = rec.last.content
        assert b'name="attachmentImg"' in body
        assert b'name="role"' in body and b"ADMIN" in body
        assert b"Delivery note" in body

    def test_invalid_attachment_sends_nothing(self, api_factory):
        rec = Recorder({})
        with pytest.raises(FormValidationError, match="Only PDF, PNG, and JPEG files are allowed"):
            StockRequestService(api_factory(rec)).upload_attachment(
                "s1", filename="a.exe", content=b"MZ", content_type="application/octet-stream",
                role=ActorRole.EMPLOYEE, user_id="u1",
            )
        assert rec.calls == []

    def test_add_comment(self, api_factory):
        rec = Recorder({("POST", "/stock-requests/s1/comments"): (200, [
            {"userId": "u1", "role": "EMPLOYEE", "description": "Delivered late"},
        ])})
        comments = StockRequestService(api_factory(rec)).add_comment(
            "s1", user_id="u1", role=ActorRole.EMPLOYEE, description="  Delivered late ",
        )
        sent = rec.last_json()
        assert sent["description"] == "Delivered late"
        assert sent["role"] == "EMPLOYEE"
        assert "uploadedAt" in sent
        assert comments[0].description == "Delivered late"

    def test_empty_comment_rejected(self, api_factory):
        with pytest.raises(FormValidationError, match="Comment cannot be empty"):
            StockRequestService(api_factory(Recorder({}))).add_comment(
                "s1", user_id="u1", role=ActorRole.ADMIN, description="   ",
            )


# ============================================================================
# Assets and employees
# ============================================================================


class TestAssetAndEmployee:

    def test_asset_create_is_multipart(self, api_factory):
        rec = Recorder({("POST", "/assets"): (201, {"id": "a1", "name": "Net", "quantity": "12"})})
        asset = AssetService(api_factory(rec)).create(
            {"name": "Net", "quantity": 12, "description": None},
            image=("net.png", b"\x89PNG", "image/png"),
        )
        assert asset.quantity == 12
        body = rec.last.content
        assert b'name="assetImg"; filename="net.png"' in body
        assert b'name="quantity"' in body
        assert b'name="description"' not in body

    def test_asset_status(self, api_factory):
        rec = Recorder({("PUT", "/assets/status/a1"): (200, {"id": "a1", "name": "Net", "status": "RETIRED"})})
        asset = AssetService(api_factory(rec)).update_status("a1", AssetStatus.RETIRED)
        assert rec.last_json() == {"status": "RETIRED"}
        assert asset.status == AssetStatus.RETIRED

    def test_employee_update_without_image(self, api_factory):
        rec = Recorder({("PUT", "/employees/em1"): (200, {"id": "em1", "first_name": "Jean", "last_name": "Mugabo"})})
        employee = EmployeeService(api_factory(rec)).update("em1", {"first_name": "Jean", "last_name": "Mugabo"})
        assert employee.full_name == "Jean Mugabo"
        assert rec.last.headers["content-type"].startswith("application/x-www-form-urlencoded")

    def test_employee_exists(self, api_factory):
        rec = Recorder({("GET", "/employees/em1"): (200, {"id": "em1"})})
        service = EmployeeService(api_factory(rec))
        assert service.exists("em1")
        assert not service.exists("em2")


class TestStockRequestTransitions:

    def test_modify_and_approve_unwraps_data(self, api_factory):
        approved = dict(STOCK_REQUEST, status="APPROVED")
        rec = Recorder({("PATCH", "/stock-requests/s1/modify-approve"): (200, {"success": True, "data": approved})})
        result = StockRequestService(api_factory(rec)).modify_and_approve("s1", ModifyAndApprove(
            userId="ad1",
            userRole=ActorRole.ADMIN,
            itemModifications=[ItemModification(requestItemId="ri1", qtyApproved=5)],
        ))
        sent = rec.last_json()
        assert sent["itemModifications"] == [{"requestItemId": "ri1", "qtyApproved": 5.0}]
        assert sent["userRole"] == "ADMIN"
        assert result.status.value == "APPROVED"

    def test_reject_with_notes(self, api_factory):
        rec = Recorder({("PATCH", "/stock-requests/s1/reject"): (200, dict(STOCK_REQUEST, status="REJECTED"))})
        result = StockRequestService(api_factory(rec)).reject("s1", "Out of budget")
        assert rec.last_json() == {"notes": "Out of budget"}
        assert result.status.value == "REJECTED"

    def test_issue_and_receive(self, api_factory):
        rec = Recorder({
            ("POST", "/stock-requests/issue-materials"): (200, {"success": True}),
            ("POST", "/stock-requests/receive-materials"): (200, {"success": True}),
        })
        service = StockRequestService(api_factory(rec))
        service.issue_materials(IssueMaterials(
            requestId="s1", issuedByAdminId="ad1", items=[IssueLine(requestItemId="ri1", qtyIssued=3)],
        ))
        assert rec.last_json() == {
            "requestId": "s1", "issuedByAdminId": "ad1",
            "items": [{"requestItemId": "ri1", "qtyIssued": 3.0}],
        }
        service.receive_materials(ReceiveMaterials(
            requestId="s1", receivedByEmployeeId="em1", items=[ReceiveLine(requestItemId="ri1", qtyReceived=3)],
        ))
        assert rec.last_json()["receivedByEmployeeId"] == "em1"
