# aquadash/services/asset_request_service.py
"""
Asset requests and their procurement.

Endpoints:
- POST   /asset-requests
- GET    /asset-requests
- GET    /asset-requests/{id}
- PATCH  /asset-requests/{id}
- DELETE /asset-requests/{id}
- PATCH  /asset-requests/{id}/approve      {"issuedItems": [{itemId, issuedQuantity}]}
- PATCH  /asset-requests/{id}/reject
- GET    /asset-requests/procurement
- GET    /asset-requests/procurement/{id}
- PATCH  /asset-requests/procurement/update {itemId, procurementStatus, procuredQuantity?}
"""

import logging
from typing import Any, Mapping, Optional

from aquadash.errors import FormValidationError
from aquadash.schemas.asset_requests import (
    AssetRequest,
    AssetRequestCreate,
    AssetRequestItem,
    AssetRequestUpdate,
    IssuedItem,
    ProcurementStatus,
    ProcurementUpdate,
    RequestStatus,
)
from aquadash.schemas.common import ValidationResult
from aquadash.services.base import CrudService, dump
from aquadash.services.request_workflow import clamp_procured_quantity

log = logging.getLogger(__name__)


def validate_request_data(data: Mapping[str, Any]) -> ValidationResult:
    """
    Check a create/update form before it is sent:
    employee id, at least one item, asset id and whole quantity >= 1 per item.
    """
    result = ValidationResult()

    employee_id = data.get("employeeId")
    if not employee_id or not str(employee_id).strip():
        result.errors.append("Employee ID is required")

    items = data.get("items")
    if not isinstance(items, list):
        result.errors.append("Items array is required")
        return result
    if not items:
        result.errors.append("At least one item is required")
        return result

    for index, item in enumerate(items, start=1):
        asset_id = item.get("assetId")
        if not asset_id or not str(asset_id).strip():
            result.errors.append(f"Item {index}: Asset ID is required")
        quantity = item.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)) or quantity < 1:
            result.errors.append(f"Item {index}: Quantity must be at least 1")
        elif isinstance(quantity, float) and not quantity.is_integer():
            result.errors.append(f"Item {index}: Quantity must be a whole number")

    return result


class AssetRequestService(CrudService[AssetRequest]):
    path = "/asset-requests"
    model = AssetRequest
    noun = "asset request"
    plural = "asset requests"
    update_method = "PATCH"

    def create(self, data: AssetRequestCreate) -> AssetRequest:
        check = validate_request_data(dump(data))
        if not check.is_valid:
            raise FormValidationError(check.errors)
        return super().create(data)

    def update(self, id: str, data: AssetRequestUpdate) -> AssetRequest:
        """Only PENDING requests can be updated; the API enforces it."""
        return super().update(id, data)

    # ── transitions ──

    def approve_and_issue(self, id: str, issued_items: list[IssuedItem]) -> AssetRequest:
        """
        Send the whole batch of issued quantities in one call.
        The returned request is the new truth for every status.
        """
        body = self.api.patch(
            f"{self.path}/{id}/approve",
            {"issuedItems": [dump(i) for i in issued_items]},
            fallback="Failed to approve and issue asset request",
        )
        log.info("asset request %s approved (%d items)", id, len(issued_items))
        return self._one(body)

    def reject(self, id: str) -> AssetRequest:
        body = self.api.patch(f"{self.path}/{id}/reject", fallback="Failed to reject asset request")
        log.info("asset request %s rejected", id)
        return self._one(body)

    # ── client-side views ──

    def list_by_status(self, status: RequestStatus) -> list[AssetRequest]:
        return [r for r in self.list_all() if r.status == status]

    def list_by_employee(self, employee_id: str) -> list[AssetRequest]:
        return [r for r in self.list_all() if r.employeeId == employee_id]

    # ── procurement ──

    def list_procurement_items(self) -> list[AssetRequestItem]:
        body = self.api.get(f"{self.path}/procurement", fallback="Failed to fetch procurement items")
        return [AssetRequestItem.model_validate(row) for row in (body or [])]

    def get_procurement_item(self, item_id: str) -> Optional[AssetRequestItem]:
        body = self.api.get_or_none(
            f"{self.path}/procurement/{item_id}",
            fallback="Failed to fetch procurement item",
        )
        return AssetRequestItem.model_validate(body) if body is not None else None

    def update_procurement_status(
        self,
        item_id: str,
        status: ProcurementStatus,
        procured_quantity: Optional[int] = None,
    ) -> AssetRequestItem:
        payload = ProcurementUpdate(itemId=item_id, procurementStatus=status)
        if status == ProcurementStatus.COMPLETED:
            payload.procuredQuantity = clamp_procured_quantity(procured_quantity)
        body = self.api.patch(
            f"{self.path}/procurement/update",
            dump(payload),
            fallback=f"Failed to mark item as {status.value}",
        )
        log.info("procurement of item %s -> %s", item_id, status.value)
        return AssetRequestItem.model_validate(body)

    def mark_ordered(self, item_id: str) -> AssetRequestItem:
        return self.update_procurement_status(item_id, ProcurementStatus.ORDERED)

    def complete_procurement(self, item_id: str, procured_quantity: int) -> AssetRequestItem:
        """The API adds the quantity to stock and issues it to the waiting request."""
        return self.update_procurement_status(item_id, ProcurementStatus.COMPLETED, procured_quantity)
