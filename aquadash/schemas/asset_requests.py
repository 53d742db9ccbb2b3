# aquadash/schemas/asset_requests.py
from enum import Enum

from pydantic import BaseModel, field_validator, model_validator

from aquadash.schemas.common import ApiModel, coerce_int


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ISSUED = "ISSUED"
    PARTIALLY_ISSUED = "PARTIALLY_ISSUED"
    CLOSED = "CLOSED"


class ItemStatus(str, Enum):
    PENDING = "PENDING"
    ISSUED = "ISSUED"
    PARTIALLY_ISSUED = "PARTIALLY_ISSUED"
    PENDING_PROCUREMENT = "PENDING_PROCUREMENT"


class ProcurementStatus(str, Enum):
    NOT_REQUIRED = "NOT_REQUIRED"
    REQUIRED = "REQUIRED"
    ORDERED = "ORDERED"
    COMPLETED = "COMPLETED"


class AssetRef(ApiModel):
    """Asset embedded in a request item. `quantity` is the stock on hand."""
    id: str
    name: str = "N/A"
    quantity: int = 0

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_from_string(cls, v):
        # the API stores stock as a string
        return coerce_int(v)


class EmployeeRef(ApiModel):
    id: str | None = None
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""

    @model_validator(mode="after")
    def _fill_full_name(self):
        if not self.full_name:
            self.full_name = f"{self.first_name} {self.last_name}".strip()
        return self


class AssetRequestItem(ApiModel):
    id: str
    requestId: str
    assetId: str
    quantity: int
    quantityIssued: int | None = None
    status: ItemStatus = ItemStatus.PENDING
    procurementStatus: ProcurementStatus = ProcurementStatus.NOT_REQUIRED
    createdAt: str | None = None
    updatedAt: str | None = None
    asset: AssetRef | None = None

    @property
    def issued(self) -> int:
        return self.quantityIssued or 0


class AssetRequest(ApiModel):
    id: str
    employeeId: str
    status: RequestStatus
    description: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None
    employee: EmployeeRef | None = None
    items: list[AssetRequestItem] = []


# ── payloads ──

class AssetRequestItemIn(BaseModel):
    assetId: str
    quantity: int


class AssetRequestCreate(BaseModel):
    employeeId: str
    description: str | None = None
    items: list[AssetRequestItemIn]


class AssetRequestUpdate(BaseModel):
    description: str | None = None
    items: list[AssetRequestItemIn] | None = None


class IssuedItem(BaseModel):
    itemId: str
    issuedQuantity: int


class ProcurementUpdate(BaseModel):
    itemId: str
    procurementStatus: ProcurementStatus
    procuredQuantity: int | None = None
