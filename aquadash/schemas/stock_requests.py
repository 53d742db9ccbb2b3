# aquadash/schemas/stock_requests.py
"""
Site material requisitions: a parallel workflow to asset requests,
with its own statuses, attachments and comments.
"""
from enum import Enum

from pydantic import BaseModel

from aquadash.schemas.common import ApiModel


class StockRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PARTIALLY_ISSUED = "PARTIALLY_ISSUED"
    ISSUED = "ISSUED"
    RECEIVED = "RECEIVED"
    CLOSED = "CLOSED"


class ActorRole(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class StockRequestItem(ApiModel):
    id: str
    stockInId: str
    qtyRequested: float
    qtyApproved: float | None = None
    qtyIssued: float | None = None
    qtyRemaining: float | None = None
    qtyReceived: float | None = None


class Attachment(ApiModel):
    fileUrl: str
    userId: str | None = None
    uploadedBy: str | None = None
    role: ActorRole | None = None
    description: str | None = None
    uploadedAt: str | None = None


class Comment(ApiModel):
    userId: str
    role: ActorRole
    description: str
    uploadedAt: str | None = None


class StockRequest(ApiModel):
    id: str
    ref_no: str = ""
    siteId: str
    status: StockRequestStatus
    notes: str | None = None
    requestItems: list[StockRequestItem] = []
    attachments: list[Attachment] = []
    comments: list[Comment] = []
    site: dict | None = None
    createdAt: str | None = None
    updatedAt: str | None = None


# ── payloads ──

class StockRequestItemIn(BaseModel):
    stockInId: str
    qtyRequested: float


class StockRequestCreate(BaseModel):
    siteId: str
    requestedByAdminId: str | None = None
    requestedByEmployeeId: str | None = None
    notes: str | None = None
    items: list[StockRequestItemIn]


class ItemModification(BaseModel):
    requestItemId: str
    qtyRequested: float | None = None
    qtyApproved: float | None = None
    stockInId: str | None = None


class ModifyAndApprove(BaseModel):
    userId: str
    userRole: ActorRole
    notes: str | None = None
    itemModifications: list[ItemModification] = []
    itemsToAdd: list[StockRequestItemIn] = []
    itemsToRemove: list[str] = []
    modificationReason: str | None = None


class IssueLine(BaseModel):
    requestItemId: str
    qtyIssued: float
    notes: str | None = None


class IssueMaterials(BaseModel):
    requestId: str
    issuedByAdminId: str | None = None
    issuedByEmployeeId: str | None = None
    items: list[IssueLine]


class ReceiveLine(BaseModel):
    requestItemId: str
    qtyReceived: float


class ReceiveMaterials(BaseModel):
    requestId: str
    receivedByAdminId: str | None = None
    receivedByEmployeeId: str | None = None
    items: list[ReceiveLine]


class CommentIn(BaseModel):
    userId: str
    role: ActorRole
    description: str
    uploadedAt: str | None = None
