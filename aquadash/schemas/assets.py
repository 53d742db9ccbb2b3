# aquadash/schemas/assets.py
from enum import Enum

from pydantic import field_validator

from aquadash.schemas.common import ApiModel, coerce_int


class AssetStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    RETIRED = "RETIRED"
    DISPOSED = "DISPOSED"


class Asset(ApiModel):
    id: str
    name: str
    category: str | None = None
    description: str | None = None
    location: str | None = None
    value: float | None = None
    quantity: int = 0
    status: AssetStatus = AssetStatus.ACTIVE
    assetImg: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_from_string(cls, v):
        return coerce_int(v)
