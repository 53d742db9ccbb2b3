# aquadash/schemas/cages.py
from enum import Enum

from pydantic import BaseModel

from aquadash.schemas.common import ApiModel


class CageNetType(str, Enum):
    FINGERLING = "FINGERLING"
    JUVENILE = "JUVENILE"
    ADULT = "ADULT"


class CageStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    UNDER_MAINTENANCE = "UNDER_MAINTENANCE"


class CageData(BaseModel):
    cageCode: str
    cageName: str
    cageNetType: CageNetType
    cageDepth: float
    cageStatus: CageStatus
    cageCapacity: int
    cageType: str | None = None
    cageVolume: float | None = None
    stockingDate: str | None = None


class Cage(ApiModel):
    id: str
    cageCode: str
    cageName: str
    cageNetType: CageNetType
    cageDepth: float
    cageStatus: CageStatus
    cageCapacity: int
    cageType: str | None = None
    cageVolume: float | None = None
    stockingDate: str | None = None
    createdAt: str | None = None
