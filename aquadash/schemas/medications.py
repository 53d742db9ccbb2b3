# aquadash/schemas/medications.py
from enum import Enum

from pydantic import BaseModel

from aquadash.schemas.common import ApiModel


class MedicationMethod(str, Enum):
    FEED = "FEED"
    BATH = "BATH"
    WATER = "WATER"
    INJECTION = "INJECTION"


class MedicationData(BaseModel):
    name: str
    dosage: str
    method: MedicationMethod
    reason: str | None = None
    startDate: str
    endDate: str | None = None
    cageId: str
    administeredBy: str  # employee id


class Medication(ApiModel):
    id: str
    name: str
    dosage: str
    method: MedicationMethod
    reason: str | None = None
    startDate: str
    endDate: str | None = None
    cageId: str
    administeredBy: str
    cage: dict | None = None
    employee: dict | None = None
    createdAt: str | None = None
    updatedAt: str | None = None
