# aquadash/services/medication_service.py
from datetime import date
from typing import Any, Mapping, Optional

from aquadash.schemas.common import ValidationResult
from aquadash.schemas.medications import Medication, MedicationMethod
from aquadash.services.base import CrudService


def _as_date(value: Any) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def validate_medication_data(data: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    for key, label in (
        ("name", "Name"),
        ("dosage", "Dosage"),
        ("cageId", "Cage"),
        ("administeredBy", "Administered by"),
    ):
        if not str(data.get(key) or "").strip():
            result.errors.append(f"{label} is required")

    if data.get("method") not in {m.value for m in MedicationMethod}:
        result.errors.append("Method must be FEED, BATH, WATER or INJECTION")

    start = _as_date(data.get("startDate"))
    if start is None:
        result.errors.append("Start date is required")

    if data.get("endDate"):
        end = _as_date(data.get("endDate"))
        if end is None:
            result.errors.append("End date is not a valid date")
        elif start is not None and end < start:
            result.errors.append("End date cannot be before start date")

    return result


class MedicationService(CrudService[Medication]):
    path = "/medications"
    model = Medication
    noun = "medication"
    plural = "medications"

    def list_by_cage(self, cage_id: str) -> list[Medication]:
        return self._many(self.api.get(f"{self.path}/cage/{cage_id}", fallback="Failed to fetch medications for cage"))
