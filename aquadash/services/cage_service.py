# aquadash/services/cage_service.py
from typing import Any, Mapping

from aquadash.errors import FormValidationError
from aquadash.schemas.cages import Cage, CageData, CageNetType, CageStatus
from aquadash.schemas.common import ValidationResult
from aquadash.services.base import CrudService, dump


def _positive(value: Any) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def validate_cage_data(data: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    if not str(data.get("cageCode") or "").strip():
        result.errors.append("Cage code is required")
    if not str(data.get("cageName") or "").strip():
        result.errors.append("Cage name is required")
    if data.get("cageNetType") not in {t.value for t in CageNetType}:
        result.errors.append("Net type must be FINGERLING, JUVENILE or ADULT")
    if data.get("cageStatus") not in {s.value for s in CageStatus}:
        result.errors.append("Status must be ACTIVE, INACTIVE or UNDER_MAINTENANCE")
    if not _positive(data.get("cageDepth")):
        result.errors.append("Depth must be greater than 0")
    if not _positive(data.get("cageCapacity")):
        result.errors.append("Capacity must be greater than 0")
    volume = data.get("cageVolume")
    if volume not in (None, "") and not _positive(volume):
        result.errors.append("Volume must be greater than 0")
    return result


class CageService(CrudService[Cage]):
    """/cages - PUT for updates"""
    path = "/cages"
    model = Cage
    noun = "cage"
    plural = "cages"

    def create(self, data: CageData) -> Cage:
        check = validate_cage_data(dump(data))
        if not check.is_valid:
            raise FormValidationError(check.errors)
        return super().create(data)
