# aquadash/services/laboratory_box_service.py
from typing import Any, Iterable, Mapping

from aquadash.schemas.common import ValidationResult
from aquadash.schemas.laboratory_boxes import LaboratoryBox
from aquadash.services.base import CrudService


def validate_laboratory_box_data(data: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    if not str(data.get("name") or "").strip():
        result.errors.append("Name is required")
    if not str(data.get("code") or "").strip():
        result.errors.append("Code is required")
    return result


def search_boxes(boxes: Iterable[LaboratoryBox], term: str) -> list[LaboratoryBox]:
    """Case-insensitive match on code or name ("lb-12" finds "LB-12")."""
    term = term.strip().lower()
    if not term:
        return list(boxes)
    return [b for b in boxes if term in b.code.lower() or term in b.name.lower()]


class LaboratoryBoxService(CrudService[LaboratoryBox]):
    """/laboratory-box - PATCH for updates"""
    path = "/laboratory-box"
    model = LaboratoryBox
    noun = "laboratory box"
    plural = "laboratory boxes"
    update_method = "PATCH"
