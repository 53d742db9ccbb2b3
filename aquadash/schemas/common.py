# aquadash/schemas/common.py
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiModel(BaseModel):
    """
    Base for everything read from the farm API.

    Field names follow the API (camelCase, a few snake_case on employees).
    Undeclared keys are kept so a model can be sent back unchanged.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class DeleteResponse(ApiModel):
    message: str = "Deleted"
    id: str | None = None


@dataclass
class ValidationResult:
    """Result of a client-side form check"""
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def coerce_int(value: Any, default: int = 0) -> int:
    """
    Lenient integer parse for numbers the API sends as strings
    ("12" -> 12, "12.0" -> 12, "" / None / "abc" -> default).
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default
