# aquadash/services/base.py
"""
Shared CRUD wrapper for the farm API resources.

Each resource service names its path, its model and the noun used in
error fallbacks ("Failed to fetch cages"). Everything else - list, get by
id (404 → None), create, update, delete - is the same call everywhere.
"""

import logging
from typing import Any, ClassVar, Generic, Optional, Type, TypeVar

from pydantic import BaseModel

from aquadash.api_client import ApiClient
from aquadash.schemas.common import DeleteResponse

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def dump(data: Any) -> Any:
    """pydantic payload → JSON-ready dict, without unset optional fields"""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    return data


class CrudService(Generic[M]):
    path: ClassVar[str]
    model: ClassVar[Type[BaseModel]]
    noun: ClassVar[str] = "record"
    plural: ClassVar[str] = "records"
    update_method: ClassVar[str] = "PUT"

    def __init__(self, api: ApiClient):
        self.api = api

    def _one(self, body: Any) -> M:
        return self.model.model_validate(body)

    def _many(self, body: Any) -> list[M]:
        return [self.model.model_validate(row) for row in (body or [])]

    def list_all(self) -> list[M]:
        return self._many(self.api.get(self.path, fallback=f"Failed to fetch {self.plural}"))

    def get(self, id: str) -> Optional[M]:
        body = self.api.get_or_none(f"{self.path}/{id}", fallback=f"Failed to fetch {self.noun}")
        return self._one(body) if body is not None else None

    def exists(self, id: str) -> bool:
        return self.get(id) is not None

    def create(self, data: Any) -> M:
        body = self.api.post(self.path, dump(data), fallback=f"Failed to create {self.noun}")
        log.info("created %s %s", self.noun, body.get("id") if isinstance(body, dict) else "")
        return self._one(body)

    def update(self, id: str, data: Any) -> M:
        body = self.api.request(
            self.update_method,
            f"{self.path}/{id}",
            json=dump(data),
            fallback=f"Failed to update {self.noun}",
        )
        return self._one(body)

    def delete(self, id: str) -> DeleteResponse:
        body = self.api.delete(f"{self.path}/{id}", fallback=f"Failed to delete {self.noun}")
        if not isinstance(body, dict):
            # some endpoints answer with the deleted entity or nothing at all
            return DeleteResponse(message=f"{self.noun.capitalize()} deleted", id=id)
        return DeleteResponse(message=body.get("message") or f"{self.noun.capitalize()} deleted", id=body.get("id", id))


def form_fields(fields: dict[str, Any]) -> dict[str, str]:
    """multipart form fields are strings; None is left out"""
    return {k: str(v) for k, v in fields.items() if v is not None}
