# aquadash/schemas/laboratory_boxes.py
from pydantic import BaseModel

from aquadash.schemas.common import ApiModel


class LaboratoryBoxData(BaseModel):
    name: str
    code: str
    description: str | None = None


class LaboratoryBox(ApiModel):
    id: str
    name: str
    code: str
    description: str | None = None
    createdAt: str | None = None
