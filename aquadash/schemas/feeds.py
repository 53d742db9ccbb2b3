# aquadash/schemas/feeds.py
from pydantic import BaseModel

from aquadash.schemas.common import ApiModel


class FeedData(BaseModel):
    """Feed given to a cage"""
    cageId: str
    feedId: str
    employeeId: str | None = None
    quantityGiven: float
    notes: str | None = None


class Feed(ApiModel):
    id: str
    cageId: str
    feedId: str
    employeeId: str | None = None
    quantityGiven: float
    notes: str | None = None
    cage: dict | None = None
    feed: dict | None = None
    employee: dict | None = None
    createdAt: str | None = None
    updatedAt: str | None = None
