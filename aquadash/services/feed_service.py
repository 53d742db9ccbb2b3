# aquadash/services/feed_service.py
from typing import Any, Mapping

from aquadash.schemas.common import ValidationResult
from aquadash.schemas.feeds import Feed
from aquadash.services.base import CrudService


def validate_feed_data(data: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    if not data.get("cageId"):
        result.errors.append("Cage is required")
    if not data.get("feedId"):
        result.errors.append("Feed is required")
    try:
        if float(data.get("quantityGiven")) <= 0:
            result.errors.append("Quantity given must be greater than 0")
    except (TypeError, ValueError):
        result.errors.append("Quantity given must be a number")
    return result


class FeedService(CrudService[Feed]):
    path = "/feeds"
    model = Feed
    noun = "feed record"
    plural = "feed records"

    def list_by_cage(self, cage_id: str) -> list[Feed]:
        return self._many(self.api.get(f"{self.path}/cage/{cage_id}", fallback="Failed to fetch feed records for cage"))
