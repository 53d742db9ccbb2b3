# aquadash/services/procurement.py
"""
Procurement view over asset requests.

Items the API flagged for procurement (procurementStatus != NOT_REQUIRED)
are pulled out of their requests and grouped per asset, the way the
procurement page shows them: one row per asset with the total still needed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from aquadash.schemas.asset_requests import (
    AssetRequest,
    AssetRequestItem,
    ProcurementStatus,
)
from aquadash.services.request_workflow import needed_quantity


@dataclass
class ProcurementItem:
    """A request item that needs procurement, with its parent request."""
    item: AssetRequestItem
    request: AssetRequest

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def needed(self) -> int:
        return needed_quantity(self.item)


@dataclass
class AggregatedProcurement:
    assetId: str
    assetName: str
    procurementStatus: ProcurementStatus
    totalNeeded: int = 0
    latestCreatedAt: Optional[str] = None
    items: list[ProcurementItem] = field(default_factory=list)

    @property
    def requesters(self) -> list[str]:
        names = []
        for p in self.items:
            emp = p.request.employee
            if emp and emp.full_name and emp.full_name not in names:
                names.append(emp.full_name)
        return names


@dataclass
class ProcurementStats:
    total: int = 0
    required: int = 0
    ordered: int = 0
    completed: int = 0


def _timestamp(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def derive_procurement_items(requests: Iterable[AssetRequest]) -> list[ProcurementItem]:
    return [
        ProcurementItem(item=item, request=request)
        for request in requests
        for item in request.items
        if item.procurementStatus != ProcurementStatus.NOT_REQUIRED
    ]


def aggregate_by_asset(items: Iterable[ProcurementItem]) -> list[AggregatedProcurement]:
    """
    Group per asset, keeping first-seen order. The group's status is the
    status of its first item; totalNeeded sums what is still missing.
    """
    groups: dict[str, AggregatedProcurement] = {}
    for p in items:
        key = p.item.assetId
        group = groups.get(key)
        if group is None:
            group = AggregatedProcurement(
                assetId=key,
                assetName=p.item.asset.name if p.item.asset else "N/A",
                procurementStatus=p.item.procurementStatus,
                latestCreatedAt=p.item.createdAt,
            )
            groups[key] = group
        elif _timestamp(p.item.createdAt) > _timestamp(group.latestCreatedAt):
            group.latestCreatedAt = p.item.createdAt

        group.totalNeeded += p.needed
        group.items.append(p)

    return list(groups.values())


def procurement_stats(groups: Iterable[AggregatedProcurement]) -> ProcurementStats:
    stats = ProcurementStats()
    for g in groups:
        stats.total += 1
        if g.procurementStatus == ProcurementStatus.REQUIRED:
            stats.required += 1
        elif g.procurementStatus == ProcurementStatus.ORDERED:
            stats.ordered += 1
        elif g.procurementStatus == ProcurementStatus.COMPLETED:
            stats.completed += 1
    return stats
