"""
Tests for deriving and grouping procurement items.
"""

from aquadash.schemas.asset_requests import ProcurementStatus
from aquadash.services.procurement import aggregate_by_asset, derive_procurement_items, procurement_stats


def test_only_flagged_items_are_derived(make_item, make_request):
    requests = [
        make_request(id="r1", items=[
            make_item(id="i1", request_id="r1", procurementStatus="REQUIRED"),
            make_item(id="i2", request_id="r1"),
        ]),
        make_request(id="r2", items=[make_item(id="i3", request_id="r2", procurementStatus="ORDERED")]),
    ]
    derived = derive_procurement_items(requests)
    assert [p.id for p in derived] == ["i1", "i3"]
    assert derived[1].request.id == "r2"


def test_grouped_per_asset(make_item, make_request):
    requests = [
        make_request(id="r1", items=[
            make_item(id="i1", request_id="r1", asset_id="net", quantity=10, issued=4,
                      procurementStatus="REQUIRED", createdAt="2025-02-01T10:00:00Z"),
        ]),
        make_request(id="r2", employee_id="e2", items=[
            make_item(id="i2", request_id="r2", asset_id="net", quantity=3,
                      procurementStatus="REQUIRED", createdAt="2025-03-01T10:00:00Z"),
            make_item(id="i3", request_id="r2", asset_id="pump", quantity=1,
                      procurementStatus="ORDERED", createdAt="2025-01-01T10:00:00Z"),
        ]),
    ]
    groups = aggregate_by_asset(derive_procurement_items(requests))

    assert [g.assetId for g in groups] == ["net", "pump"]
    net = groups[0]
    assert net.totalNeeded == 6 + 3
    assert net.latestCreatedAt == "2025-03-01T10:00:00Z"
    assert net.assetName == "Asset net"
    assert net.requesters == ["Aline Uwase"]
    assert [p.id for p in net.items] == ["i1", "i2"]


def test_stats(make_item, make_request):
    req = make_request(items=[
        make_item(id="i1", asset_id="a", procurementStatus="REQUIRED"),
        make_item(id="i2", asset_id="b", procurementStatus="ORDERED"),
        make_item(id="i3", asset_id="c", procurementStatus="COMPLETED"),
        make_item(id="i4", asset_id="d", procurementStatus="REQUIRED"),
    ])
    stats = procurement_stats(aggregate_by_asset(derive_procurement_items([req])))
    assert (stats.total, stats.required, stats.ordered, stats.completed) == (4, 2, 1, 1)


def test_group_status_is_first_item_status(make_item, make_request):
    req = make_request(items=[
        make_item(id="i1", asset_id="a", procurementStatus="ORDERED"),
        make_item(id="i2", asset_id="a", procurementStatus="REQUIRED"),
    ])
    [group] = aggregate_by_asset(derive_procurement_items([req]))
    assert group.procurementStatus == ProcurementStatus.ORDERED
