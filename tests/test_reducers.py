"""
Tests for socket event reducers.

Reducers are pure: inputs are never mutated and untouched entities are reused.
"""

from aquadash.realtime.reducers import (
    apply_item_updated,
    apply_procurement_needed,
    apply_status_changed,
    insert_entity,
    merge_request,
    remove_entity,
    replace_entity,
    replace_request,
    upsert_request,
)
from aquadash.schemas.asset_requests import AssetRequest
from aquadash.schemas.asset_requests import ItemStatus, ProcurementStatus, RequestStatus


def _rows():
    return [{"id": "a", "v": 1}, {"id": "b", "v": 2}, {"id": "c", "v": 3}]


class TestGenericReducers:

    def test_delete_unknown_id_is_noop(self):
        state = _rows()
        result = remove_entity(state, {"id": "zzz"})
        assert len(result) == len(state)
        assert result == state

    def test_delete_known_id(self):
        assert [r["id"] for r in remove_entity(_rows(), {"id": "b"})] == ["a", "c"]

    def test_update_replaces_in_place(self):
        state = _rows()
        result = replace_entity(state, {"id": "b", "v": 20})
        assert [r["id"] for r in result] == ["a", "b", "c"]
        assert result[1] == {"id": "b", "v": 20}
        assert result[0] is state[0]

    def test_update_unknown_id_is_noop(self):
        state = _rows()
        assert replace_entity(state, {"id": "x", "v": 0}) == state

    def test_insert_appends(self):
        assert [r["id"] for r in insert_entity(_rows(), {"id": "d"})] == ["a", "b", "c", "d"]

    def test_insert_existing_id_does_not_duplicate(self):
        result = insert_entity(_rows(), {"id": "a", "v": 9})
        assert len(result) == 3
        assert result[0] == {"id": "a", "v": 9}

    def test_input_not_mutated(self):
        state = _rows()
        snapshot = [dict(r) for r in state]
        insert_entity(state, {"id": "d"})
        replace_entity(state, {"id": "a", "v": 0})
        remove_entity(state, {"id": "a"})
        assert state == snapshot

    def test_models_work_like_dicts(self, make_request):
        state = [make_request(id="r1"), make_request(id="r2")]
        updated = make_request(id="r2", status="REJECTED")
        result = replace_entity(state, updated)
        assert result[1].status == RequestStatus.REJECTED
        assert result[0] is state[0]


class TestRequestReducers:

    def test_status_changed_on_request(self, make_request):
        state = [make_request(id="r1"), make_request(id="r2")]
        result = apply_status_changed(state, {"id": "r2", "status": "REJECTED"})
        assert result[1].status == RequestStatus.REJECTED
        assert state[1].status == RequestStatus.PENDING

    def test_status_changed_on_item(self, make_item, make_request):
        state = [make_request(items=[make_item(id="i1"), make_item(id="i2")])]
        result = apply_status_changed(state, {"id": "i2", "status": "ISSUED"})
        assert result[0].items[1].status == ItemStatus.ISSUED
        assert result[0].items[0].status == ItemStatus.PENDING

    def test_status_changed_unknown_id(self, make_request):
        state = [make_request()]
        assert apply_status_changed(state, {"id": "nope", "status": "CLOSED"}) == state

    def test_item_updated_in_place(self, make_item, make_request):
        state = [make_request(items=[make_item(id="i1"), make_item(id="i2"), make_item(id="i3")])]
        changed = make_item(id="i2", quantity=1, issued=1, status="ISSUED")
        result = apply_item_updated(state, changed)
        assert [i.id for i in result[0].items] == ["i1", "i2", "i3"]
        assert result[0].items[1].status == ItemStatus.ISSUED

    def test_procurement_needed_replaces_item(self, make_item, make_request):
        state = [make_request(id="r1", items=[make_item(id="i1", request_id="r1")])]
        flagged = make_item(id="i1", request_id="r1", procurementStatus="REQUIRED")
        result = apply_procurement_needed(state, flagged)
        assert len(result[0].items) == 1
        assert result[0].items[0].procurementStatus == ProcurementStatus.REQUIRED

    def test_procurement_needed_appends_to_owner(self, make_item, make_request):
        state = [make_request(id="r1"), make_request(id="r2")]
        flagged = make_item(id="i9", request_id="r2", procurementStatus="REQUIRED")
        result = apply_procurement_needed(state, flagged)
        assert result[0].items == []
        assert [i.id for i in result[1].items] == ["i9"]


class TestMergingPartialAnswers:
    """Mutation answers and item events leave out the embedded employee and assets."""

    def test_bare_row_keeps_items_and_employee(self, make_item, make_request):
        held = make_request("r1", items=[make_item("i1"), make_item("i2")])
        bare = AssetRequest.model_validate({"id": "r1", "employeeId": "e1", "status": "REJECTED"})

        merged = merge_request(held, bare)
        assert merged.status == RequestStatus.REJECTED
        assert [i.id for i in merged.items] == ["i1", "i2"]
        assert merged.employee.full_name == "Aline Uwase"

    def test_explicit_empty_items_are_taken(self, make_item, make_request):
        held = make_request("r1", items=[make_item("i1")])
        answer = AssetRequest.model_validate({"id": "r1", "employeeId": "e1", "status": "CLOSED", "items": []})
        assert merge_request(held, answer).items == []

    def test_items_without_asset_keep_held_asset(self, make_item, make_request):
        held = make_request("r1", items=[make_item("i1", stock=7)])
        answer = make_request("r1", "ISSUED", items=[make_item("i1", issued=1, asset=None, status="ISSUED")])

        [item] = upsert_request([held], answer)[0].items
        assert item.status == ItemStatus.ISSUED
        assert item.issued == 1
        assert item.asset.name == "Asset a1"
        assert item.asset.quantity == 7

    def test_incoming_asset_wins(self, make_item, make_request):
        held = make_request("r1", items=[make_item("i1", stock=7)])
        answer = make_request("r1", items=[make_item("i1", stock=2)])
        assert upsert_request([held], answer)[0].items[0].asset.quantity == 2

    def test_upsert_appends_unknown_request(self, make_request):
        state = [make_request("r1")]
        assert [r.id for r in upsert_request(state, make_request("r2"))] == ["r1", "r2"]

    def test_replace_request_unknown_id_is_noop(self, make_request):
        state = [make_request("r1")]
        assert replace_request(state, make_request("r2")) == state

    def test_item_event_without_asset_keeps_held_asset(self, make_item, make_request):
        state = [make_request("r1", items=[make_item("i1", stock=3)])]
        event = make_item("i1", asset=None, procurementStatus="ORDERED")

        [item] = apply_item_updated(state, event)[0].items
        assert item.procurementStatus == ProcurementStatus.ORDERED
        assert item.asset.name == "Asset a1"

    def test_procurement_needed_keeps_held_asset(self, make_item, make_request):
        state = [make_request("r1", items=[make_item("i1", stock=3)])]
        event = make_item("i1", asset=None, procurementStatus="REQUIRED")
        assert apply_procurement_needed(state, event)[0].items[0].asset is not None
