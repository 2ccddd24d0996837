# tests/test_rental_approval.py
from __future__ import annotations

import pytest

from rentalhub.clients.cancellation import RequestScope
from rentalhub.errors import ApiError, FormValidationError
from rentalhub.workflows.rental_requests import RentalRequestWorkflow

PENDING = {
    "bookingId": "b1",
    "roomId": "room202",
    "tenantId": "user_9",
    "status": "pending",
    "startDate": "2024-01-01",
    "endDate": "2024-04-01",
    "roomInfo": {"roomId": "room202", "roomTitle": "Phòng 202", "price": 3_000_000},
}


def _routes(overrides=None):
    routes = {
        ("GET", "/bookings/host"): (200, {"success": True, "data": [PENDING]}),
        ("PUT", "/bookings/b1/approve"): (200, {"success": True, "data": {**PENDING, "status": "approved"}}),
        ("POST", "/contracts"): (201, {"success": True, "data": {"contractId": "c1", "status": "pending"}}),
    }
    routes.update(overrides or {})
    return routes


def test_approve_then_create_contract_then_refresh(make_api):
    api, spy, _ = make_api(_routes())

    out = RentalRequestWorkflow(api).approve_and_create_contract("b1")

    assert spy.paths == [
        ("GET", "/bookings/host"),
        ("PUT", "/bookings/b1/approve"),
        ("POST", "/contracts"),
        ("GET", "/bookings/host"),
    ]
    payload = spy.body(2)
    assert payload["duration"] == 3
    assert payload["rentPrice"] == 9_000_000
    assert payload["bookingId"] == "b1"
    assert payload["tenantId"] == "user_9"
    assert out.booking.status == "approved"
    assert out.contract.contract_id == "c1"


def test_unpriced_room_is_not_approved(make_api):
    bad = {**PENDING, "roomInfo": {"roomId": "room202", "price": 0}}
    api, spy, _ = make_api(_routes({("GET", "/bookings/host"): (200, {"data": [bad]})}))

    with pytest.raises(FormValidationError):
        RentalRequestWorkflow(api).approve_and_create_contract("b1")

    assert ("PUT", "/bookings/b1/approve") not in spy.paths
    assert ("POST", "/contracts") not in spy.paths


def test_contract_failure_leaves_booking_approved(make_api):
    api, spy, _ = make_api(_routes({("POST", "/contracts"): (500, {"message": "DB lỗi"})}))
    wf = RentalRequestWorkflow(api)

    with pytest.raises(ApiError) as ei:
        wf.approve_and_create_contract("b1")

    assert ei.value.message == "DB lỗi"
    assert spy.paths[-3:] == [
        ("PUT", "/bookings/b1/approve"),
        ("POST", "/contracts"),
        ("GET", "/bookings/host"),
    ]
    assert [b.key for b in wf.requests] == ["b1"]


def test_unknown_booking(make_api):
    api, spy, _ = make_api(_routes())
    with pytest.raises(FormValidationError):
        RentalRequestWorkflow(api).approve_and_create_contract("nope")
    assert spy.paths == [("GET", "/bookings/host")]


def test_reject_sends_reason_and_refreshes(make_api):
    api, spy, _ = make_api(
        _routes({("PUT", "/bookings/b1/reject"): (200, {"success": True, "data": {**PENDING, "status": "rejected"}})})
    )

    RentalRequestWorkflow(api).reject("b1", "Phòng đã có người thuê")

    assert spy.paths == [("PUT", "/bookings/b1/reject"), ("GET", "/bookings/host")]
    assert spy.body(0) == {"reason": "Phòng đã có người thuê"}


def test_missing_room_info_loaded_once_per_room(make_api):
    bare = {k: v for k, v in PENDING.items() if k != "roomInfo"}
    second = {**bare, "bookingId": "b2", "tenantId": "user_10"}
    api, spy, _ = make_api(
        {
            ("GET", "/bookings/host"): (200, {"data": [bare, second]}),
            ("GET", "/rooms/room202"): (200, {"data": {"roomId": "room202", "roomTitle": "Phòng 202", "price": 1}}),
        }
    )

    with RequestScope(api) as scope:
        rows = RentalRequestWorkflow(scope).list_requests()

    assert [r.room_info.room_title for r in rows] == ["Phòng 202", "Phòng 202"]
    assert spy.paths.count(("GET", "/rooms/room202")) == 1


def test_status_filter(make_api):
    approved = {**PENDING, "bookingId": "b2", "status": "approved"}
    api, _, _ = make_api({("GET", "/bookings/host"): (200, {"data": [PENDING, approved]})})

    wf = RentalRequestWorkflow(api)
    assert [b.key for b in wf.list_requests("approved")] == ["b2"]
    assert len(wf.list_requests("all")) == 2
