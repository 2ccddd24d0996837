# tests/test_api_client_errors.py
from __future__ import annotations

import httpx
import pytest

from rentalhub.clients.http import DEFAULT_FALLBACK, ApiClient
from rentalhub.errors import ApiError, NetworkError, NotSignedIn, user_message
from rentalhub.services.booking_service import BookingService
from rentalhub.services.invoice_service import InvoiceService
from rentalhub.state import AppState


def test_server_message_wins_over_fallback(make_api):
    api, _, _ = make_api({("PUT", "/bookings/b1/approve"): (400, {"success": False, "message": "Booking đã duyệt"})})

    with pytest.raises(ApiError) as ei:
        BookingService(api).approve("b1")

    assert ei.value.status_code == 400
    assert ei.value.message == "Booking đã duyệt"
    assert user_message(ei.value, "x") == "Booking đã duyệt"


def test_fallback_when_body_has_no_message(make_api):
    api, _, _ = make_api({("PUT", "/bookings/b1/approve"): lambda r: httpx.Response(500, text="<html>oops</html>")})

    with pytest.raises(ApiError) as ei:
        BookingService(api).approve("b1")

    assert ei.value.message == "Duyệt booking thất bại"
    assert ei.value.payload == {"_raw": "<html>oops</html>"}
    assert user_message(ei.value, "Duyệt booking thất bại") == "Duyệt booking thất bại"


def test_default_fallback(make_api):
    api, _, _ = make_api({("GET", "/rooms/r1"): (404, {"success": False})})
    with pytest.raises(ApiError) as ei:
        api.get("/rooms/r1")
    assert ei.value.status_code == 404
    assert ei.value.message == DEFAULT_FALLBACK


def test_success_body_that_is_not_json(make_api):
    api, _, _ = make_api({("GET", "/rooms"): lambda r: httpx.Response(200, text="OK")})
    with pytest.raises(ApiError) as ei:
        api.get("/rooms")
    assert ei.value.message == "Response is not valid JSON."


def test_empty_body_is_none(make_api):
    api, _, _ = make_api({("DELETE", "/bookings/b1"): lambda r: httpx.Response(204)})
    assert api.delete("/bookings/b1") is None


def test_transport_failure_is_network_error():
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api = ApiClient(AppState(token="t"), base_url="http://api.test", transport=httpx.MockTransport(boom))
    try:
        with pytest.raises(NetworkError) as ei:
            api.get("/rooms")
        assert ei.value.url == "http://api.test/rooms"
        assert user_message(ei.value, "Lỗi mạng") == "Lỗi mạng"
    finally:
        api.close()


def test_success_false_on_200_is_an_error(make_api):
    api, _, _ = make_api({("GET", "/invoices/contract/c1"): (200, {"success": False, "message": "Không có quyền"})})
    with pytest.raises(ApiError) as ei:
        InvoiceService(api).by_contract("c1")
    assert ei.value.message == "Không có quyền"
    assert ei.value.status_code == 200


def test_write_without_token_sends_nothing(make_api):
    api, spy, _ = make_api(token=None)
    with pytest.raises(NotSignedIn):
        BookingService(api).approve("b1")
    assert spy.calls == []


def test_list_calls_carry_limit(make_api):
    api, spy, _ = make_api({("GET", "/bookings/host"): (200, {"data": []})})
    BookingService(api).list_host()
    assert spy.calls[0].url.params["limit"] == "9999"
