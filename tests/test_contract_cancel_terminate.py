# tests/test_contract_cancel_terminate.py
from __future__ import annotations

import httpx

from rentalhub.workflows.contracts import (
    CANCEL_FAILED_MSG,
    CANCEL_OK_MSG,
    TERMINATE_FAILED_MSG,
    TERMINATE_OK_MSG,
    ContractWorkflow,
)

TENANT_LIST = {"success": True, "data": {"contracts": [{"contractId": "c1", "status": "cancel"}]}}
HOST_LIST = {"data": {"data": {"contracts": [{"contractId": "c2", "status": "terminated", "duration": 2}]}}}


def test_cancel_puts_then_refetches(make_api):
    api, spy, _ = make_api(
        {
            ("PUT", "/contracts/c1/cancel"): (200, {"success": True}),
            ("GET", "/contracts/tenant"): (200, TENANT_LIST),
        }
    )

    out = ContractWorkflow(api).cancel("c1")

    assert out.ok
    assert out.message == CANCEL_OK_MSG
    assert [c.status for c in out.contracts] == ["cancel"]
    assert spy.paths == [("PUT", "/contracts/c1/cancel"), ("GET", "/contracts/tenant")]


def test_cancel_failure_still_refetches(make_api):
    api, spy, _ = make_api(
        {
            ("PUT", "/contracts/c1/cancel"): (400, {"message": "Hợp đồng đã hết hạn"}),
            ("GET", "/contracts/tenant"): (200, TENANT_LIST),
        }
    )

    out = ContractWorkflow(api).cancel("c1")

    assert not out.ok
    assert out.message == "Hợp đồng đã hết hạn"
    assert spy.paths[-1] == ("GET", "/contracts/tenant")


def test_cancel_network_failure_uses_fallback(make_api):
    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    api, _, _ = make_api(
        {
            ("PUT", "/contracts/c1/cancel"): refused,
            ("GET", "/contracts/tenant"): (200, TENANT_LIST),
        }
    )

    out = ContractWorkflow(api).cancel("c1")
    assert not out.ok
    assert out.message == CANCEL_FAILED_MSG


def test_terminate_hits_host_endpoints(make_api):
    api, spy, _ = make_api(
        {
            ("PUT", "/contracts/c2/terminated"): (200, {"success": True}),
            ("GET", "/contracts/host"): (200, HOST_LIST),
        }
    )

    out = ContractWorkflow(api).terminate("c2")

    assert out.ok
    assert out.message == TERMINATE_OK_MSG
    assert out.contracts[0].contract_id == "c2"
    assert spy.paths == [("PUT", "/contracts/c2/terminated"), ("GET", "/contracts/host")]


def test_terminate_failure_message(make_api):
    api, _, _ = make_api(
        {
            ("PUT", "/contracts/c2/terminated"): (500, {}),
            ("GET", "/contracts/host"): (200, HOST_LIST),
        }
    )
    out = ContractWorkflow(api).terminate("c2")
    assert not out.ok
    assert out.message == TERMINATE_FAILED_MSG
