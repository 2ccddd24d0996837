# tests/test_statistics.py
from __future__ import annotations

import pytest

from rentalhub.clients.cancellation import RequestScope
from rentalhub.domain.statistics import approval_rate, counts_by_status, occupancy_rate, summarize
from rentalhub.errors import FormValidationError, NotSignedIn
from rentalhub.schemas import StatsOut, StatusCount
from rentalhub.services.statistics_service import StatisticsService
from rentalhub.workflows.dashboard import DashboardWorkflow

HOST_STATS = {
    "range": {"from": "2024-05-01", "to": "2024-05-31"},
    "kpis": {
        "roomsByStatus": [{"_id": "rented", "count": 3}, {"_id": "available", "count": 1}],
        "bookingsByStatus": [
            {"_id": "approved", "count": 6},
            {"_id": "pending", "count": 2},
            {"_id": "rejected", "count": 2},
        ],
        "contractsByStatus": [{"_id": "active", "count": 3}],
        "invoicesByStatus": [{"_id": None, "count": 1}],
        "revenueTotal": 27_000_000,
        "paymentsPaidCount": 3,
    },
    "charts": {
        "revenueMonthly": [
            {"_id": "2024-05", "revenue": 18_000_000, "count": 2},
            {"_id": "2024-04", "revenue": 9_000_000, "count": 1},
        ]
    },
}


def test_rates_are_zero_when_nothing_to_divide():
    assert occupancy_rate(0, 0) == 0
    assert approval_rate(5, 0) == 0
    assert occupancy_rate(3, 4) == 75.0


def test_counts_by_status_null_bucket():
    rows = [StatusCount.model_validate({"_id": None, "count": 2}), StatusCount(status="paid", count=1)]
    assert counts_by_status(rows) == {"unknown": 2, "paid": 1}


def test_summarize_host_stats():
    s = summarize(StatsOut.model_validate(HOST_STATS))

    assert (s.range_from, s.range_to) == ("2024-05-01", "2024-05-31")
    assert s.total_rooms == 4
    assert s.occupancy_rate == 75.0
    assert s.total_bookings == 10
    assert s.approval_rate == 60.0
    assert s.pending_bookings == 2
    assert s.invoices_by_status == {"unknown": 1}
    assert s.revenue_total == 27_000_000
    assert [p.month for p in s.revenue_monthly] == ["2024-04", "2024-05"]


def test_empty_stats_summarize_to_zero():
    s = summarize(StatsOut.model_validate({}))
    assert s.total_rooms == 0
    assert s.occupancy_rate == 0
    assert s.approval_rate == 0


def test_service_unwraps_data_and_sends_range(make_api):
    api, spy, _ = make_api({("GET", "/statistics/host"): (200, {"success": True, "data": HOST_STATS})})

    out = StatisticsService(api).host(date_from="2024-05-01", date_to="2024-05-31T00:00:00.000Z")

    assert out.kpis.revenue_total == 27_000_000
    assert dict(spy.calls[0].url.params) == {"from": "2024-05-01", "to": "2024-05-31"}


def test_inverted_range_sends_nothing(make_api):
    api, spy, _ = make_api()
    with pytest.raises(FormValidationError):
        StatisticsService(api).admin(date_from="2024-06-01", date_to="2024-05-01")
    assert spy.calls == []


def test_stats_need_a_token(make_api):
    api, spy, _ = make_api(token=None)
    with pytest.raises(NotSignedIn):
        StatisticsService(api).admin()
    assert spy.calls == []


def test_admin_overview_combines_kpis_and_approvals(make_api):
    api, spy, _ = make_api(
        {
            ("GET", "/statistics/admin"): (200, HOST_STATS),
            ("GET", "/approvals"): (
                200,
                {
                    "data": [
                        {"approvalId": "a1", "roomId": "r1", "approvalStatus": "approved"},
                        {"approvalId": "a2", "roomId": "r2", "approvalStatus": "pending"},
                        {"approvalId": "a3", "roomId": "r3", "approvalStatus": "approved"},
                        {"approvalId": "a4", "roomId": "r4", "approvalStatus": "rejected"},
                    ]
                },
            ),
        }
    )

    with RequestScope(api) as scope:
        out = DashboardWorkflow(scope).admin_overview()

    assert out.summary.total_rooms == 4
    assert (out.listings_pending, out.listings_approved, out.listings_rejected) == (1, 2, 1)
    assert out.listing_approval_rate == 50.0
    assert sorted(spy.paths) == [("GET", "/approvals"), ("GET", "/statistics/admin")]
