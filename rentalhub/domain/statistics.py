# rentalhub/domain/statistics.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..schemas import RevenuePoint, StatsOut, StatusCount


def counts_by_status(rows: Sequence[StatusCount]) -> dict[str, int]:
    """[{_id: "rented", count: 3}, ...] -> {"rented": 3, ...}; null ids land under "unknown"."""
    out: dict[str, int] = {}
    for r in rows:
        key = str(r.status) if r.status is not None else "unknown"
        out[key] = out.get(key, 0) + int(r.count or 0)
    return out


def ratio_pct(part: float, total: float) -> float:
    if not total:
        return 0.0
    return float(part) / float(total) * 100.0


def occupancy_rate(rented: int, total: int) -> float:
    return ratio_pct(rented, total)


def approval_rate(approved: int, total: int) -> float:
    return ratio_pct(approved, total)


@dataclass(frozen=True)
class DashboardSummary:
    range_from: str | None
    range_to: str | None

    total_rooms: int
    rented_rooms: int
    available_rooms: int
    occupancy_rate: float

    total_bookings: int
    approved_bookings: int
    pending_bookings: int
    approval_rate: float

    contracts_by_status: dict[str, int]
    invoices_by_status: dict[str, int]

    revenue_total: float
    payments_paid_count: int
    revenue_monthly: list[RevenuePoint]


def summarize(stats: StatsOut) -> DashboardSummary:
    """Fixed dashboard shape from server-aggregated KPIs; no raw-record aggregation here."""
    rooms = counts_by_status(stats.kpis.rooms_by_status)
    bookings = counts_by_status(stats.kpis.bookings_by_status)

    total_rooms = sum(rooms.values())
    rented = rooms.get("rented", 0)
    total_bookings = sum(bookings.values())
    approved = bookings.get("approved", 0)

    return DashboardSummary(
        range_from=stats.range.from_,
        range_to=stats.range.to,
        total_rooms=total_rooms,
        rented_rooms=rented,
        available_rooms=rooms.get("available", 0),
        occupancy_rate=occupancy_rate(rented, total_rooms),
        total_bookings=total_bookings,
        approved_bookings=approved,
        pending_bookings=bookings.get("pending", 0),
        approval_rate=approval_rate(approved, total_bookings),
        contracts_by_status=counts_by_status(stats.kpis.contracts_by_status),
        invoices_by_status=counts_by_status(stats.kpis.invoices_by_status),
        revenue_total=float(stats.kpis.revenue_total or 0.0),
        payments_paid_count=int(stats.kpis.payments_paid_count or 0),
        revenue_monthly=sorted(stats.charts.revenue_monthly, key=lambda p: p.month or ""),
    )
