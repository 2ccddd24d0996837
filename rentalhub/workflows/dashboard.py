# rentalhub/workflows/dashboard.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..clients.cancellation import RequestScope
from ..domain.statistics import DashboardSummary, approval_rate, summarize
from ..services.approval_service import ApprovalService
from ..services.statistics_service import StatisticsService


@dataclass(frozen=True)
class AdminOverview:
    summary: DashboardSummary
    listings_pending: int
    listings_approved: int
    listings_rejected: int
    listing_approval_rate: float


class DashboardWorkflow:
    """Read-only KPI views. Loads run inside one RequestScope."""

    def __init__(self, scope: RequestScope) -> None:
        self.scope = scope
        self.stats = StatisticsService(scope)
        self.approvals = ApprovalService(scope)

    def host(self, *, date_from: Optional[str] = None, date_to: Optional[str] = None) -> DashboardSummary:
        return summarize(self.stats.host(date_from=date_from, date_to=date_to))

    def admin(self, *, date_from: Optional[str] = None, date_to: Optional[str] = None) -> DashboardSummary:
        return summarize(self.stats.admin(date_from=date_from, date_to=date_to))

    def admin_overview(self, *, date_from: Optional[str] = None, date_to: Optional[str] = None) -> AdminOverview:
        """KPIs and listing approvals fetched together; either failing fails the view."""
        stats, approvals = self.scope.gather(
            lambda: self.stats.admin(date_from=date_from, date_to=date_to),
            self.approvals.list,
        )
        counts = {"pending": 0, "approved": 0, "rejected": 0}
        for a in approvals:
            if a.approval_status in counts:
                counts[a.approval_status] += 1

        return AdminOverview(
            summary=summarize(stats),
            listings_pending=counts["pending"],
            listings_approved=counts["approved"],
            listings_rejected=counts["rejected"],
            listing_approval_rate=approval_rate(counts["approved"], len(approvals)),
        )
