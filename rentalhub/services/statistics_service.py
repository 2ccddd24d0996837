# rentalhub/services/statistics_service.py
from __future__ import annotations

from typing import Any, Optional

from ..domain.dates import parse_date
from ..errors import FormValidationError
from ..schemas import StatsOut
from .base import BaseService, ensure_success


def _range_params(date_from: Optional[str], date_to: Optional[str]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key, v in (("from", date_from), ("to", date_to)):
        if not v:
            continue
        d = parse_date(v)
        if d is None:
            raise FormValidationError(f"Ngày không hợp lệ: {v}", field=key)
        params[key] = d.isoformat()
    if "from" in params and "to" in params and params["from"] > params["to"]:
        raise FormValidationError("Khoảng thời gian không hợp lệ", field="from")
    return params


def _stats(body: Any) -> StatsOut:
    body = ensure_success(body, "Lỗi server")
    if isinstance(body, dict) and "kpis" not in body and isinstance(body.get("data"), dict):
        body = body["data"]
    return StatsOut.model_validate(body if isinstance(body, dict) else {})


class StatisticsService(BaseService):
    """Server-aggregated KPIs; the server defaults the range to the last 30 days."""

    def admin(self, *, date_from: Optional[str] = None, date_to: Optional[str] = None) -> StatsOut:
        self.require_token()
        return _stats(self.api.get("/statistics/admin", params=_range_params(date_from, date_to)))

    def host(self, *, date_from: Optional[str] = None, date_to: Optional[str] = None) -> StatsOut:
        self.require_token()
        return _stats(self.api.get("/statistics/host", params=_range_params(date_from, date_to)))
