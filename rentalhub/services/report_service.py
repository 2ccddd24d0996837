# rentalhub/services/report_service.py
from __future__ import annotations

from typing import Optional

from ..clients.http import pick
from ..schemas import Report, ReportCreate
from .base import BaseService, as_model, as_models


class ReportService(BaseService):
    def create(self, report: ReportCreate) -> Optional[Report]:
        self.require_token()
        body = self.api.post("/reports", json=report.to_api(), fallback="Gửi báo cáo thất bại")
        return as_model(Report, body, "data")

    def list_all(self) -> list[Report]:
        body = self.api.get("/reports", params=self.list_params())
        return as_models(Report, pick(body, "data.reports", "data", default=[]))

    def mine(self) -> list[Report]:
        body = self.api.get("/reports/my-reports")
        return as_models(Report, pick(body, "data.reports", "data", default=[]))

    def get(self, report_id: str) -> Optional[Report]:
        body = self.api.get(f"/reports/{report_id}")
        return as_model(Report, body, "data")

    def by_room(self, room_id: str) -> list[Report]:
        body = self.api.get(f"/reports/room/{room_id}")
        return as_models(Report, pick(body, "data.reports", "data", default=[]))

    def update_status(self, report_id: str, status: str) -> Optional[Report]:
        body = self.api.put(f"/reports/{report_id}", json={"status": status}, fallback="❌ Cập nhật thất bại!")
        return as_model(Report, body, "data")
