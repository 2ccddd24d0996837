# rentalhub/services/approval_service.py
from __future__ import annotations

from typing import Optional

from ..clients.http import pick
from ..schemas import Approval
from .base import BaseService, as_model, as_models


class ApprovalService(BaseService):
    """Listing approvals, independent of the room's operational status."""

    def list(self) -> list[Approval]:
        body = self.api.get("/approvals", params=self.list_params())
        return as_models(Approval, pick(body, "data.approvals", "data", default=[]))

    def get(self, approval_id: str) -> Optional[Approval]:
        body = self.api.get(f"/approvals/{approval_id}")
        return as_model(Approval, body, "data")

    def create(self, *, room_id: str, status: str = "pending", note: Optional[str] = None) -> Optional[Approval]:
        payload = {"roomId": room_id, "approvalStatus": status, "note": note}
        body = self.api.post(
            "/approvals",
            json={k: v for k, v in payload.items() if v is not None},
            fallback="Tạo yêu cầu duyệt thất bại",
        )
        return as_model(Approval, body, "data")

    def update(self, approval_id: str, *, status: str, note: Optional[str] = None) -> Optional[Approval]:
        payload = {"approvalStatus": status, "note": note}
        body = self.api.put(
            f"/approvals/{approval_id}",
            json={k: v for k, v in payload.items() if v is not None},
            fallback="❌ Cập nhật thất bại!",
        )
        return as_model(Approval, body, "data")

    def set_room_approval(self, room_id: str, status: str, note: Optional[str] = None) -> Optional[Approval]:
        """Update the room's existing approval record, or create one."""
        existing = next((a for a in self.list() if a.room_id == room_id and a.approval_id), None)
        if existing is not None:
            return self.update(existing.approval_id, status=status, note=note)
        return self.create(room_id=room_id, status=status, note=note)
