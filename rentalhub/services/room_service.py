# rentalhub/services/room_service.py
from __future__ import annotations

from typing import Any, Optional, get_args

from ..clients.http import pick
from ..errors import FormValidationError
from ..schemas import Room, RoomStatus
from .base import BaseService, as_model, as_models

ROOM_STATUSES = set(get_args(RoomStatus))


def _filters(room_type: Optional[str], status: Optional[str], q: Optional[str]) -> dict[str, Any]:
    # "all" means no filter
    return {
        "roomType": room_type if room_type and room_type != "all" else None,
        "status": status if status and status != "all" else None,
        "q": q or None,
    }


class RoomService(BaseService):
    def list_rooms(
        self,
        *,
        room_type: Optional[str] = None,
        status: Optional[str] = None,
        q: Optional[str] = None,
    ) -> list[Room]:
        """Admin listing: GET /rooms."""
        body = self.api.get("/rooms", params=self.list_params(**_filters(room_type, status, q)))
        return as_models(Room, pick(body, "data.rooms", "data", default=[]))

    def search_rooms(
        self,
        *,
        room_type: Optional[str] = None,
        status: Optional[str] = None,
        q: Optional[str] = None,
    ) -> list[Room]:
        """Public listing: GET /rooms/searchRoom (regex search on the server)."""
        body = self.api.get("/rooms/searchRoom", params=self.list_params(**_filters(room_type, status, q)))
        return as_models(Room, pick(body, "data.rooms", "data", default=[]))

    def search(self, **params: Any) -> list[Room]:
        body = self.api.get("/rooms/search", params={k: v for k, v in params.items() if v not in (None, "")})
        return as_models(Room, pick(body, "data.rooms", "data", default=[]))

    def total_rooms(self) -> int:
        body = self.api.get("/rooms", params=self.list_params())
        total = pick(body, "data.pagination.totalRooms")
        if isinstance(total, int):
            return total
        return len(pick(body, "data.rooms", "data", default=[]) or [])

    def my_rooms(self) -> list[Room]:
        self.require_token()
        body = self.api.get("/rooms/my/rooms")
        return as_models(Room, pick(body, "data.rooms", "data", default=[]))

    def rooms_by_host(self, host_id: str) -> list[Room]:
        body = self.api.get(f"/rooms/host/{host_id}")
        return as_models(Room, pick(body, "data.rooms", "data", default=[]))

    def get_room(self, room_id: str) -> Optional[Room]:
        body = self.api.get(f"/rooms/{room_id}")
        return as_model(Room, body, "data.room", "data")

    def create_room(self, data: dict[str, Any]) -> Optional[Room]:
        body = self.api.post("/rooms", json=data, fallback="Tạo phòng thất bại")
        return as_model(Room, body, "data")

    def update_room(self, room_id: str, data: dict[str, Any]) -> Optional[Room]:
        body = self.api.put(f"/rooms/{room_id}", json=data, fallback="❌ Cập nhật thất bại!")
        return as_model(Room, body, "data")

    def delete_room(self, room_id: str) -> None:
        self.api.delete(f"/rooms/{room_id}", fallback="Xóa phòng thất bại")

    def update_status(self, room_id: str, status: str) -> Optional[Room]:
        if status not in ROOM_STATUSES:
            raise FormValidationError(f"Trạng thái phòng không hợp lệ: {status}", field="status")
        body = self.api.patch(
            f"/rooms/{room_id}/status",
            json={"status": status},
            fallback="Cập nhật trạng thái thất bại",
        )
        return as_model(Room, body, "data")
