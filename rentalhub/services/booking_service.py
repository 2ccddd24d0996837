# rentalhub/services/booking_service.py
from __future__ import annotations

from typing import Optional

from ..clients.http import pick
from ..schemas import Booking, BookingCreate
from .base import BaseService, as_model, as_models


class BookingService(BaseService):
    def list_all(self) -> list[Booking]:
        """Admin: every booking."""
        body = self.api.get("/bookings", params=self.list_params())
        return as_models(Booking, pick(body, "data.bookings", "data", default=[]))

    def list_host(self) -> list[Booking]:
        """Bookings on the signed-in host's rooms."""
        body = self.api.get("/bookings/host", params=self.list_params())
        return as_models(Booking, pick(body, "data.bookings", "data", default=[]))

    def my_bookings(self) -> list[Booking]:
        body = self.api.get("/bookings/my-bookings")
        return as_models(Booking, pick(body, "data.bookings", "data", default=[]))

    def create(self, booking: BookingCreate) -> Optional[Booking]:
        self.require_token()
        body = self.api.post("/bookings", json=booking.to_api(), fallback="Đặt phòng thất bại")
        return as_model(Booking, body, "data")

    def approve(self, booking_id: str) -> Optional[Booking]:
        self.require_token()
        body = self.api.put(f"/bookings/{booking_id}/approve", fallback="Duyệt booking thất bại")
        return as_model(Booking, body, "data", "")

    def reject(self, booking_id: str, reason: Optional[str] = None) -> Optional[Booking]:
        self.require_token()
        body = self.api.put(
            f"/bookings/{booking_id}/reject",
            json={"reason": reason},
            fallback="Từ chối booking thất bại",
        )
        return as_model(Booking, body, "data", "")

    def delete(self, booking_id: str) -> None:
        self.api.delete(f"/bookings/{booking_id}", fallback="Xóa booking thất bại")
