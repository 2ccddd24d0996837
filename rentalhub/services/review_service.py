# rentalhub/services/review_service.py
from __future__ import annotations

from typing import Optional

from ..clients.http import pick
from ..schemas import Review, ReviewCreate
from .base import BaseService, as_model, as_models


class ReviewService(BaseService):
    def room_reviews(self, room_id: str) -> list[Review]:
        body = self.api.get(f"/reviews/{room_id}")
        return as_models(Review, pick(body, "data.reviews", "data", default=[]))

    def list_all(self) -> list[Review]:
        body = self.api.get("/reviews", params=self.list_params())
        return as_models(Review, pick(body, "data.reviews", "data", default=[]))

    def create(self, review: ReviewCreate) -> Optional[Review]:
        self.require_token()
        body = self.api.post("/reviews", json=review.to_api(), fallback="Gửi đánh giá thất bại")
        return as_model(Review, body, "data")

    def approve(self, review_id: str) -> Optional[Review]:
        body = self.api.put(f"/reviews/{review_id}/approve", fallback="Duyệt đánh giá thất bại")
        return as_model(Review, body, "data")

    def delete(self, review_id: str) -> None:
        self.api.delete(f"/reviews/{review_id}", fallback="Xóa đánh giá thất bại")
