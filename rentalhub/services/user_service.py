# rentalhub/services/user_service.py
from __future__ import annotations

from typing import Any, Optional

from ..clients.http import pick
from ..domain.dates import parse_date
from ..schemas import User
from .base import BaseService, as_model, as_models


class UserService(BaseService):
    def list_users(
        self,
        *,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> list[User]:
        """
        GET /users, filtered locally (the endpoint takes no filters), newest first.
        Search matches full name / email (case-insensitive) or phone (substring).
        """
        body = self.api.get("/users", params=self.list_params())
        users = as_models(User, pick(body, "data.users", "data", default=[]))

        if role and role != "all":
            users = [u for u in users if u.role == role]
        if status and status != "all":
            users = [u for u in users if u.status == status]
        if search:
            s = search.lower()
            users = [
                u
                for u in users
                if s in (u.full_name or "").lower() or s in (u.email or "").lower() or search in (u.phone or "")
            ]
        lo = parse_date(date_from)
        hi = parse_date(date_to)
        if lo is not None:
            users = [u for u in users if (parse_date(u.created_at) or lo) >= lo]
        if hi is not None:
            users = [u for u in users if (parse_date(u.created_at) or hi) <= hi]

        return sorted(users, key=lambda u: u.created_at or "", reverse=True)

    def get(self, user_id: str) -> Optional[User]:
        body = self.api.get(f"/users/{user_id}")
        return as_model(User, body, "data.user", "data")

    def update(self, user_id: str, changes: dict[str, Any]) -> Optional[User]:
        body = self.api.put(f"/users/{user_id}", json=changes, fallback="Không thể cập nhật thông tin người dùng")
        return as_model(User, body, "data")

    def delete(self, user_id: str) -> None:
        self.api.delete(f"/users/{user_id}", fallback="Không thể xóa người dùng")

    def update_status(self, user_id: str, status: str) -> Optional[User]:
        return self.update(user_id, {"status": status})

    def update_role(self, user_id: str, role: str) -> Optional[User]:
        return self.update(user_id, {"role": role})
