# rentalhub/services/auth_service.py
from __future__ import annotations

import logging
from typing import Any, Optional

from ..clients.http import pick
from ..errors import ApiError, FormValidationError
from ..schemas import LoginResult, PasswordChange, User
from ..state import AppState
from .base import Api, BaseService, as_model

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthService(BaseService):
    def __init__(self, api: Api, state: AppState) -> None:
        super().__init__(api)
        self.state = state

    def login(self, *, email: str, password: str) -> LoginResult:
        """
        POST /auth/login, then store token + user snapshot in AppState.
        Inactive accounts are refused locally even if the server issued a token.
        """
        fallback = "Email hoặc mật khẩu không đúng"
        body = self.api.post("/auth/login", json={"email": email, "password": password}, fallback=fallback)

        user = as_model(User, body, "data.user")
        token = pick(body, "data.token")
        if user is None or not isinstance(token, str) or not token:
            raise ApiError(fallback, status_code=401, payload=body)

        if user.status != "active":
            raise ApiError("Tài khoản chưa được kích hoạt hoặc bị khóa", status_code=403, payload=body)

        snapshot = user.model_dump(by_alias=True, exclude_none=True)
        self.state.sign_in(token=token, user=snapshot)
        log.info("signed in", extra={"user_id": user.key})
        return LoginResult(token=token, user=user)

    def logout(self) -> None:
        self.state.sign_out()

    def register(
        self,
        *,
        full_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: str = "tenant",
    ) -> Any:
        if len(password) < MIN_PASSWORD_LENGTH:
            raise FormValidationError("Mật khẩu phải có ít nhất 6 ký tự", field="password")
        payload = {"fullName": full_name, "email": email, "password": password, "phone": phone, "role": role}
        return self.api.post(
            "/auth/register",
            json={k: v for k, v in payload.items() if v is not None},
            fallback="Không thể đăng ký. Vui lòng thử lại.",
        )

    def me(self) -> Optional[User]:
        self.require_token()
        body = self.api.get("/auth/me")
        return as_model(User, body, "data.user", "data")

    def update_profile(self, changes: dict[str, Any]) -> Optional[User]:
        self.require_token()
        body = self.api.put("/auth/profile", json=changes, fallback="❌ Cập nhật thất bại!")
        user = as_model(User, body, "data.user", "data")

        # keep the cached snapshot in step with what the server accepted
        current = self.state.user or {}
        fresh = user.model_dump(by_alias=True, exclude_none=True) if user else changes
        self.state.set_user({**current, **fresh})
        return user

    def change_password(self, *, current_password: str, new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise FormValidationError("Mật khẩu xác nhận không khớp", field="confirm_password")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise FormValidationError("Mật khẩu mới phải có ít nhất 6 ký tự", field="new_password")

        self.require_token()
        payload = PasswordChange(current_password=current_password, new_password=new_password)
        self.api.put("/auth/password", json=payload.to_api(), fallback="Đổi mật khẩu thất bại")
