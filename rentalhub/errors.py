# rentalhub/errors.py
from __future__ import annotations

from typing import Any, Optional


class RentalHubError(Exception):
    """Base class for everything the client raises on purpose."""


class ApiError(RentalHubError):
    """
    Non-2xx answer from the marketplace API (or a success body that is not JSON).

    `message` is the server-provided `message` when the body carries one,
    otherwise the fallback chosen by the caller.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def server_message(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            msg = self.payload.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg
        return None


class NetworkError(RentalHubError):
    """The request never produced an HTTP response (DNS, refused, timeout...)."""

    def __init__(self, message: str, *, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url


class FormValidationError(ValueError):
    """Input rejected locally; no request was sent."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


class RequestCancelled(RentalHubError):
    """The owning request scope was cancelled before the result could be used."""


class NotSignedIn(RentalHubError):
    """An action that needs a bearer token was attempted while signed out."""

    def __init__(self, message: str = "Chưa đăng nhập") -> None:
        super().__init__(message)
        self.message = message


def user_message(exc: BaseException, fallback: str) -> str:
    """Server message when the error carries one, otherwise `fallback`."""
    if isinstance(exc, ApiError):
        return exc.server_message or fallback
    if isinstance(exc, (FormValidationError, NotSignedIn)):
        return exc.message
    return fallback
