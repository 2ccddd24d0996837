# rentalhub/services/base.py
from __future__ import annotations

from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from ..clients.cancellation import RequestScope
from ..clients.http import ApiClient, pick
from ..errors import ApiError, NotSignedIn

M = TypeVar("M", bound=BaseModel)

Api = Union[ApiClient, RequestScope]


class BaseService:
    """
    Services accept either the bare ApiClient or a RequestScope; both expose
    get/post/put/patch/delete with the same signatures.
    """

    def __init__(self, api: Api) -> None:
        self.api = api

    @property
    def client(self) -> ApiClient:
        return self.api.client if isinstance(self.api, RequestScope) else self.api

    def list_params(self, **extra: Any) -> dict[str, Any]:
        return self.client.list_params(**extra)

    def require_token(self) -> None:
        if not self.client.state.token:
            raise NotSignedIn()


def ensure_success(body: Any, fallback: str) -> Any:
    """Some endpoints answer 200 with {success: false, message}; treat that as an error."""
    if isinstance(body, dict) and body.get("success") is False:
        msg = body.get("message") if isinstance(body.get("message"), str) else None
        raise ApiError(msg or fallback, status_code=200, payload=body)
    return body


def as_models(model: Type[M], rows: Any) -> list[M]:
    if not isinstance(rows, list):
        return []
    return [model.model_validate(r) for r in rows if isinstance(r, dict)]


def as_model(model: Type[M], body: Any, *paths: str) -> Optional[M]:
    data = pick(body, *paths) if paths else body
    if not isinstance(data, dict):
        return None
    return model.model_validate(data)
