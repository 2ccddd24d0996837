# rentalhub/clients/http.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..config import settings
from ..errors import ApiError, NetworkError, RequestCancelled
from ..middleware.request_id import attach_request_id
from ..middleware.structured_logging import log_response, mark_request_start
from ..state import AppState
from .cancellation import CancelToken

log = logging.getLogger(__name__)

DEFAULT_FALLBACK = "❌ Yêu cầu thất bại!"


def build_headers(token: Optional[str] = None) -> dict[str, str]:
    """JSON content type, plus the bearer token when one is known."""
    h = {"Content-Type": "application/json"}
    if token:
        h["Authorization"] = f"Bearer {token}"
    return h


def pick(payload: Any, *paths: str, default: Any = None) -> Any:
    """
    First non-None value among dotted paths.

    The API wraps results inconsistently ({data: {contracts: [...]}},
    {data: [...]}, bare lists), so callers list the shapes they accept:
        pick(body, "data.contracts", "contracts", "data", default=[])
    An empty path ("") means the payload itself.
    """
    for path in paths:
        cur = payload
        for part in [p for p in path.split(".") if p]:
            if isinstance(cur, dict):
                cur = cur.get(part)
            else:
                cur = None
                break
        if cur is not None:
            return cur
    return default


class ApiClient:
    """
    One httpx.Client for the marketplace API.

    - Authorization is rebuilt from AppState on every request, so a login
      or logout takes effect immediately.
    - Non-2xx -> ApiError(server message or fallback)
    - transport failure -> NetworkError
    - cancelled token -> RequestCancelled (before sending, and for late responses)
    """

    def __init__(
        self,
        state: AppState,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        list_limit: Optional[int] = None,
    ) -> None:
        self.state = state
        self.base = (base_url or settings.api_base_url).rstrip("/")
        self.list_limit = int(list_limit if list_limit is not None else settings.list_limit)
        self._client = httpx.Client(
            base_url=self.base,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            transport=transport,
            event_hooks={
                "request": [attach_request_id, mark_request_start],
                "response": [log_response],
            },
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def headers(self) -> dict[str, str]:
        return build_headers(self.state.token)

    def list_params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": self.list_limit}
        params.update({k: v for k, v in extra.items() if v is not None and v != ""})
        return params

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
        cancel: Optional[CancelToken] = None,
        fallback: str = DEFAULT_FALLBACK,
    ) -> Any:
        if cancel is not None:
            cancel.raise_if_cancelled()

        try:
            r = self._client.request(method, path, json=json, params=params, headers=self.headers())
        except httpx.TransportError as e:
            log.warning("request failed: %s %s: %s", method, path, e)
            raise NetworkError(str(e) or fallback, url=f"{self.base}{path}") from e

        if cancel is not None and cancel.cancelled:
            raise RequestCancelled(f"{method} {path} finished after its scope was cancelled")

        payload = _decode(r)

        if r.is_error:
            message = fallback
            if isinstance(payload, dict) and isinstance(payload.get("message"), str) and payload["message"].strip():
                message = payload["message"]
            raise ApiError(message, status_code=r.status_code, payload=payload)

        if isinstance(payload, _RawBody):
            raise ApiError("Response is not valid JSON.", status_code=r.status_code, payload={"_raw": payload.text})

        return payload

    def get(self, path: str, *, params: Optional[dict[str, Any]] = None, **kw: Any) -> Any:
        return self.request("GET", path, params=params, **kw)

    def post(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.request("POST", path, json=json, **kw)

    def put(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.request("PUT", path, json=json, **kw)

    def patch(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.request("PATCH", path, json=json, **kw)

    def delete(self, path: str, **kw: Any) -> Any:
        return self.request("DELETE", path, **kw)


class _RawBody:
    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text


def _decode(r: httpx.Response) -> Any:
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        if r.is_error:
            return {"_raw": r.text}
        return _RawBody(r.text)
