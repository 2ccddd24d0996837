# tests/conftest.py
from __future__ import annotations

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from rentalhub.clients.http import ApiClient
from rentalhub.state import AppState

BASE_URL = "http://api.test"

Handler = Union[tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class Spy:
    """
    MockTransport handler keyed by (METHOD, path). Records every request so
    tests can assert exactly which calls were (or were not) made.
    """

    def __init__(self, routes: Optional[dict[tuple[str, str], Handler]] = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"success": False, "message": f"no route {request.url.path}"})
        if callable(handler):
            return handler(request)
        status, body = handler
        return httpx.Response(status, json=body)

    @property
    def paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.calls]

    def body(self, index: int) -> Any:
        return json.loads(self.calls[index].content)


@pytest.fixture
def make_api():
    clients: list[ApiClient] = []

    def _make(
        routes: Optional[dict[tuple[str, str], Handler]] = None,
        *,
        token: Optional[str] = "tok",
        user: Optional[dict[str, Any]] = None,
    ) -> tuple[ApiClient, Spy, AppState]:
        spy = Spy(routes)
        state = AppState(token=token, user=user or {"userId": "user_1", "id": "user_1", "role": "host"})
        api = ApiClient(state, base_url=BASE_URL, transport=httpx.MockTransport(spy), list_limit=9999)
        clients.append(api)
        return api, spy, state

    yield _make

    for c in clients:
        c.close()
