# rentalhub/middleware/request_id.py
from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional

import httpx
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

HEADER_NAME = "X-Request-ID"


def get_request_id() -> str | None:
    return request_id_ctx.get()


@contextmanager
def request_id_scope(rid: Optional[str] = None) -> Iterator[str]:
    """
    Pins one id for every call made inside the block (one CLI command,
    one workflow step). Generates a UUID4 when none is given.
    """
    rid = rid or str(uuid.uuid4())
    token = request_id_ctx.set(rid)
    try:
        yield rid
    finally:
        request_id_ctx.reset(token)


def attach_request_id(request: httpx.Request) -> None:
    """httpx request hook: reuse the scoped id or mint a fresh one per request."""
    if HEADER_NAME in request.headers:
        return
    request.headers[HEADER_NAME] = get_request_id() or str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Result page side: accepts an incoming X-Request-ID (or X-Request-Id),
    otherwise generates UUID4, and returns it in the response headers.
    """

    header_out = HEADER_NAME

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get("X-Request-ID") or request.headers.get("X-Request-Id")
        if not rid:
            rid = str(uuid.uuid4())

        token = request_id_ctx.set(rid)
        try:
            resp = await call_next(request)
            resp.headers[self.header_out] = rid
            return resp
        finally:
            request_id_ctx.reset(token)
