# rentalhub/clients/cancellation.py
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..errors import RequestCancelled

if TYPE_CHECKING:
    from .http import ApiClient


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled("request scope was cancelled")


class RequestScope:
    """
    Ties a batch of requests to the lifetime of whatever needs their results.

    - every call carries the scope's CancelToken; leaving the `with` block
      (or calling cancel()) blocks new calls and discards late responses
    - GETs are de-duplicated per (path, params) for the life of the scope
    - any mutation through the scope drops the GET cache so the next read
      reflects server truth
    """

    def __init__(self, client: "ApiClient", *, token: Optional[CancelToken] = None) -> None:
        self.client = client
        self.token = token or CancelToken()
        self._lock = threading.Lock()
        self._key_locks: dict[tuple, threading.Lock] = {}
        self._results: dict[tuple, Any] = {}

    def __enter__(self) -> "RequestScope":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.cancel()

    def cancel(self) -> None:
        self.token.cancel()
        with self._lock:
            self._results.clear()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    @staticmethod
    def _key(path: str, params: Optional[dict[str, Any]]) -> tuple:
        items = tuple(sorted((str(k), str(v)) for k, v in (params or {}).items()))
        return (path, items)

    def get(self, path: str, *, params: Optional[dict[str, Any]] = None, **kw: Any) -> Any:
        key = self._key(path, params)
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                if key in self._results:
                    return self._results[key]
            result = self.client.get(path, params=params, cancel=self.token, **kw)
            with self._lock:
                if not self.token.cancelled:
                    self._results[key] = result
            return result

    def invalidate(self, prefix: Optional[str] = None) -> None:
        with self._lock:
            if prefix is None:
                self._results.clear()
                return
            for key in [k for k in self._results if k[0].startswith(prefix)]:
                del self._results[key]

    def send(self, method: str, path: str, *, json: Any = None, **kw: Any) -> Any:
        try:
            return self.client.request(method, path, json=json, cancel=self.token, **kw)
        finally:
            self.invalidate()

    def post(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.send("POST", path, json=json, **kw)

    def put(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.send("PUT", path, json=json, **kw)

    def patch(self, path: str, json: Any = None, **kw: Any) -> Any:
        return self.send("PATCH", path, json=json, **kw)

    def delete(self, path: str, **kw: Any) -> Any:
        return self.send("DELETE", path, **kw)

    def gather(self, *calls: Callable[[], Any]) -> list[Any]:
        """
        Run independent loads concurrently. All-or-nothing: the first failure
        (in argument order) is re-raised and the combined result is dropped.
        """
        if not calls:
            return []
        self.token.raise_if_cancelled()
        with ThreadPoolExecutor(max_workers=len(calls)) as pool:
            futures = [pool.submit(c) for c in calls]
            return [f.result() for f in futures]
