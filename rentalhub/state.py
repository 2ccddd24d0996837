# rentalhub/state.py
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

log = logging.getLogger(__name__)


class AppState:
    """
    Single source of truth for the signed-in session: bearer token and the
    cached profile snapshot returned at login.

    Created once at start-up and handed to the HTTP client and workflows.
    Nothing else reads the state file directly.
    """

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        user: Optional[dict[str, Any]] = None,
        store: Optional["StateStore"] = None,
    ) -> None:
        self._lock = threading.Lock()
        self._token = token or None
        self._user = dict(user) if user else None
        self._store = store

    # ---- token ----
    @property
    def token(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set_token(self, token: Optional[str]) -> None:
        with self._lock:
            self._token = token or None
        self._persist()

    # ---- user snapshot ----
    @property
    def user(self) -> Optional[dict[str, Any]]:
        with self._lock:
            return dict(self._user) if self._user else None

    def set_user(self, user: Optional[dict[str, Any]]) -> None:
        with self._lock:
            self._user = dict(user) if user else None
        self._persist()

    @property
    def user_id(self) -> Optional[str]:
        u = self.user or {}
        uid = u.get("id") or u.get("userId")
        return str(uid) if uid else None

    @property
    def role(self) -> Optional[str]:
        u = self.user or {}
        return u.get("role")

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def sign_in(self, *, token: str, user: dict[str, Any]) -> None:
        # `id` mirrors `userId` so callers can use either key
        snapshot = dict(user)
        if snapshot.get("userId") and not snapshot.get("id"):
            snapshot["id"] = snapshot["userId"]
        with self._lock:
            self._token = token
            self._user = snapshot
        self._persist()

    def sign_out(self) -> None:
        with self._lock:
            self._token = None
            self._user = None
        self._persist()

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {"token": self._token, "user": dict(self._user) if self._user else None}

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self)


class StateStore:
    """
    JSON file persistence for AppState.

    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a reader never sees a half-written file. Concurrent
    processes still resolve as last writer wins.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> AppState:
        data: dict[str, Any] = {}
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8")) or {}
            except (OSError, json.JSONDecodeError):
                log.warning("state file unreadable, starting signed out: %s", self.path)
                data = {}

        user = data.get("user")
        if not isinstance(user, dict):
            user = None
        token = data.get("token")
        if not isinstance(token, str):
            token = None
        return AppState(token=token, user=user, store=self)

    def save(self, state: AppState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state.to_dict(), ensure_ascii=False, indent=2)

        fd, tmp = tempfile.mkstemp(prefix=".state-", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
