# tests/test_state_store.py
from __future__ import annotations

import json

from rentalhub.state import AppState, StateStore


def test_sign_in_persists_and_reloads(tmp_path):
    store = StateStore(tmp_path / "state.json")
    state = store.load()
    assert not state.is_authenticated()

    state.sign_in(token="t1", user={"userId": "user_7", "role": "tenant", "fullName": "An"})

    again = store.load()
    assert again.token == "t1"
    assert again.user_id == "user_7"
    assert again.user["id"] == "user_7"
    assert again.role == "tenant"


def test_sign_out_clears_file(tmp_path):
    store = StateStore(tmp_path / "state.json")
    state = store.load()
    state.sign_in(token="t1", user={"userId": "u"})
    state.sign_out()

    assert json.loads((tmp_path / "state.json").read_text(encoding="utf-8")) == {"token": None, "user": None}
    assert store.load().token is None


def test_unreadable_file_starts_signed_out(tmp_path):
    p = tmp_path / "state.json"
    p.write_text("{not json", encoding="utf-8")

    state = StateStore(p).load()
    assert state.token is None
    assert state.user is None


def test_no_temp_files_left_behind(tmp_path):
    store = StateStore(tmp_path / "nested" / "state.json")
    state = store.load()
    for i in range(3):
        state.set_token(f"t{i}")

    assert sorted(p.name for p in (tmp_path / "nested").iterdir()) == ["state.json"]
    assert store.load().token == "t2"


def test_user_snapshot_is_a_copy():
    state = AppState(token="x", user={"userId": "u1"})
    snap = state.user
    snap["userId"] = "hacked"
    assert state.user_id == "u1"
