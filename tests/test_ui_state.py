# tests/test_ui_state.py
# -*- coding: utf-8 -*-
"""État de session Streamlit, avec un faux module `st` (pas de serveur)."""

from types import SimpleNamespace

import pytest

import mindscape.ui_state as ui_state


@pytest.fixture
def fake_st(monkeypatch):
    st = SimpleNamespace(session_state={}, caption=lambda *a, **k: None)
    monkeypatch.setattr(ui_state, "st", st)
    return st


def test_new_session_gets_demo_user(env, fake_st, monkeypatch):
    monkeypatch.setenv("MINDSCAPE_DEFAULT_EMAIL", "demo@example.com")
    u = ui_state.current_user(env.users)
    assert u.email == "demo@example.com"
    assert fake_st.session_state["user_id"] == u.id

def test_vanished_session_user_falls_back_to_demo(env, fake_st, monkeypatch):
    monkeypatch.setenv("MINDSCAPE_DEFAULT_EMAIL", "demo@example.com")
    fake_st.session_state.update({"user_id": "deleted-id", "user_email": "gone@example.com"})
    u = ui_state.current_user(env.users)
    assert u is not None
    assert u.email == "demo@example.com"
    assert fake_st.session_state == {"user_id": u.id, "user_email": "demo@example.com"}

def test_existing_session_user_is_kept(env, fake_st):
    other = env.users.create("kept@example.com")
    fake_st.session_state.update({"user_id": other.id, "user_email": other.email})
    assert ui_state.current_user(env.users).id == other.id

@pytest.mark.parametrize("duration, expected", [(0.0, 1), (0.4, 1), (600.0, 600)])
def test_seek_upper_bound(duration, expected):
    assert ui_state.seek_upper_bound(duration) == expected
