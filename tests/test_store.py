"""Tests for the in-memory session store."""

from __future__ import annotations

import pytest

from keypad import UnknownKeyError
from store import SessionLimitError, SessionNotFoundError, SessionStore


class TestCreate:

    def test_create_returns_session_with_id(self, store):
        session = store.create()
        assert session.id
        assert session.keypad.display == "0"

    def test_create_sets_timestamps(self, store):
        session = store.create()
        assert session.created_at is not None
        assert session.updated_at == session.created_at

    def test_create_increments_count(self, store):
        assert store.count() == 0
        store.create()
        store.create()
        assert store.count() == 2

    def test_sessions_are_independent(self, store):
        a = store.create()
        b = store.create()
        store.press(a.id, ["5", "+"])
        assert b.keypad.calculator.pending is None

    def test_limit(self):
        store = SessionStore(max_sessions=1)
        store.create()
        with pytest.raises(SessionLimitError) as excinfo:
            store.create()
        assert excinfo.value.limit == 1

    def test_limit_defaults_to_config(self, monkeypatch):
        import config
        monkeypatch.setattr(config, "MAX_SESSIONS", 7)
        assert SessionStore().max_sessions == 7


class TestGet:

    def test_get_existing(self, store):
        session = store.create()
        assert store.get(session.id) is session

    def test_get_missing(self, store):
        with pytest.raises(SessionNotFoundError) as excinfo:
            store.get("nope")
        assert excinfo.value.session_id == "nope"


class TestPress:

    def test_press_updates_display(self, store):
        session = store.create()
        store.press(session.id, ["5", "+", "3", "="])
        assert session.keypad.display == "8.0"

    def test_press_bumps_updated_at(self, store):
        session = store.create()
        store.press(session.id, ["1"])
        assert session.updated_at >= session.created_at

    def test_press_unknown_key(self, store):
        session = store.create()
        with pytest.raises(UnknownKeyError):
            store.press(session.id, ["?"])

    def test_press_missing_session(self, store):
        with pytest.raises(SessionNotFoundError):
            store.press("nope", ["1"])


class TestListAndDelete:

    def test_list_newest_first(self, store):
        first = store.create()
        second = store.create()
        items = store.list()
        assert {s.id for s in items} == {first.id, second.id}
        assert items[0].created_at >= items[1].created_at

    def test_list_pagination(self, store):
        for _ in range(4):
            store.create()
        assert len(store.list(offset=1, limit=2)) == 2
        assert len(store.list(offset=3, limit=2)) == 1

    def test_delete(self, store):
        session = store.create()
        deleted = store.delete(session.id)
        assert deleted is session
        assert store.count() == 0

    def test_delete_missing(self, store):
        with pytest.raises(SessionNotFoundError):
            store.delete("nope")

    def test_clear(self, store):
        store.create()
        store.clear()
        assert store.count() == 0


class TestView:

    def test_view_without_pending(self, store):
        view = store.create().view()
        assert view.display == "0"
        assert view.pending is None

    def test_view_with_pending(self, store):
        session = store.create()
        store.press(session.id, ["9", "÷"])
        view = session.view()
        assert view.pending.left_operand == "9.0"
        assert view.pending.operator == "÷"
