"""Tests for the persisted session."""

from __future__ import annotations

import json

from cmsdesk.models import User, UserRole
from cmsdesk.session import TOKEN_KEY, USER_KEY, Session, SessionStore


class TestSessionStore:
    def test_in_memory(self):
        store = SessionStore()
        store.set("a", "1")
        assert store.get("a") == "1"
        store.remove("a")
        assert store.get("a") is None

    def test_writes_through(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        store = SessionStore(path)
        store.set(TOKEN_KEY, "T")
        assert json.loads(path.read_text()) == {"authToken": "T"}
        assert SessionStore(path).get(TOKEN_KEY) == "T"

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert SessionStore(path).get(TOKEN_KEY) is None

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("[1, 2]")
        assert SessionStore(path).get(TOKEN_KEY) is None

    def test_remove_missing_key_is_noop(self, tmp_path):
        path = tmp_path / "session.json"
        SessionStore(path).remove(TOKEN_KEY)
        assert not path.exists()


class TestSession:
    def test_save_and_read(self, tmp_path):
        session = Session.from_path(tmp_path / "s.json")
        session.save("T", User(id=1, name="Ana", email="ana@example.com", role=UserRole.ADMIN))
        reopened = Session.from_path(tmp_path / "s.json")
        assert reopened.token == "T"
        assert reopened.user.email == "ana@example.com"
        assert reopened.is_authenticated

    def test_save_accepts_plain_dict(self):
        session = Session()
        session.save("T", {"id": 2, "name": "Bo", "email": "bo@example.com", "role": "creator"})
        assert session.user.role == UserRole.CREATOR

    def test_unreadable_user_is_none(self):
        session = Session()
        session.store.set(USER_KEY, '{"id": "x"}')
        assert session.user is None

    def test_token_read_at_access_time(self):
        session = Session()
        assert session.token is None
        session.store.set(TOKEN_KEY, "rotated")
        assert session.token == "rotated"

    def test_token_without_user_is_not_authenticated(self):
        session = Session()
        session.store.set(TOKEN_KEY, "T")
        assert not session.is_authenticated

    def test_token_with_unreadable_user_is_not_authenticated(self):
        session = Session()
        session.store.set(TOKEN_KEY, "T")
        session.store.set(USER_KEY, "{broken")
        assert not session.is_authenticated

    def test_clear_token_keeps_user(self):
        session = Session()
        session.save("T", {"id": 1, "name": "A", "email": "a@b.co", "role": "admin"})
        session.clear_token()
        assert session.token is None
        assert session.user is not None

    def test_clear(self):
        session = Session()
        session.save("T", {"id": 1, "name": "A", "email": "a@b.co", "role": "admin"})
        session.clear()
        assert session.token is None
        assert session.user is None
        assert not session.is_authenticated
