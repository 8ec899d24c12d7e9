"""Tests for session persistence."""

import datetime
import json
import os
import platform
import threading
import time

import pytest

from accounts import InMemorySessions, Session, SessionDirectory, SessionStore
from errors import NotAuthenticated


def make_session(account_id="a1", urn="urn:li:person:999", token="at-1", **extra):
    data = {
        "accountId": account_id,
        "userUrn": urn,
        "name": "Manual Bypass User",
        "access_token": token,
        "lastUpdated": datetime.datetime(2026, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc),
    }
    data.update(extra)
    return data


class TestSessionStore:
    """Sessions are written whole and read back per account id."""

    def test_get_before_save(self, session_store):
        with pytest.raises(NotAuthenticated, match="Please login first"):
            session_store.get("a1")

    def test_save_then_get(self, session_store):
        session_store.save("a1", make_session(expires_in=3600, scope="w_member_social"))

        session = session_store.get("a1")

        assert isinstance(session, Session)
        assert session.user_urn == "urn:li:person:999"
        assert session.access_token == "at-1"
        assert session.refresh_token is None
        assert session.model_extra["expires_in"] == 3600

    def test_save_overwrites_wholesale(self, session_store):
        session_store.save("a1", make_session(token="at-old", stale_field="x"))
        session_store.save("a1", make_session(token="at-new"))

        session = session_store.get("a1")

        assert session.access_token == "at-new"
        assert "stale_field" not in session.model_extra

    def test_accounts_are_isolated(self, session_store):
        session_store.save("a1", make_session())

        with pytest.raises(NotAuthenticated):
            session_store.get("b2")

    def test_scoped_views_do_not_overwrite_each_other(self, session_store, session_backend):
        linkedin = session_store.scoped("linkedin")
        other = session_store.scoped("mastodon")

        linkedin.save("a1", make_session(token="at-linkedin"))
        other.save("a1", make_session(token="at-mastodon"))

        assert linkedin.get("a1").access_token == "at-linkedin"
        assert other.get("a1").access_token == "at-mastodon"
        assert session_backend.keys() == ["linkedin/a1", "mastodon/a1"]
        assert linkedin.account_ids() == ["a1"]

    def test_record_uses_camel_case_identity_keys(self, session_store, session_backend):
        session_store.save("a1", make_session())

        record = session_backend.read("a1")

        assert record["userUrn"] == "urn:li:person:999"
        assert record["accountId"] == "a1"
        assert record["lastUpdated"].startswith("2026-01-02T03:04:05")


class TestSessionDirectory:
    """File-backed sessions live at <root>/<provider>/<account>.json."""

    def test_layout_and_permissions(self, tmp_path):
        store = SessionStore(SessionDirectory(tmp_path / "data")).scoped("linkedin")

        store.save("a1", make_session())

        path = tmp_path / "data" / "linkedin" / "a1.json"
        assert json.loads(path.read_text())["userUrn"] == "urn:li:person:999"
        assert store.get("a1").name == "Manual Bypass User"
        if platform.system() != "Windows":
            assert os.stat(path).st_mode & 0o777 == 0o600
            assert os.stat(tmp_path / "data").st_mode & 0o777 == 0o700

    def test_unsafe_keys_rejected(self, tmp_path):
        store = SessionStore(SessionDirectory(tmp_path / "data"))

        with pytest.raises(ValueError):
            store.save("../escape", make_session())

    def test_keys_lists_saved_sessions(self, tmp_path):
        backend = SessionDirectory(tmp_path / "data")
        store = SessionStore(backend)
        store.scoped("linkedin").save("a1", make_session())
        store.scoped("linkedin").save("b2", make_session(account_id="b2"))

        assert backend.keys() == ["linkedin/a1", "linkedin/b2"]
        assert store.scoped("linkedin").account_ids() == ["a1", "b2"]
        assert store.scoped("linkedin").has_session("a1")
        assert not store.scoped("other").has_session("a1")


class RecordingSessions(InMemorySessions):
    """Backend whose writes are slow and track how many overlap per key"""

    def __init__(self, delay=0.01):
        super().__init__()
        self.delay = delay
        self.guard = threading.Lock()
        self.active = {}
        self.max_active = {}

    def write(self, key, data):
        with self.guard:
            self.active[key] = self.active.get(key, 0) + 1
            self.max_active[key] = max(self.max_active.get(key, 0), self.active[key])
        try:
            time.sleep(self.delay)
            super().write(key, data)
        finally:
            with self.guard:
                self.active[key] -= 1


class TestConcurrentSaves:
    """Saves are serialized per account and independent across accounts."""

    def test_same_account_saves_never_overlap(self):
        backend = RecordingSessions()
        store = SessionStore(backend).scoped("linkedin")
        barrier = threading.Barrier(8)

        def save(i):
            barrier.wait()
            store.save("a1", make_session(token=f"at-{i}"))

        threads = [threading.Thread(target=save, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert backend.max_active["linkedin/a1"] == 1
        assert store.get("a1").access_token in {f"at-{i}" for i in range(8)}

    def test_other_accounts_are_not_blocked(self):
        b2_written = threading.Event()

        class HoldingSessions(InMemorySessions):
            """Holds the a1 write open until b2 has been written"""

            def write(self, key, data):
                if key.endswith("/a1"):
                    self.waited = b2_written.wait(timeout=5)
                super().write(key, data)
                if key.endswith("/b2"):
                    b2_written.set()

        backend = HoldingSessions()
        store = SessionStore(backend).scoped("linkedin")

        slow = threading.Thread(target=store.save, args=("a1", make_session()))
        slow.start()
        time.sleep(0.05)
        store.save("b2", make_session(account_id="b2"))
        slow.join()

        assert backend.waited is True
        assert sorted(store.account_ids()) == ["a1", "b2"]
