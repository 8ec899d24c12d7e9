"""Tests for POST /management/update-token."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from accounts import AccountStore, InMemoryAccounts
from gateway.app import create_app


URL = "/api/management/update-token"


class FailingSaveAccounts(InMemoryAccounts):
    """Backend whose writes always fail"""

    def save(self, accounts):
        raise OSError("disk full")


class LoopCheckingAccounts(InMemoryAccounts):
    """Backend that records whether it was called on a running event loop"""

    def __init__(self, records):
        super().__init__(records)
        self.on_event_loop = []

    def _check(self):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.on_event_loop.append(False)
        else:
            self.on_event_loop.append(True)

    def load(self):
        self._check()
        return super().load()

    def save(self, accounts):
        self._check()
        super().save(accounts)


class TestUpdateToken:

    def test_success(self, client, account_store):
        response = client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_1_new"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Token updated successfully.",
            "accountId": "a1",
            "accountName": "Acme Marketing",
        }
        assert account_store.resolve("sk_1_new").id == "a1"

    def test_old_token_stops_working_for_providers(self, client):
        client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_1_new"})

        response = client.get("/api/linkedin/login", params={"authtoken": "sk_1"}, follow_redirects=False)

        assert response.status_code == 403

    @pytest.mark.parametrize("body", [
        {"currentToken": "sk_1"},
        {"newToken": "sk_new"},
        {"currentToken": "", "newToken": "sk_new"},
        {},
    ])
    def test_missing_tokens(self, client, body):
        response = client.post(URL, json=body)

        assert response.status_code == 400
        assert "Missing" in response.json()["error"]

    def test_no_body(self, client):
        response = client.post(URL)

        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"currentToken": 123, "newToken": "sk_new"},
        {"currentToken": "sk_1", "newToken": ["sk_new"]},
        {"currentToken": "sk_1", "newToken": None},
    ])
    def test_mistyped_tokens(self, client, account_store, body):
        response = client.post(URL, json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing 'currentToken' or 'newToken'"}
        assert account_store.resolve("sk_1").id == "a1"

    @pytest.mark.parametrize("content", [b"not json", b'["sk_1", "sk_new"]', b'"sk_1"'])
    def test_malformed_body(self, client, content):
        response = client.post(URL, content=content, headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing 'currentToken' or 'newToken'"}

    def test_unknown_current_token(self, client):
        response = client.post(URL, json={"currentToken": "sk_nope", "newToken": "sk_new"})

        assert response.status_code == 403
        assert "Current token is invalid" in response.json()["error"]

    def test_new_token_taken(self, client, account_store):
        response = client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_2"})

        assert response.status_code == 409
        assert "already in use" in response.json()["error"]
        assert account_store.resolve("sk_1").id == "a1"
        assert account_store.resolve("sk_2").id == "b2"

    def test_storage_failure(self, account_records, session_store):
        app = create_app(
            account_store=AccountStore(FailingSaveAccounts(account_records)),
            session_store=session_store,
            api_prefix="/api",
            use_entry_points=False,
        )
        client = TestClient(app)

        response = client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_1_new"})

        assert response.status_code == 500
        assert response.json() == {"error": "Update failed", "details": "disk full"}

    def test_unreadable_table(self, session_store):
        app = create_app(
            account_store=AccountStore(InMemoryAccounts(None)),
            session_store=session_store,
            api_prefix="/api",
            use_entry_points=False,
        )
        client = TestClient(app)

        response = client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_1_new"})

        assert response.status_code == 500
        assert response.json()["error"] == "Update failed"

    def test_rotation_runs_off_the_event_loop(self, account_records, session_store):
        backend = LoopCheckingAccounts(account_records)
        app = create_app(
            account_store=AccountStore(backend),
            session_store=session_store,
            api_prefix="/api",
            use_entry_points=False,
        )
        client = TestClient(app)

        response = client.post(URL, json={"currentToken": "sk_1", "newToken": "sk_1_new"})

        assert response.status_code == 200
        assert backend.on_event_loop
        assert not any(backend.on_event_loop)
