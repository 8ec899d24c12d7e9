"""
Shared pytest fixtures for all tests.

Provides in-memory stores, a mock LinkedIn API and a test client.
"""

import copy
from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from accounts import AccountStore, InMemoryAccounts, InMemorySessions, SessionStore
from gateway.app import create_app


SAMPLE_ACCOUNTS = [
    {
        "id": "a1",
        "name": "Acme Marketing",
        "secretToken": "sk_1",
        "clientId": "client-a1",
        "clientSecret": "secret-a1",
        "redirectUri": "https://gateway.example.com/api/linkedin/callback",
        "scopes": ["w_member_social"],
        "manualUrn": "urn:li:person:999",
    },
    {
        "id": "b2",
        "name": "Beta Labs",
        "secretToken": "sk_2",
        "clientId": "client-b2",
        "clientSecret": "secret-b2",
        "redirectUri": "https://gateway.example.com/api/linkedin/callback",
        "scopes": ["openid", "profile", "w_member_social"],
    },
]


class MockPlatform:
    """Stand-in for the LinkedIn API that records every request it receives"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.grant = {"access_token": "at-123", "expires_in": 5184000, "scope": "w_member_social"}
        self.token_status = 200
        self.userinfo = {"sub": "abc123", "name": "Ada Lovelace"}
        self.publish_status = 201
        self.publish_body = {"id": "urn:li:share:7001"}
        self.publish_headers = {}
        self.timeout_on = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if self.timeout_on and path.endswith(self.timeout_on):
            raise httpx.ReadTimeout("timed out", request=request)

        if path.endswith("/accessToken"):
            return httpx.Response(self.token_status, json=self.grant)
        if path.endswith("/userinfo"):
            return httpx.Response(200, json=self.userinfo)
        if path.endswith("/ugcPosts"):
            return httpx.Response(self.publish_status, json=self.publish_body, headers=self.publish_headers)
        return httpx.Response(404, json={"message": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def account_records():
    return copy.deepcopy(SAMPLE_ACCOUNTS)


@pytest.fixture
def account_backend(account_records):
    return InMemoryAccounts(account_records)


@pytest.fixture
def account_store(account_backend):
    return AccountStore(account_backend)


@pytest.fixture
def session_backend():
    return InMemorySessions()


@pytest.fixture
def session_store(session_backend):
    return SessionStore(session_backend)


# =============================================================================
# HTTP FIXTURES
# =============================================================================

@pytest.fixture
def remote_api():
    return MockPlatform()


@pytest.fixture
def app(account_store, session_store, remote_api):
    return create_app(
        account_store=account_store,
        session_store=session_store,
        api_prefix="/api",
        use_entry_points=False,
        transport=remote_api.transport,
    )


@pytest.fixture
def client(app):
    """Test client for the gateway."""
    return TestClient(app)
