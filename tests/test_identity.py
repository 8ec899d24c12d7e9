"""Tests for identity strategy selection."""

import httpx
import pytest

from accounts import Account
from errors import IdentityUnresolvable, UpstreamError
from oauth import ManualUrnStrategy, OpenIDStrategy, parse_scopes, resolve_identity

from tests.conftest import SAMPLE_ACCOUNTS


USERINFO_URL = "https://api.linkedin.com/v2/userinfo"


def strategies():
    return [
        OpenIDStrategy(USERINFO_URL, urn_template="urn:li:person:{sub}"),
        ManualUrnStrategy("w_member_social"),
    ]


@pytest.fixture
def manual_account():
    return Account.model_validate(SAMPLE_ACCOUNTS[0])


@pytest.fixture
def plain_account():
    return Account.model_validate(SAMPLE_ACCOUNTS[1])


class TestParseScopes:

    def test_space_separated(self):
        assert parse_scopes("openid profile w_member_social") == ["openid", "profile", "w_member_social"]

    def test_comma_separated(self):
        assert parse_scopes("email,openid, profile") == ["email", "openid", "profile"]

    def test_empty(self):
        assert parse_scopes(None) == []
        assert parse_scopes("") == []

    def test_no_substring_matches(self):
        assert "openid" not in parse_scopes("openid_connect_legacy")


class TestResolveIdentity:
    """The first applicable strategy is the only one attempted."""

    @pytest.mark.asyncio
    async def test_openid_wins_over_manual_bypass(self, remote_api, manual_account):
        grant = {"access_token": "at-1", "scope": "openid profile w_member_social"}

        async with httpx.AsyncClient(transport=remote_api.transport) as client:
            identity = await resolve_identity(strategies(), client, manual_account, grant)

        assert identity.strategy == "openid"
        assert identity.user_urn == "urn:li:person:abc123"
        assert identity.name == "Ada Lovelace"
        assert remote_api.requests[0].headers["Authorization"] == "Bearer at-1"

    @pytest.mark.asyncio
    async def test_manual_bypass_without_openid(self, remote_api, manual_account):
        grant = {"access_token": "at-1", "scope": "w_member_social"}

        async with httpx.AsyncClient(transport=remote_api.transport) as client:
            identity = await resolve_identity(strategies(), client, manual_account, grant)

        assert identity.strategy == "manual"
        assert identity.user_urn == "urn:li:person:999"
        assert identity.name == "Manual Bypass User"
        assert remote_api.requests == []

    @pytest.mark.asyncio
    async def test_member_social_without_manual_urn_fails(self, remote_api, plain_account):
        grant = {"access_token": "at-1", "scope": "w_member_social"}

        async with httpx.AsyncClient(transport=remote_api.transport) as client:
            with pytest.raises(IdentityUnresolvable, match="Cannot identify user"):
                await resolve_identity(strategies(), client, plain_account, grant)

    @pytest.mark.asyncio
    async def test_no_useful_scope_fails(self, remote_api, manual_account):
        grant = {"access_token": "at-1", "scope": "r_liteprofile"}

        async with httpx.AsyncClient(transport=remote_api.transport) as client:
            with pytest.raises(IdentityUnresolvable):
                await resolve_identity(strategies(), client, manual_account, grant)

        assert remote_api.requests == []

    @pytest.mark.asyncio
    async def test_openid_failure_does_not_fall_back(self, manual_account):
        def handler(request):
            return httpx.Response(401, json={"serviceErrorCode": 65600, "message": "Invalid access token"})

        grant = {"access_token": "at-1", "scope": "openid w_member_social"}

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(UpstreamError) as excinfo:
                await resolve_identity(strategies(), client, manual_account, grant)

        assert excinfo.value.upstream_status == 401
        assert excinfo.value.detail["message"] == "Invalid access token"

    @pytest.mark.asyncio
    async def test_name_built_from_given_and_family_name(self, remote_api, plain_account):
        remote_api.userinfo = {"sub": "xyz", "given_name": "Grace", "family_name": "Hopper"}
        grant = {"access_token": "at-1", "scope": "openid"}

        async with httpx.AsyncClient(transport=remote_api.transport) as client:
            identity = await resolve_identity(strategies(), client, plain_account, grant)

        assert identity.name == "Grace Hopper"
