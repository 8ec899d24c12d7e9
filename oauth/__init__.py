"""OAuth authorization-code flow building blocks shared by all providers"""

from .authorization import AuthorizationURLBuilder
from .token_exchange import exchange_code, fetch_userinfo
from .identity import (
    IdentityStrategy,
    OpenIDStrategy,
    ManualUrnStrategy,
    ResolvedIdentity,
    parse_scopes,
    resolve_identity,
)
from .remote import create_http_client, response_body, send

__all__ = [
    "AuthorizationURLBuilder",
    "exchange_code",
    "fetch_userinfo",
    "IdentityStrategy",
    "OpenIDStrategy",
    "ManualUrnStrategy",
    "ResolvedIdentity",
    "parse_scopes",
    "resolve_identity",
    "create_http_client",
    "response_body",
    "send",
]
