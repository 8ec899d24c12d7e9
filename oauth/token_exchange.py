"""OAuth authorization-code exchange and identity lookup"""

import logging
from typing import Any, Dict

import httpx

from accounts.models import Account
from errors import UpstreamError
from .remote import send

logger = logging.getLogger(__name__)


async def exchange_code(
    client: httpx.AsyncClient,
    token_endpoint: str,
    account: Account,
    code: str,
) -> Dict[str, Any]:
    """Exchange an authorization code for a token set

    Args:
        client: HTTP client to send with
        token_endpoint: The platform's token URL
        account: Account whose confidential client credentials are used
        code: Authorization code from the callback

    Returns:
        The raw grant payload (access_token, expires_in, scope, ...)

    Raises:
        UpstreamError: If the exchange fails or returns no access token
    """
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": account.redirect_uri,
        "client_id": account.client_id,
        "client_secret": account.client_secret,
    }

    logger.info(f"Exchanging authorization code for account {account.id} at {token_endpoint}")
    response = await send(
        client,
        "POST",
        token_endpoint,
        "Token exchange",
        data=data,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    try:
        payload = response.json()
    except ValueError as e:
        raise UpstreamError("Token exchange returned a non-JSON body", response.status_code, response.text) from e

    if not isinstance(payload, dict) or not payload.get("access_token"):
        logger.error("Token exchange response missing access_token")
        raise UpstreamError("Token exchange response missing access_token", response.status_code, payload)

    return payload


async def fetch_userinfo(
    client: httpx.AsyncClient,
    userinfo_endpoint: str,
    access_token: str,
) -> Dict[str, Any]:
    """Fetch the OpenID userinfo claim set for an access token

    Raises:
        UpstreamError: If the call fails or the body has no ``sub`` claim
    """
    response = await send(
        client,
        "GET",
        userinfo_endpoint,
        "Userinfo fetch",
        headers={"Authorization": f"Bearer {access_token}"},
    )

    try:
        claims = response.json()
    except ValueError as e:
        raise UpstreamError("Userinfo returned a non-JSON body", response.status_code, response.text) from e

    if not isinstance(claims, dict) or not claims.get("sub"):
        raise UpstreamError("Userinfo response missing 'sub' claim", response.status_code, claims)

    return claims
