"""Shared plumbing for remote calls to OAuth platforms

Every remote call is bounded by the configured timeouts and is attempted
exactly once. Failures are surfaced as UpstreamError carrying the remote's
error body.
"""

import json
import logging
from typing import Any, Optional

import httpx

from errors import UpstreamError
from settings import CONNECT_TIMEOUT, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create an AsyncClient bounded by the configured timeouts

    Args:
        transport: Optional transport override (tests pass a MockTransport)
    """
    timeout = httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
    return httpx.AsyncClient(timeout=timeout, transport=transport)


def response_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text"""
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text


async def send(client: httpx.AsyncClient, method: str, url: str, what: str, **kwargs) -> httpx.Response:
    """Perform one remote call, converting every failure into UpstreamError

    Args:
        client: HTTP client to send with
        method: HTTP method
        url: Target URL
        what: Short description used in logs and error messages
        **kwargs: Passed through to ``client.request``

    Returns:
        The successful (2xx) response

    Raises:
        UpstreamError: On timeout, transport failure or non-2xx status
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.error(f"{what} timed out: {e}")
        raise UpstreamError(f"{what} timed out") from e
    except httpx.RequestError as e:
        logger.error(f"{what} request failed: {e}")
        raise UpstreamError(f"{what} request failed: {e}") from e

    logger.debug(f"{what} response status: {response.status_code}")

    if not response.is_success:
        body = response_body(response)
        logger.error(f"{what} failed with status {response.status_code}: {response.text}")
        raise UpstreamError(
            f"{what} failed: {response.status_code} - {response.text}",
            upstream_status=response.status_code,
            body=body,
        )

    return response
