"""
Cross-provider management endpoints.
"""
import json
import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from accounts.store import AccountStore
from errors import ConfigUnavailable, GatewayError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/management", tags=["management"])

MISSING_TOKENS = "Missing 'currentToken' or 'newToken'"


def get_account_store(request: Request) -> AccountStore:
    return request.app.state.account_store


def parse_update_body(raw: bytes) -> Tuple[Optional[str], Optional[str]]:
    """Extract the two tokens from a request body

    Anything that is not a JSON object with non-empty string tokens yields
    None for the offending token.
    """
    try:
        body: Any = json.loads(raw) if raw else {}
    except ValueError:
        return None, None
    if not isinstance(body, dict):
        return None, None

    def token(key):
        value = body.get(key)
        return value if isinstance(value, str) and value else None

    return token("currentToken"), token("newToken")


@router.post("/update-token")
async def update_token(request: Request):
    """Rotate an account's secret token

    Body: { "currentToken": "sk_live_old...", "newToken": "sk_live_new..." }
    """
    current_token, new_token = parse_update_body(await request.body())

    if not current_token or not new_token:
        return JSONResponse(status_code=400, content={"error": MISSING_TOKENS})

    store = get_account_store(request)
    try:
        result = await run_in_threadpool(store.rotate_token, current_token, new_token)
    except ConfigUnavailable as e:
        logger.error(f"Token rotation failed: {e.message}")
        return JSONResponse(status_code=500, content={"error": "Update failed", "details": e.message})
    except GatewayError as e:
        # MissingCredential 400, Forbidden 403, Conflict 409
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.exception("Token rotation failed")
        return JSONResponse(status_code=500, content={"error": "Update failed", "details": str(e)})

    return {
        "success": True,
        "message": "Token updated successfully.",
        "accountId": result["accountId"],
        "accountName": result["accountName"],
    }
