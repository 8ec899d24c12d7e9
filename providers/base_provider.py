"""
Base provider interface for social platforms.

A provider owns one platform's OAuth authorization-code flow and its
authenticated actions. The flow itself is shared here; subclasses supply the
platform endpoints, identity strategies and publish call.

Per account, the flow moves through:

    UNAUTHENTICATED -> AUTHORIZATION_REQUESTED -> CALLBACK_PENDING -> AUTHENTICATED

with AUTH_FAILED reachable from any step. Only the AUTHENTICATED transition
persists anything.
"""
import datetime
import html
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel, ValidationError

from accounts.models import Account, Session, mask_token
from accounts.sessions import SessionStore
from accounts.store import AccountStore
from errors import AuthorizationDenied, GatewayError, UpstreamError
from oauth import (
    AuthorizationURLBuilder,
    IdentityStrategy,
    ResolvedIdentity,
    create_http_client,
    exchange_code,
    resolve_identity,
)

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Steps of the per-account authorization flow"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHORIZATION_REQUESTED = "authorization_requested"
    CALLBACK_PENDING = "callback_pending"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


class PostRequest(BaseModel):
    """Body of the publish action"""
    text: str
    url: Optional[str] = None


def parse_post_request(raw: bytes) -> PostRequest:
    """Validate a publish body

    Raises:
        GatewayError: If the body is not JSON or lacks a string ``text``
    """
    try:
        return PostRequest.model_validate_json(raw or b"{}")
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise GatewayError(f"Invalid post body: {problems}") from e


class BaseProvider(ABC):
    """Abstract base class for social platform providers"""

    # Human-readable platform name used in responses
    display_name = "Provider"
    authorize_endpoint = ""
    token_endpoint = ""
    # Extra query parameters appended to the authorize URL
    authorize_params: Dict[str, str] = {}

    def __init__(
        self,
        name: str,
        accounts: AccountStore,
        sessions: SessionStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider with its shared collaborators

        Args:
            name: Registration key; also the mount namespace
            accounts: Shared account store
            sessions: Session store (scoped to this provider by the registry)
            transport: Optional httpx transport override for remote calls
        """
        self.name = name
        self.accounts = accounts
        self.sessions = sessions
        self.transport = transport
        self.auth_builder = AuthorizationURLBuilder(self.authorize_endpoint, self.authorize_params)
        self.router = self.build_router()

    @abstractmethod
    def identity_strategies(self) -> List[IdentityStrategy]:
        """Identity strategies in priority order"""

    @abstractmethod
    def build_action_payload(self, session: Session, post: PostRequest) -> Dict[str, Any]:
        """Build the platform's publish payload

        Must be deterministic in the session's user URN and the caller's
        input, and must not perform any I/O.
        """

    @abstractmethod
    async def publish(self, client: httpx.AsyncClient, session: Session, payload: Dict[str, Any]) -> Any:
        """Send the publish call and return the remote-assigned identifier

        Raises:
            UpstreamError: If the platform rejects the call
        """

    def _transition(self, account_id: Optional[str], state: AuthState, detail: str = ""):
        suffix = f": {detail}" if detail else ""
        level = logging.WARNING if state is AuthState.AUTH_FAILED else logging.DEBUG
        logger.log(level, f"[{self.name}] account={account_id or '?'} -> {state.value}{suffix}")

    # --- Authorize ---

    def build_authorize_url(self, secret_token: Optional[str]) -> str:
        """Resolve the caller's account and build the authorize redirect

        Raises:
            GatewayError: If the account cannot be resolved
        """
        account = self.accounts.resolve(secret_token)
        url = self.auth_builder.get_authorize_url(account, state=secret_token)
        self._transition(account.id, AuthState.AUTHORIZATION_REQUESTED)
        return url

    # --- Callback ---

    def build_session(self, account: Account, identity: ResolvedIdentity, grant: Dict[str, Any]) -> Session:
        """Merge the resolved identity with the raw grant payload"""
        data = dict(grant)
        data.update({
            "accountId": account.id,
            "userUrn": identity.user_urn,
            "name": identity.name,
            "identityStrategy": identity.strategy,
            "lastUpdated": datetime.datetime.now(datetime.timezone.utc),
        })
        return Session.model_validate(data)

    async def handle_callback(self, code: Optional[str], state: Optional[str], error: Optional[str] = None) -> Session:
        """Complete the authorization and persist the session

        Args:
            code: Authorization code from the platform
            state: Echoed correlation value (the caller's secret token)
            error: Error reported by the platform instead of a code

        Returns:
            The saved session

        Raises:
            AuthorizationDenied: If the platform reported an error
            GatewayError: On any other failure; nothing is saved
        """
        if error:
            self._transition(None, AuthState.AUTH_FAILED, f"platform error '{error}'")
            raise AuthorizationDenied(error)

        account = await run_in_threadpool(self.accounts.resolve, state)
        self._transition(account.id, AuthState.CALLBACK_PENDING)

        if not code:
            raise GatewayError("Missing 'code' parameter.")

        async with create_http_client(self.transport) as client:
            grant = await exchange_code(client, self.token_endpoint, account, code)
            identity = await resolve_identity(self.identity_strategies(), client, account, grant)

        session = self.build_session(account, identity, grant)
        await run_in_threadpool(self.sessions.save, account.id, session)
        self._transition(account.id, AuthState.AUTHENTICATED, f"{identity.user_urn} via {identity.strategy}")
        return session

    # --- Authenticated action ---

    async def perform_action(self, secret_token: Optional[str], post: PostRequest, dry_run: bool = False) -> Dict[str, Any]:
        """Publish on behalf of the account, or validate only when dry_run

        Raises:
            GatewayError: If the account or session cannot be resolved
            UpstreamError: If the platform rejects the publish call
        """
        account = await run_in_threadpool(self.accounts.resolve, secret_token)
        session = await run_in_threadpool(self.sessions.get, account.id)
        payload = self.build_action_payload(session, post)

        if dry_run:
            logger.info(f"[Dry Run] Validation successful for {account.name} ({self.name})")
            logger.info(f"[Dry Run] Would have posted to URN: {session.user_urn}")
            logger.debug(f"[Dry Run] Payload: {payload}")
            return {
                "success": True,
                "mode": "dry-run",
                "message": f"Token is valid and payload is ready. No post was sent to {self.display_name}.",
                "payload": payload,
            }

        async with create_http_client(self.transport) as client:
            remote_id = await self.publish(client, session, payload)

        logger.info(f"Published to {self.display_name} for {account.name}: {remote_id}")
        return {"success": True, "id": remote_id}

    # --- HTTP surface ---

    def build_router(self) -> APIRouter:
        """Routes mounted under /<name> by the registry"""
        router = APIRouter()

        @router.get("/login")
        def login(authtoken: Optional[str] = None):
            try:
                url = self.build_authorize_url(authtoken)
            except GatewayError as e:
                logger.warning(f"[{self.name}] login refused for token {mask_token(authtoken)}: {e.message}")
                return PlainTextResponse(e.message, status_code=403)
            return RedirectResponse(url, status_code=302)

        @router.get("/callback")
        async def callback(code: Optional[str] = None, state: Optional[str] = None, error: Optional[str] = None):
            try:
                session = await self.handle_callback(code, state, error)
            except AuthorizationDenied as e:
                return PlainTextResponse(f"{self.display_name} Error: {e.error}")
            except GatewayError as e:
                logger.error(f"[{self.name}] [Auth Error] {e.message}")
                return PlainTextResponse(f"Error: {e.message}", status_code=500)
            except Exception as e:
                logger.exception(f"[{self.name}] [Auth Error] unexpected failure")
                return PlainTextResponse(f"Error: {e}", status_code=500)

            return HTMLResponse(
                "<h1>✅ Connected!</h1>"
                f"<p>Mode: {html.escape(session.name)}</p>"
                "<p>You can now use the Post endpoint.</p>"
            )

        @router.post("/post")
        async def post(request: Request, authtoken: Optional[str] = None, dryrun: Optional[str] = None):
            dry_run = (dryrun or "").lower() == "true"
            try:
                body = parse_post_request(await request.body())
                return await self.perform_action(authtoken, body, dry_run=dry_run)
            except UpstreamError as e:
                return JSONResponse(status_code=500, content={"error": e.detail})
            except GatewayError as e:
                return JSONResponse(status_code=500, content={"error": e.message})
            except Exception as e:
                logger.exception(f"[{self.name}] post failed")
                return JSONResponse(status_code=500, content={"error": str(e)})

        return router
