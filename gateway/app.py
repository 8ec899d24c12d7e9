"""
FastAPI application initialization and configuration.
"""
import logging
from typing import Dict, Optional

import httpx
from fastapi import FastAPI

from accounts import AccountsFile, AccountStore, SessionDirectory, SessionStore
from providers.registry import ProviderRegistry, ProviderTarget
from .middleware import log_requests_middleware
from .endpoints import health_router, management_router

logger = logging.getLogger(__name__)


def create_app(
    account_store: Optional[AccountStore] = None,
    session_store: Optional[SessionStore] = None,
    api_prefix: Optional[str] = None,
    providers: Optional[Dict[str, ProviderTarget]] = None,
    use_entry_points: bool = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the gateway application

    Args:
        account_store: Account store (defaults to settings.ACCOUNTS_FILE)
        session_store: Session store (defaults to settings.DATA_DIR)
        api_prefix: Prefix for provider and management routes
            (defaults to settings.API_PREFIX)
        providers: Provider registration table override
        use_entry_points: Discover providers from installed entry points
        transport: Optional httpx transport used for every remote call

    Returns:
        Configured FastAPI application
    """
    import settings

    if account_store is None:
        account_store = AccountStore(AccountsFile(settings.ACCOUNTS_FILE))
    if session_store is None:
        session_store = SessionStore(SessionDirectory(settings.DATA_DIR))
    if api_prefix is None:
        api_prefix = settings.API_PREFIX
    api_prefix = api_prefix.rstrip("/")

    app = FastAPI(title="Social OAuth Gateway", version="1.0.0")
    app.state.account_store = account_store
    app.state.session_store = session_store

    # Add middleware
    app.middleware("http")(log_requests_middleware)

    # Register routers
    app.include_router(health_router)
    app.include_router(management_router, prefix=api_prefix)

    # A provider that fails to load never blocks the others or management
    registry = ProviderRegistry(
        account_store,
        session_store,
        table=providers,
        use_entry_points=use_entry_points,
        transport=transport,
    )
    registry.load()
    registry.mount(app, prefix=api_prefix)
    app.state.registry = registry

    if registry.failures:
        logger.warning(f"{len(registry.failures)} provider(s) failed to load: {sorted(registry.failures)}")
    logger.debug("FastAPI application initialized with all routers and middleware")
    return app
