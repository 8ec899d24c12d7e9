"""
Provider discovery and mounting.

Providers come from two places: the built-in table below and the
``social_gateway.providers`` entry point group, so third-party packages can
add platforms without touching this repository. Each provider is loaded and
instantiated independently; one that fails is logged and skipped.
"""
import importlib
import logging
import re
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Callable, Dict, Optional, Union

import httpx
from fastapi import FastAPI

from accounts.sessions import SessionStore
from accounts.store import AccountStore
from providers.base_provider import BaseProvider

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "social_gateway.providers"

# Registration name -> "module:attribute"
BUILTIN_PROVIDERS: Dict[str, str] = {
    "linkedin": "providers.linkedin_provider:LinkedInProvider",
}

_VALID_NAME = re.compile(r"^[a-z0-9][a-z0-9_-]*$")

ProviderTarget = Union[str, EntryPoint, Callable[..., Any]]


def _import_target(target: ProviderTarget) -> Callable[..., Any]:
    """Turn a "module:attribute" reference or entry point into the object it names"""
    if isinstance(target, str):
        module_name, _, attribute = target.partition(":")
        module = importlib.import_module(module_name)
        return getattr(module, attribute) if attribute else module
    if not callable(target) and hasattr(target, "load"):
        return target.load()
    return target


class ProviderRegistry:
    """Discovers, instantiates and mounts providers"""

    def __init__(
        self,
        accounts: AccountStore,
        sessions: SessionStore,
        table: Optional[Dict[str, ProviderTarget]] = None,
        use_entry_points: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            accounts: Shared account store injected into every provider
            sessions: Root session store; each provider gets a scoped view
            table: Registration table (defaults to BUILTIN_PROVIDERS)
            use_entry_points: Also discover installed entry points
            transport: Optional httpx transport passed to every provider
        """
        self.accounts = accounts
        self.sessions = sessions
        self.table = dict(BUILTIN_PROVIDERS if table is None else table)
        self.use_entry_points = use_entry_points
        self.transport = transport
        self.providers: Dict[str, BaseProvider] = {}
        self.failures: Dict[str, str] = {}

    def registrations(self) -> Dict[str, ProviderTarget]:
        """Registration table merged with installed entry points

        Explicit table entries win over entry points with the same name.
        """
        registrations: Dict[str, ProviderTarget] = dict(self.table)
        if not self.use_entry_points:
            return registrations

        try:
            discovered = entry_points(group=ENTRY_POINT_GROUP)
        except Exception as e:
            logger.error(f"Failed to read '{ENTRY_POINT_GROUP}' entry points: {e}")
            return registrations

        for ep in discovered:
            if ep.name in registrations:
                logger.debug(f"Entry point provider '{ep.name}' shadowed by registration table")
                continue
            registrations[ep.name] = ep
        return registrations

    def load(self) -> Dict[str, BaseProvider]:
        """Instantiate every registered provider

        Returns:
            Mapping of name to provider for those that loaded
        """
        for name, target in self.registrations().items():
            try:
                if not _VALID_NAME.match(name):
                    raise ValueError(f"Invalid provider name '{name}'")
                factory = _import_target(target)
                provider = factory(
                    name=name,
                    accounts=self.accounts,
                    sessions=self.sessions.scoped(name),
                    transport=self.transport,
                )
                if not isinstance(provider, BaseProvider):
                    raise TypeError(f"'{name}' did not produce a BaseProvider (got {type(provider).__name__})")
            except Exception as e:
                logger.exception(f"Failed to load provider '{name}': {e}")
                self.failures[name] = str(e)
                continue

            self.providers[name] = provider
            self.failures.pop(name, None)

        return self.providers

    def mount(self, app: FastAPI, prefix: str = ""):
        """Include every loaded provider's router under <prefix>/<name>"""
        for name, provider in self.providers.items():
            app.include_router(provider.router, prefix=f"{prefix}/{name}", tags=[name])
            logger.info(f"Platform mounted: {prefix}/{name}")
