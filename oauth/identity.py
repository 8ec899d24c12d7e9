"""Identity resolution strategies

After a successful code exchange the granted scopes decide how the
authenticated user is identified. Strategies are tried in priority order and
the first one whose requirements are met is the only one attempted; if it
fails, the callback fails. No strategy applying means the user cannot be
identified and nothing is persisted.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Union

import httpx

from accounts.models import Account
from errors import IdentityUnresolvable
from .token_exchange import fetch_userinfo

logger = logging.getLogger(__name__)


def parse_scopes(granted: Union[str, Iterable[str], None]) -> List[str]:
    """Split a granted-scopes value into individual scopes

    Platforms disagree on the separator (RFC 6749 says space, LinkedIn
    sometimes answers with commas), so both are accepted.
    """
    if not granted:
        return []
    if isinstance(granted, str):
        return [scope for scope in re.split(r"[\s,]+", granted) if scope]
    return [str(scope) for scope in granted if scope]


@dataclass
class ResolvedIdentity:
    """Who the user is on the platform

    Attributes:
        user_urn: Platform-native user identifier
        name: Display name
        strategy: Name of the strategy that produced this identity
    """
    user_urn: str
    name: str
    strategy: str


class IdentityStrategy(ABC):
    """A way of identifying the user from a fresh grant"""

    name = "strategy"

    @abstractmethod
    def applies(self, granted_scopes: Sequence[str], account: Account) -> bool:
        """Whether this strategy's requirements are met"""

    @abstractmethod
    async def resolve(
        self,
        client: httpx.AsyncClient,
        account: Account,
        grant: Dict[str, Any],
    ) -> ResolvedIdentity:
        """Produce the identity; may perform remote calls"""


class OpenIDStrategy(IdentityStrategy):
    """Identify the user from the OpenID userinfo endpoint"""

    name = "openid"

    def __init__(self, userinfo_endpoint: str, urn_template: str = "{sub}", scope: str = "openid"):
        self.userinfo_endpoint = userinfo_endpoint
        self.urn_template = urn_template
        self.scope = scope

    def applies(self, granted_scopes, account):
        return self.scope in granted_scopes

    async def resolve(self, client, account, grant):
        claims = await fetch_userinfo(client, self.userinfo_endpoint, grant["access_token"])
        name = claims.get("name") or " ".join(
            part for part in (claims.get("given_name"), claims.get("family_name")) if part
        )
        return ResolvedIdentity(
            user_urn=self.urn_template.format(sub=claims["sub"]),
            name=name or claims["sub"],
            strategy=self.name,
        )


class ManualUrnStrategy(IdentityStrategy):
    """Use the identity configured on the account

    Applies when the platform granted the posting scope but no identity
    claim, and the operator has put the user's URN in accounts.json.
    """

    name = "manual"

    def __init__(self, required_scope: str, display_name: str = "Manual Bypass User"):
        self.required_scope = required_scope
        self.display_name = display_name

    def applies(self, granted_scopes, account):
        return self.required_scope in granted_scopes and bool(account.manual_urn)

    async def resolve(self, client, account, grant):
        return ResolvedIdentity(
            user_urn=account.manual_urn,
            name=self.display_name,
            strategy=self.name,
        )


async def resolve_identity(
    strategies: Sequence[IdentityStrategy],
    client: httpx.AsyncClient,
    account: Account,
    grant: Dict[str, Any],
) -> ResolvedIdentity:
    """Pick the first applicable strategy and resolve the identity with it

    Raises:
        IdentityUnresolvable: If no strategy applies to the granted scopes
        UpstreamError: If the chosen strategy's remote call fails
    """
    granted = parse_scopes(grant.get("scope"))
    logger.info(f"Scopes granted for account {account.id}: [{' '.join(granted)}]")

    for strategy in strategies:
        if strategy.applies(granted, account):
            if strategy is not strategies[0]:
                logger.warning(
                    f"Preferred identity strategy unavailable for account {account.id}, using '{strategy.name}'"
                )
            else:
                logger.info(f"Resolving identity for account {account.id} via '{strategy.name}'")
            return await strategy.resolve(client, account, grant)

    names = ", ".join(strategy.name for strategy in strategies)
    raise IdentityUnresolvable(
        f"CRITICAL: Granted scopes [{' '.join(granted)}] satisfy no identity strategy ({names}). "
        f"Grant 'openid' or configure 'manualUrn'. Cannot identify user."
    )
