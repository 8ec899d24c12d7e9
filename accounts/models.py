"""Data models for tenant accounts and authenticated sessions"""

import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import ConfigUnavailable


class Account(BaseModel):
    """A tenant's OAuth client configuration

    Records are stored with camelCase keys in accounts.json. Fields the
    gateway does not know about are kept so that rewriting the table after a
    token rotation never loses operator data.

    Attributes:
        id: Stable identifier, keys session storage
        name: Display name used in logs and responses
        secret_token: Bearer token callers present as ``authtoken``
        client_id: OAuth client id registered with the platform
        client_secret: OAuth client secret
        redirect_uri: Callback URL registered with the platform
        scopes: Requested scopes, in order
        manual_urn: Identity override used when OpenID is not granted
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    secret_token: str = Field(alias="secretToken", min_length=1)
    client_id: str = Field(alias="clientId")
    client_secret: str = Field(alias="clientSecret")
    redirect_uri: str = Field(alias="redirectUri")
    scopes: List[str] = Field(default_factory=list)
    manual_urn: Optional[str] = Field(default=None, alias="manualUrn")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Hand-edited tables sometimes use numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("scopes")
    @classmethod
    def _dedupe_scopes(cls, value: List[str]) -> List[str]:
        seen = []
        for scope in value:
            if scope and scope not in seen:
                seen.append(scope)
        return seen

    def with_token(self, secret_token: str) -> "Account":
        """Return a copy of this account holding a different secret token"""
        return self.model_copy(update={"secret_token": secret_token})

    def to_record(self) -> Dict[str, Any]:
        """Serialize back to the camelCase shape used in accounts.json"""
        return self.model_dump(by_alias=True, exclude_none=True)


class Session(BaseModel):
    """The most recent successful authorization for one account

    The raw grant payload returned by the token endpoint (access_token,
    expires_in, scope, ...) is merged in as extra fields.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    account_id: str = Field(alias="accountId")
    user_urn: str = Field(alias="userUrn")
    name: str
    access_token: str
    refresh_token: Optional[str] = None
    last_updated: datetime.datetime = Field(alias="lastUpdated")

    def to_record(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict with camelCase identity keys"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_account_table(records: Any, source: str = "accounts") -> List[Account]:
    """Validate raw account records into Account models

    Args:
        records: Decoded JSON content of the account table
        source: Name used in error messages

    Returns:
        List of validated accounts, in table order

    Raises:
        ConfigUnavailable: If the table is not a list, a record is invalid,
            or an id / secretToken appears twice
    """
    if not isinstance(records, list):
        raise ConfigUnavailable(
            f"Invalid account table in {source}: expected list, got {type(records).__name__}"
        )

    accounts: List[Account] = []
    seen_ids = set()
    seen_tokens = set()
    for idx, record in enumerate(records):
        try:
            account = Account.model_validate(record)
        except ValidationError as e:
            raise ConfigUnavailable(
                f"Invalid account at index {idx} in {source}: {e.error_count()} validation error(s)"
            ) from e

        if account.id in seen_ids:
            raise ConfigUnavailable(f"Duplicate account id '{account.id}' in {source}")
        if account.secret_token in seen_tokens:
            raise ConfigUnavailable(f"Duplicate secretToken in {source} (account '{account.id}')")

        seen_ids.add(account.id)
        seen_tokens.add(account.secret_token)
        accounts.append(account)

    return accounts


def mask_token(token: Optional[str]) -> str:
    """Mask a secret token for logs and console output"""
    if not token:
        return "<none>"
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}…{token[-4:]}"
