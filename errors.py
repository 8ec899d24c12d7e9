"""
Error taxonomy for the gateway.

Every failure the core can report is a GatewayError subclass. Handlers catch
them at the request boundary and turn them into a response. ``status_code``
is the management API status for errors a rotation can raise; provider
routes answer with the fixed status of their surface.
"""
from typing import Any, Optional


class GatewayError(Exception):
    """Base class for all gateway errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigUnavailable(GatewayError):
    """The account table could not be read or is invalid"""


class MissingCredential(GatewayError):
    """The caller supplied no secret token"""
    status_code = 400

    def __init__(self, message: str = "Missing 'authtoken' parameter."):
        super().__init__(message)


class InvalidToken(GatewayError):
    """A secret token was supplied but matches no account"""

    def __init__(self, message: str = "Invalid Auth Token. No matching account found."):
        super().__init__(message)


class Forbidden(GatewayError):
    """Token rotation was attempted with a token that owns no account"""
    status_code = 403

    def __init__(self, message: str = "Access Denied: Current token is invalid."):
        super().__init__(message)


class Conflict(GatewayError):
    """Token rotation target is already held by a different account"""
    status_code = 409

    def __init__(self, message: str = "Conflict: The 'newToken' is already in use by another account."):
        super().__init__(message)


class NotAuthenticated(GatewayError):
    """No session has been saved for the account yet"""

    def __init__(self, message: str = "Not authenticated. Please login first."):
        super().__init__(message)


class AuthorizationDenied(GatewayError):
    """The platform redirected back with an ``error`` instead of a code

    Attributes:
        error: The raw error value sent by the platform
    """

    def __init__(self, error: str):
        super().__init__(error)
        self.error = error


class IdentityUnresolvable(GatewayError):
    """Code exchange succeeded but no identity strategy applies"""


class UpstreamError(GatewayError):
    """A remote call failed, timed out, or returned an error body

    Attributes:
        upstream_status: HTTP status returned by the remote, if any
        body: Parsed JSON error body when available, raw text otherwise
    """

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body

    @property
    def detail(self) -> Any:
        """The remote's error body if there was one, else the message"""
        return self.body if self.body not in (None, "") else self.message
