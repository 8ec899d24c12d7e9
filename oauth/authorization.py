"""OAuth authorization URL construction"""

from typing import Dict, Optional
from urllib.parse import urlencode

from accounts.models import Account


class AuthorizationURLBuilder:
    """Builds authorization-code URLs for one platform's authorize endpoint"""

    def __init__(self, authorize_endpoint: str, extra_params: Optional[Dict[str, str]] = None):
        """
        Args:
            authorize_endpoint: The platform's authorization URL
            extra_params: Platform hints appended after the standard
                parameters (e.g. {"prompt": "consent"})
        """
        self.authorize_endpoint = authorize_endpoint
        self.extra_params = extra_params or {}

    def get_authorize_url(self, account: Account, state: str) -> str:
        """Construct the authorize URL for an account

        Args:
            account: Account whose client credentials are used
            state: Opaque correlation value echoed back on the callback
                (the caller's secret token)

        Returns:
            Full authorization URL
        """
        params = {
            "response_type": "code",
            "client_id": account.client_id,
            "redirect_uri": account.redirect_uri,
            "state": state,
            "scope": " ".join(account.scopes),
        }
        params.update(self.extra_params)

        separator = "&" if "?" in self.authorize_endpoint else "?"
        return f"{self.authorize_endpoint}{separator}{urlencode(params)}"
