"""Account resolution and secret-token rotation"""

import logging
import threading
from typing import Dict, List, Optional

from errors import ConfigUnavailable, Conflict, Forbidden, InvalidToken, MissingCredential
from .models import Account, mask_token


logger = logging.getLogger(__name__)


class AccountStore:
    """Authoritative table of tenant accounts

    Every lookup reads the table from the backend, so edits made to
    accounts.json out-of-band take effect without a restart. Rotations hold
    a store-wide lock across the whole read/modify/write so two concurrent
    rotations can never lose each other's write.

    Calls block on file I/O and the lock is a thread lock, so async request
    handlers go through ``run_in_threadpool`` rather than calling in on the
    event loop.
    """

    def __init__(self, backend):
        """Initialize the store

        Args:
            backend: Object with ``load() -> List[Account]`` and
                ``save(List[Account])`` (AccountsFile or InMemoryAccounts)
        """
        self.backend = backend
        self._lock = threading.RLock()

    def _load(self) -> List[Account]:
        try:
            return self.backend.load()
        except ConfigUnavailable:
            raise
        except OSError as e:
            logger.error(f"Account table unreadable: {e}")
            raise ConfigUnavailable(f"Account table unreadable: {e}") from e

    def list_accounts(self) -> List[Account]:
        """Return every account in table order"""
        with self._lock:
            return self._load()

    def resolve(self, secret_token: Optional[str]) -> Account:
        """Map a secret token to its account

        Raises:
            MissingCredential: If no token was supplied
            ConfigUnavailable: If the account table cannot be read
            InvalidToken: If no account owns the token
        """
        if not secret_token:
            raise MissingCredential()

        # Never observe a table mid-rotation
        with self._lock:
            accounts = self._load()

        for account in accounts:
            if account.secret_token == secret_token:
                return account

        logger.debug(f"No account matches token {mask_token(secret_token)}")
        raise InvalidToken()

    def rotate_token(self, current_token: str, new_token: str) -> Dict[str, str]:
        """Replace an account's secret token

        Args:
            current_token: Token currently held by the account
            new_token: Token to replace it with

        Returns:
            Dict with ``accountId`` and ``accountName``

        Raises:
            MissingCredential: If either token is empty
            Forbidden: If no account owns ``current_token``
            Conflict: If ``new_token`` belongs to a different account
            ConfigUnavailable: If the account table cannot be read
        """
        if not current_token or not new_token:
            raise MissingCredential("Missing 'currentToken' or 'newToken'")

        with self._lock:
            accounts = self._load()

            index = next(
                (i for i, account in enumerate(accounts) if account.secret_token == current_token),
                None,
            )
            if index is None:
                raise Forbidden()

            target = accounts[index]
            holder = next((account for account in accounts if account.secret_token == new_token), None)
            if holder is not None and holder.id != target.id:
                raise Conflict()

            if holder is None:
                accounts[index] = target.with_token(new_token)
                self.backend.save(accounts)
                logger.info(f"Token rotated for account: {target.name} (ID: {target.id})")
            else:
                logger.info(f"Token for account {target.name} (ID: {target.id}) already current, nothing to rotate")

        return {"accountId": target.id, "accountName": target.name}
