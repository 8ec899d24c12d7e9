"""Durable storage of authenticated sessions"""

import logging
import threading
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from errors import GatewayError, NotAuthenticated
from .models import Session


logger = logging.getLogger(__name__)


class SessionStore:
    """Per-account store of the most recent session payload

    Saves for the same key are serialized by a per-key lock; saves for
    different keys proceed independently.
    """

    def __init__(self, backend, namespace: Optional[str] = None, _locks=None):
        """Initialize the store

        Args:
            backend: Object with ``read(key)``, ``write(key, data)`` and
                ``keys()`` (SessionDirectory or InMemorySessions)
            namespace: Optional prefix applied to every key
        """
        self.backend = backend
        self.namespace = namespace
        # Scoped views share the lock table of their parent
        self._locks = _locks if _locks is not None else _KeyLocks()

    def scoped(self, namespace: str) -> "SessionStore":
        """Return a view whose keys live under ``namespace``

        Providers each get their own view, so authorizing a second platform
        for an account never overwrites the first platform's session.
        """
        if self.namespace:
            namespace = f"{self.namespace}/{namespace}"
        return SessionStore(self.backend, namespace=namespace, _locks=self._locks)

    def _key(self, account_id: str) -> str:
        return f"{self.namespace}/{account_id}" if self.namespace else account_id

    def save(self, account_id: str, session_data: Union[Session, Dict[str, Any]]) -> Session:
        """Overwrite the session stored for ``account_id``

        Returns:
            The validated session that was written
        """
        session = session_data if isinstance(session_data, Session) else Session.model_validate(session_data)
        key = self._key(account_id)
        with self._locks.get(key):
            self.backend.write(key, session.to_record())
        logger.debug(f"Session saved for {key}")
        return session

    def get(self, account_id: str) -> Session:
        """Load the session stored for ``account_id``

        Raises:
            NotAuthenticated: If no session has been saved
        """
        key = self._key(account_id)
        with self._locks.get(key):
            data = self.backend.read(key)

        if data is None:
            raise NotAuthenticated()

        try:
            return Session.model_validate(data)
        except ValidationError as e:
            logger.error(f"Stored session for {key} is invalid: {e}")
            raise GatewayError(f"Stored session for account '{account_id}' is corrupt. Please login again.") from e

    def has_session(self, account_id: str) -> bool:
        return self.backend.read(self._key(account_id)) is not None

    def account_ids(self) -> List[str]:
        """Account ids that have a session in this view"""
        prefix = f"{self.namespace}/" if self.namespace else ""
        ids = []
        for key in self.backend.keys():
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if "/" not in rest:
                ids.append(rest)
        return ids


class _KeyLocks:
    """Lazily created lock per session key"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def get(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock
