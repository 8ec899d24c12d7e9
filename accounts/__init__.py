"""Tenant accounts and their authenticated sessions

Provides the two stores every provider shares: the account table (resolved
by secret token, rotated atomically) and the session store (keyed by the
account's stable id).
"""

from .models import Account, Session, mask_token, parse_account_table
from .backends import AccountsFile, InMemoryAccounts, SessionDirectory, InMemorySessions
from .store import AccountStore
from .sessions import SessionStore

__all__ = [
    "Account",
    "Session",
    "mask_token",
    "parse_account_table",
    "AccountsFile",
    "InMemoryAccounts",
    "SessionDirectory",
    "InMemorySessions",
    "AccountStore",
    "SessionStore",
]
