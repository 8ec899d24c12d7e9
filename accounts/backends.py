"""Backing storage for the account table and sessions

Stores never touch files directly; they are handed one of these backends.
File backends are used in production, in-memory backends in tests.
"""

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from errors import ConfigUnavailable
from utils.storage import JsonFile, ensure_secure_directory
from .models import Account, parse_account_table


logger = logging.getLogger(__name__)

# Session keys end up as file names
_SAFE_KEY = re.compile(r"^[A-Za-z0-9._@-]+$")


class AccountsFile:
    """Account table stored as a JSON list (accounts.json)"""

    def __init__(self, path):
        self.file = JsonFile(path)

    @property
    def path(self) -> Path:
        return self.file.path

    def load(self) -> List[Account]:
        """Read and validate the whole table

        Raises:
            ConfigUnavailable: If the file is missing, unreadable or invalid
        """
        from config.loader import load_accounts

        return load_accounts(str(self.file.path))

    def save(self, accounts: List[Account]):
        """Replace the whole table on disk"""
        from config.loader import dump_accounts

        self.file.write(dump_accounts(accounts))
        logger.debug(f"Wrote {len(accounts)} account(s) to {self.file.path}")


class InMemoryAccounts:
    """Account table held in memory"""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records = copy.deepcopy(records) if records is not None else None

    def load(self) -> List[Account]:
        if self._records is None:
            raise ConfigUnavailable("accounts table missing")
        return parse_account_table(copy.deepcopy(self._records), source="memory")

    def save(self, accounts: List[Account]):
        from config.loader import dump_accounts

        self._records = dump_accounts(accounts)

    @property
    def records(self) -> Optional[List[Dict[str, Any]]]:
        return copy.deepcopy(self._records)


class SessionDirectory:
    """One JSON file per session key under a root directory

    Keys may contain a single '/' to place sessions in a per-provider
    subdirectory (``linkedin/a1`` -> ``<root>/linkedin/a1.json``).
    """

    def __init__(self, root):
        self.root = Path(root)
        ensure_secure_directory(self.root)

    def _file(self, key: str) -> JsonFile:
        parts = key.split("/")
        if not parts or any(not _SAFE_KEY.match(part) or part in (".", "..") for part in parts):
            raise ValueError(f"Unsafe session key: {key!r}")
        return JsonFile(self.root.joinpath(*parts[:-1], f"{parts[-1]}.json"))

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return self._file(key).read()
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse session {key}: {e}")
            raise

    def write(self, key: str, data: Dict[str, Any]):
        self._file(key).write(data)
        logger.debug(f"Saved session {key} under {self.root}")

    def keys(self) -> List[str]:
        found = []
        for path in sorted(self.root.rglob("*.json")):
            relative = path.relative_to(self.root).with_suffix("")
            found.append("/".join(relative.parts))
        return found


class InMemorySessions:
    """Session records held in memory"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def read(self, key: str) -> Optional[Dict[str, Any]]:
        data = self._data.get(key)
        return copy.deepcopy(data) if data is not None else None

    def write(self, key: str, data: Dict[str, Any]):
        self._data[key] = copy.deepcopy(data)

    def keys(self) -> List[str]:
        return sorted(self._data)
