"""Configuration loader for the social OAuth gateway

Loads configuration from multiple sources with the following priority:
1. Environment variables (highest priority)
2. .env file
3. Hardcoded defaults (lowest priority)

Also loads the account table (accounts.json), validating every record at
the boundary so the rest of the gateway only ever sees well-formed accounts.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, List
from dotenv import load_dotenv
from accounts.models import Account, parse_account_table
from errors import ConfigUnavailable

# Set up logger for config loader
logger = logging.getLogger(__name__)


class ConfigLoader:
    """Handles loading configuration from various sources"""

    def __init__(self, env_path: Optional[str] = None):
        """Initialize the config loader

        Args:
            env_path: Optional path to .env file.
                     Defaults to '.env' in the current directory.
        """
        self.env_path = Path(env_path) if env_path else Path(".env")
        self._load_env_file()

    def _load_env_file(self):
        """Load environment variables from .env file if it exists"""
        if self.env_path.exists():
            load_dotenv(dotenv_path=self.env_path)
            logger.debug(f"Loaded environment variables from {self.env_path}")
        else:
            logger.debug(f".env file not found at {self.env_path}, using environment variables and defaults only")

    def get(self, env_var: str, default: Any) -> Any:
        """Get a configuration value with priority: env > default

        Args:
            env_var: Environment variable name to check
            default: Default value if not found in environment

        Returns:
            The configuration value from environment or default
        """
        env_value = os.getenv(env_var)
        if env_value is not None:
            # bool must be checked before int (bool is a subclass of int)
            if isinstance(default, bool):
                return env_value.lower() in ('true', '1', 'yes')
            elif isinstance(default, int):
                try:
                    return int(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var}={env_value} as int, using default: {default}")
                    return default
            elif isinstance(default, float):
                try:
                    return float(env_value)
                except ValueError:
                    logger.warning(f"Failed to parse {env_var}={env_value} as float, using default: {default}")
                    return default
            return env_value

        if isinstance(default, str) and default.startswith("~/"):
            return str(Path(default).expanduser())
        return default


# Create a global instance
_config_loader = None

def get_config_loader() -> ConfigLoader:
    """Get or create the global ConfigLoader instance"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_accounts(accounts_path: Optional[str] = None) -> List[Account]:
    """Load and validate the account table from accounts.json

    Args:
        accounts_path: Optional path to the accounts file.
                      Defaults to settings.ACCOUNTS_FILE.

    Returns:
        List of validated accounts

    Raises:
        ConfigUnavailable: If the file is missing, unreadable or invalid
    """
    if accounts_path:
        path = Path(accounts_path)
    else:
        from settings import ACCOUNTS_FILE
        path = Path(ACCOUNTS_FILE)

    if not path.exists():
        raise ConfigUnavailable(f"{path.name} missing")

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {path}: {e}")
        raise ConfigUnavailable(f"Failed to parse {path.name}") from e
    except OSError as e:
        logger.error(f"Failed to read {path}: {e}")
        raise ConfigUnavailable(f"Failed to read {path.name}") from e

    accounts = parse_account_table(data, source=path.name)
    logger.debug(f"Loaded {len(accounts)} account(s) from {path}")
    return accounts


def dump_accounts(accounts: List[Account]) -> List[Dict[str, Any]]:
    """Serialize accounts back to their on-disk JSON shape"""
    return [account.to_record() for account in accounts]
