"""Configuration management package for the social OAuth gateway"""

from .loader import ConfigLoader, get_config_loader, load_accounts, dump_accounts

__all__ = [
    "ConfigLoader",
    "get_config_loader",
    "load_accounts",
    "dump_accounts",
]
