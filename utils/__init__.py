"""Shared utilities package for the social OAuth gateway"""

from .storage import JsonFile, ensure_secure_directory

__all__ = [
    "JsonFile",
    "ensure_secure_directory",
]
