"""
Social platform providers.

Each provider implements the authorize / callback / post flow for one
platform on top of the shared account and session stores. The registry
discovers them at startup and mounts each under its own path.
"""
from providers.base_provider import AuthState, BaseProvider, PostRequest
from providers.registry import BUILTIN_PROVIDERS, ENTRY_POINT_GROUP, ProviderRegistry

__all__ = [
    'AuthState',
    'BaseProvider',
    'PostRequest',
    'BUILTIN_PROVIDERS',
    'ENTRY_POINT_GROUP',
    'ProviderRegistry',
]
