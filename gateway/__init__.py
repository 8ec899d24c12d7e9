"""
Social OAuth Gateway - multi-tenant OAuth gateway server package.

Lets several accounts authorize against social platforms, keeps the
resulting sessions, and publishes on each account's behalf.
"""
from .app import create_app
from .server import GatewayServer

__version__ = "1.0.0"

__all__ = [
    'GatewayServer',
    'create_app',
]
