"""CLI package for the social OAuth gateway

This package provides the command-line interface for running the gateway
and managing the account table.
"""

from cli.main import main

__all__ = [
    "main",
]
