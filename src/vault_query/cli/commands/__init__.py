"""CLI commands for vault-query."""

from . import query

__all__ = ["query"]
