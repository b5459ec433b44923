"""CLI commands for permission-search."""

from . import history, search

__all__ = [
    "history",
    "search",
]
