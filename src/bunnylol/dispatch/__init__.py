"""Command dispatch for bunnylol.

Exports the dispatcher that resolves user input into URLs and the
fallback search provider helpers.
"""
from __future__ import annotations

from bunnylol.dispatch.dispatcher import CommandDispatcher, leading_token
from bunnylol.dispatch.search import SearchProvider, build_search_url

__all__ = [
    "CommandDispatcher",
    "SearchProvider",
    "build_search_url",
    "leading_token",
]
