"""Fallback search providers.

When no plugin handles a command, the full input is sent to a search
engine.  The set of providers is closed; unknown names select Google.

Example
-------
>>> build_search_url("rust tutorial", "ddg")
'https://duckduckgo.com/?q=rust%20tutorial'
"""
from __future__ import annotations

from enum import Enum

from bunnylol.plugins.helpers import url_encode


class SearchProvider(str, Enum):
    """Supported fallback search engines."""

    GOOGLE = "google"
    DUCKDUCKGO = "ddg"
    BING = "bing"

    @property
    def base_url(self) -> str:
        return _BASE_URLS[self]

    @classmethod
    def parse(cls, name: "str | SearchProvider | None") -> "SearchProvider":
        """Map a configured provider name onto a provider.

        ``duckduckgo`` is accepted as a synonym of ``ddg``.  ``None`` and
        unrecognised names select :attr:`GOOGLE`.
        """
        if isinstance(name, SearchProvider):
            return name
        key = (name or "").strip().lower()
        if key == "duckduckgo":
            return cls.DUCKDUCKGO
        try:
            return cls(key)
        except ValueError:
            return cls.GOOGLE


_BASE_URLS: dict[SearchProvider, str] = {
    SearchProvider.GOOGLE: "https://www.google.com/search?q=",
    SearchProvider.DUCKDUCKGO: "https://duckduckgo.com/?q=",
    SearchProvider.BING: "https://www.bing.com/search?q=",
}

DEFAULT_PROVIDER: SearchProvider = SearchProvider.GOOGLE


def build_search_url(query: str, provider: "str | SearchProvider | None" = None) -> str:
    """Return the search URL for *query* on *provider*."""
    return SearchProvider.parse(provider).base_url + url_encode(query)
