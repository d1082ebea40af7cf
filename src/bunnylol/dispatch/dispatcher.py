"""Command resolution: raw input text -> destination URL.

Resolution runs through a fixed sequence of stages:

1. **Alias** - when the whole trimmed input equals a configured alias
   key, it is replaced by the alias target.
2. **Tokenize** - the first whitespace-delimited word is the binding.
3. **Lookup** - the binding is looked up in the registry snapshot.
4. **Execute** - on a hit, the plugin's ``process()`` receives the full
   post-alias text; a string result is returned verbatim.
5. **Fallback** - on a miss, or on any plugin failure, the full
   post-alias text is sent to the configured search provider.

:meth:`CommandDispatcher.resolve` therefore always returns a URL and
never raises for anything a plugin does.

Example
-------
>>> dispatcher = CommandDispatcher(registry, ExecutionSandbox())
>>> dispatcher.resolve("gh facebook/react")
'https://github.com/facebook/react'
>>> dispatcher.resolve("unknown words")
'https://www.google.com/search?q=unknown%20words'
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from bunnylol.dispatch.search import DEFAULT_PROVIDER, SearchProvider, build_search_url
from bunnylol.plugins.descriptor import CommandInfo
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox, PluginExecutionError

logger = logging.getLogger(__name__)

ResolveListener = Callable[[str, str], None]


def leading_token(text: str) -> str:
    """Return the first whitespace-delimited word of *text* ("" if none)."""
    parts = text.split(maxsplit=1)
    return parts[0] if parts else ""


class CommandDispatcher:
    """Public entry point that turns user input into a URL.

    Parameters
    ----------
    registry:
        Registry whose current snapshot is consulted on each call.
    sandbox:
        Sandbox used to run plugin ``process()`` entry points.
    aliases:
        Default alias table used when :meth:`resolve` receives none.
    search_engine:
        Default fallback provider used when :meth:`resolve` receives none.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        sandbox: ExecutionSandbox,
        aliases: Mapping[str, str] | None = None,
        search_engine: str | SearchProvider = DEFAULT_PROVIDER,
    ) -> None:
        self._registry = registry
        self._sandbox = sandbox
        self._aliases: Mapping[str, str] = dict(aliases or {})
        self._search_engine = SearchProvider.parse(search_engine)
        self._listeners: list[ResolveListener] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        raw_input: str,
        aliases: Mapping[str, str] | None = None,
        search_engine: str | SearchProvider | None = None,
    ) -> str:
        """Resolve *raw_input* into a destination URL.

        Parameters
        ----------
        raw_input:
            Text typed by the user, e.g. ``"gh facebook/react"``.
        aliases:
            Alias table overriding the dispatcher default for this call.
        search_engine:
            Fallback provider overriding the dispatcher default.

        Returns
        -------
        str
            The destination URL.  Never raises for plugin failures.
        """
        alias_table = self._aliases if aliases is None else aliases
        provider = (
            self._search_engine
            if search_engine is None
            else SearchProvider.parse(search_engine)
        )

        text = self.apply_alias(raw_input, alias_table)
        url = self._execute(text)
        if url is None:
            url = build_search_url(text, provider)
            logger.debug("Fallback for %r -> %s", text, url)

        self._notify(raw_input, url)
        return url

    def list_commands(self) -> list[CommandInfo]:
        """Return display metadata for each loaded plugin, once each."""
        return [descriptor.info() for descriptor in self._registry.list_unique()]

    def add_listener(self, listener: ResolveListener) -> None:
        """Register a callback invoked as ``listener(raw_input, url)``.

        Listeners run after each resolution.  A listener that raises is
        logged and otherwise ignored.
        """
        self._listeners.append(listener)

    def remove_listener(self, listener: ResolveListener) -> None:
        self._listeners.remove(listener)

    @staticmethod
    def apply_alias(raw_input: str, aliases: Mapping[str, str]) -> str:
        """Return the trimmed input, substituted when it is an alias key.

        Only a whole-input match counts; a leading word that happens to be
        an alias key is left alone.
        """
        text = raw_input.strip()
        target = aliases.get(text)
        if target is not None:
            logger.debug("Alias %r -> %r", text, target)
            return target.strip()
        return text

    @property
    def registry(self) -> PluginRegistry:
        return self._registry

    @property
    def search_engine(self) -> SearchProvider:
        return self._search_engine

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute(self, text: str) -> str | None:
        """Run the plugin bound to the leading token, or return None."""
        token = leading_token(text)
        if not token:
            return None
        descriptor = self._registry.lookup(token)
        if descriptor is None:
            logger.debug("No plugin bound to %r", token)
            return None
        try:
            url = self._sandbox.process(
                descriptor.source_text, str(descriptor.path), text
            )
        except PluginExecutionError as exc:
            logger.warning(
                "Plugin %r failed, falling back to search: %s", token, exc.reason
            )
            return None
        logger.debug("Plugin %r resolved %r -> %s", token, text, url)
        return url

    def _notify(self, raw_input: str, url: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(raw_input, url)
            except Exception:
                logger.exception("Resolve listener %r failed", listener)
