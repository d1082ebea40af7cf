"""Convenience API for bunnylol — 3-line quickstart.

:class:`Bunnylol` owns the startup sequence: it builds the path resolver,
sandbox, loader, registry and dispatcher, performs the initial plugin
scan, and optionally starts live reload.  Every component is passed
explicitly; there is no module-level registry.

Example
-------
::

    from bunnylol import Bunnylol
    app = Bunnylol()
    print(app.resolve("gh facebook/react"))

"""
from __future__ import annotations

from bunnylol.config.config_loader import BunnylolConfig
from bunnylol.dispatch.dispatcher import CommandDispatcher
from bunnylol.plugins.descriptor import CommandInfo
from bunnylol.plugins.loader import PluginLoader
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox
from bunnylol.plugins.watcher import FileWatcher


class Bunnylol:
    """Zero-config command resolver for the 80% use case.

    Parameters
    ----------
    config:
        Optional pre-built configuration.  Defaults are used when omitted.
    path_resolver:
        Optional resolver override (tests point this at temp directories).
        By default one is built from ``config.plugin_dirs``.
    """

    def __init__(
        self,
        config: BunnylolConfig | None = None,
        path_resolver: PathResolver | None = None,
    ) -> None:
        self._config = config if config is not None else BunnylolConfig()
        self._path_resolver = path_resolver or PathResolver(
            extra_dirs=self._config.plugin_dirs
        )
        self._sandbox = ExecutionSandbox(
            timeout_seconds=self._config.execution_timeout_seconds
        )
        self._registry = PluginRegistry(
            self._path_resolver, PluginLoader(self._sandbox, self._path_resolver)
        )
        self._registry.rebuild()
        self._dispatcher = CommandDispatcher(
            self._registry,
            self._sandbox,
            aliases=self._config.aliases,
            search_engine=self._config.default_search,
        )
        self._watcher: FileWatcher | None = None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, raw_input: str) -> str:
        """Resolve *raw_input* into a destination URL.

        Example
        -------
        ::

            app = Bunnylol()
            app.resolve("tw")  # 'https://www.google.com/search?q=tw'
        """
        return self._dispatcher.resolve(raw_input)

    def list_commands(self) -> list[CommandInfo]:
        """Return display metadata for every loaded plugin."""
        return self._dispatcher.list_commands()

    def reload(self) -> int:
        """Rescan plugin directories now; returns the plugin count."""
        return self._registry.rebuild()

    # ------------------------------------------------------------------
    # Live reload
    # ------------------------------------------------------------------

    def start_watching(self) -> bool:
        """Start live reload; returns False when watching is unavailable."""
        if self._watcher is None:
            self._watcher = FileWatcher(self._registry)
        return self._watcher.start()

    def close(self) -> None:
        """Stop live reload, if running."""
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def __enter__(self) -> "Bunnylol":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Properties for direct subsystem access
    # ------------------------------------------------------------------

    @property
    def config(self) -> BunnylolConfig:
        return self._config

    @property
    def dispatcher(self) -> CommandDispatcher:
        """The underlying CommandDispatcher instance."""
        return self._dispatcher

    @property
    def registry(self) -> PluginRegistry:
        """The underlying PluginRegistry instance."""
        return self._registry

    @property
    def watcher(self) -> FileWatcher | None:
        return self._watcher

    def __repr__(self) -> str:
        return f"Bunnylol(plugins={len(self._registry.list_unique())})"
