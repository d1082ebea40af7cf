"""bunnylol — smart browser bookmarks with pluggable commands.

Type ``gh facebook/react`` and land on GitHub; type anything unknown and
land on a search page.  Commands are small plugin scripts discovered from
the user and vendor plugin directories and reloaded live on change.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import bunnylol
>>> bunnylol.__version__
'0.1.0'
>>> bunnylol.build_search_url("hello world")
'https://www.google.com/search?q=hello%20world'
"""
from __future__ import annotations

__version__: str = "0.1.0"

from bunnylol.convenience import Bunnylol

# ---------------------------------------------------------------------------
# Plugins
# ---------------------------------------------------------------------------
from bunnylol.plugins.descriptor import CommandInfo, PluginDescriptor
from bunnylol.plugins.loader import PluginLoadError, PluginLoader
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import (
    ExecutionSandbox,
    ExecutionTimeout,
    PluginExecutionError,
    SandboxViolation,
)
from bunnylol.plugins.watcher import FileWatcher

# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
from bunnylol.dispatch.dispatcher import CommandDispatcher
from bunnylol.dispatch.search import SearchProvider, build_search_url

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
from bunnylol.config.config_loader import (
    BunnylolConfig,
    ConfigLoader,
    HistoryConfig,
    ServerConfig,
)

# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------
from bunnylol.history.logger import History

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
from bunnylol.server.server import BunnylolServer

__all__ = [
    "__version__",
    "Bunnylol",
    # Plugins
    "CommandInfo",
    "ExecutionSandbox",
    "ExecutionTimeout",
    "FileWatcher",
    "PathResolver",
    "PluginDescriptor",
    "PluginExecutionError",
    "PluginLoadError",
    "PluginLoader",
    "PluginRegistry",
    "SandboxViolation",
    # Dispatch
    "CommandDispatcher",
    "SearchProvider",
    "build_search_url",
    # Config
    "BunnylolConfig",
    "ConfigLoader",
    "HistoryConfig",
    "ServerConfig",
    # History
    "History",
    # Server
    "BunnylolServer",
]
