"""Plugin subsystem for bunnylol.

Plugins are small, restricted Python scripts discovered on disk.  This
package finds them (:class:`PathResolver`), loads and validates them
(:class:`PluginLoader`), runs them in a capability-limited namespace
(:class:`ExecutionSandbox`), indexes them by binding token
(:class:`PluginRegistry`), and keeps the index fresh
(:class:`FileWatcher`).

Example
-------
A plugin script, e.g. ``~/.local/share/bunnylol/commands/github.py``:

.. code-block:: python

    def describe():
        return {
            "bindings": ["gh", "github"],
            "description": "Navigate to GitHub repositories",
            "example": "gh facebook/react",
        }

    def process(full_args):
        args = get_args(full_args, "gh")
        return "https://github.com/" + url_encode_path(args)
"""
from __future__ import annotations

from bunnylol.plugins.descriptor import CommandInfo, PluginDescriptor
from bunnylol.plugins.loader import PluginLoader, PluginLoadError
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import (
    ExecutionSandbox,
    ExecutionTimeout,
    PluginExecutionError,
    SandboxViolation,
)
from bunnylol.plugins.watcher import FileWatcher

__all__ = [
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
]
