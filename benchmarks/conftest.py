"""Shared bootstrap for bunnylol benchmarks."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_BENCHMARKS = _REPO_ROOT / "benchmarks"

for _path in [str(_SRC), str(_BENCHMARKS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from bunnylol.convenience import Bunnylol
from bunnylol.plugins.loader import PluginLoader
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox

__all__ = [
    "Bunnylol",
    "ExecutionSandbox",
    "PathResolver",
    "PluginLoader",
    "PluginRegistry",
]
