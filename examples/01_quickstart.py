#!/usr/bin/env python3
"""Example: Quickstart — bunnylol

Minimal working example: load the bundled example plugins, resolve a few
commands, and fall back to search for anything unknown.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install bunnylol
"""
from __future__ import annotations

from pathlib import Path

import bunnylol

_PLUGINS = Path(__file__).parent / "plugins"


def main() -> None:
    print(f"bunnylol version: {bunnylol.__version__}")

    # Step 1: Point the resolver at the example plugin directory
    resolver = bunnylol.PathResolver(vendor_dirs=[_PLUGINS])
    app = bunnylol.Bunnylol(path_resolver=resolver)
    print(f"Loaded {len(app.list_commands())} commands")

    # Step 2: Resolve commands
    for command in ["gh facebook/react", "yt rust tutorial", "jira PROJ-123", "gh", "what is bunnylol"]:
        print(f"  {command!r:28} -> {app.resolve(command)}")

    # Step 3: List what is available
    print("\nCommands:")
    for info in app.list_commands():
        aliases = ", ".join(info.aliases) or "-"
        print(f"  {info.primary:<6} aliases={aliases:<10} {info.description}")


if __name__ == "__main__":
    main()
