#!/usr/bin/env python3
"""Example: Writing a plugin — bunnylol

Writes a plugin script into a temporary user directory, shows that it is
picked up on reload, and demonstrates aliases and the fallback provider.

Usage:
    python examples/02_custom_plugin.py
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import bunnylol

_PLUGIN = '''\
def describe():
    return {
        "bindings": ["pypi", "pip"],
        "description": "Search the Python Package Index",
        "example": "pypi requests",
    }


def process(full_args):
    args = get_args(full_args, split(full_args, " ")[0])
    if args == "":
        return "https://pypi.org"
    return "https://pypi.org/search/?q=" + url_encode(args)
'''


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        user_dir = Path(tmp) / "commands"
        user_dir.mkdir()
        resolver = bunnylol.PathResolver(user_dir=user_dir, vendor_dirs=[])

        config = bunnylol.BunnylolConfig(
            aliases={"rq": "pypi requests"},
            default_search="ddg",
        )
        app = bunnylol.Bunnylol(config=config, path_resolver=resolver)
        print(f"Before: {app.resolve('pypi requests')}")

        # Step 1: Drop the plugin in and rescan
        (user_dir / "pypi.py").write_text(_PLUGIN, encoding="utf-8")
        print(f"Reloaded: {app.reload()} plugin(s)")
        print(f"After:  {app.resolve('pypi requests')}")

        # Step 2: Aliases expand the whole input before dispatch
        print(f"Alias:  {app.resolve('rq')}")

        # Step 3: Unknown commands go to the configured search engine
        print(f"Search: {app.resolve('nothing bound here')}")


if __name__ == "__main__":
    main()
