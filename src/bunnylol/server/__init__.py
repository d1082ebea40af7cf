"""HTTP redirect server for bunnylol."""
from __future__ import annotations

from bunnylol.server.server import BunnylolServer, render_landing_page, sort_commands

__all__ = ["BunnylolServer", "render_landing_page", "sort_commands"]
