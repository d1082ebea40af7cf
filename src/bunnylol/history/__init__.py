"""Command history recording for bunnylol."""
from __future__ import annotations

from bunnylol.history.logger import History, current_user

__all__ = ["History", "current_user"]
