"""Configuration package for bunnylol.

Exports the YAML configuration loader and its Pydantic schema.
"""
from __future__ import annotations

from bunnylol.config.config_loader import (
    BunnylolConfig,
    ConfigLoader,
    HistoryConfig,
    ServerConfig,
)

__all__ = [
    "BunnylolConfig",
    "ConfigLoader",
    "HistoryConfig",
    "ServerConfig",
]
