"""Locations scanned for plugin scripts.

The user directory follows the XDG base-directory convention and is
created on demand.  Vendor directories (Homebrew prefixes and anything
listed in configuration) are only returned when they already exist.

Example
-------
>>> resolver = PathResolver()
>>> resolver.user_dir()
PosixPath('/home/me/.local/share/bunnylol/commands')
>>> resolver.plugin_dirs()
[PosixPath('/home/me/.local/share/bunnylol/commands')]
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from bunnylol.plugins.descriptor import USER_ORIGIN

logger = logging.getLogger(__name__)

APP_PREFIX: str = "bunnylol"
PLUGIN_SUBDIR: str = "commands"

BREW_CANDIDATES: tuple[str, ...] = (
    "/opt/homebrew",
    "/usr/local",
    "/home/linuxbrew/.linuxbrew",
)

LEGACY_VENDOR_DIRS: tuple[Path, ...] = (
    Path("/opt/homebrew/etc") / APP_PREFIX / PLUGIN_SUBDIR,
    Path("/usr/local/etc") / APP_PREFIX / PLUGIN_SUBDIR,
)


def xdg_data_home(environ: Mapping[str, str] | None = None) -> Path:
    """Return ``$XDG_DATA_HOME`` or its ``~/.local/share`` default."""
    env = os.environ if environ is None else environ
    value = env.get("XDG_DATA_HOME", "").strip()
    if value and Path(value).is_absolute():
        return Path(value)
    return Path.home() / ".local" / "share"


def xdg_config_home(environ: Mapping[str, str] | None = None) -> Path:
    """Return ``$XDG_CONFIG_HOME`` or its ``~/.config`` default."""
    env = os.environ if environ is None else environ
    value = env.get("XDG_CONFIG_HOME", "").strip()
    if value and Path(value).is_absolute():
        return Path(value)
    return Path.home() / ".config"


def data_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the bunnylol data directory (history, user plugins)."""
    return xdg_data_home(environ) / APP_PREFIX


def detect_brew_prefix(candidates: Iterable[str] = BREW_CANDIDATES) -> Path | None:
    """Return the first Homebrew prefix that has a ``bin/brew`` executable."""
    for candidate in candidates:
        prefix = Path(candidate)
        if (prefix / "bin" / "brew").is_file():
            return prefix
    return None


class PathResolver:
    """Enumerates the directories to scan for plugin scripts.

    Parameters
    ----------
    user_dir:
        Override for the user plugin directory.  Defaults to
        ``$XDG_DATA_HOME/bunnylol/commands``.
    vendor_dirs:
        Override for the vendor directory candidates.  Defaults to the
        Homebrew ``share`` directory plus the legacy ``etc`` locations.
    extra_dirs:
        Additional vendor directories, scanned after the defaults.
    """

    def __init__(
        self,
        user_dir: Path | None = None,
        vendor_dirs: Iterable[Path] | None = None,
        extra_dirs: Iterable[Path] = (),
    ) -> None:
        self._user_dir = user_dir
        self._vendor_dirs = list(vendor_dirs) if vendor_dirs is not None else None
        self._extra_dirs = [Path(p).expanduser() for p in extra_dirs]

    def user_dir(self) -> Path:
        """Return the canonical user plugin directory (not created)."""
        if self._user_dir is not None:
            return self._user_dir
        return data_dir() / PLUGIN_SUBDIR

    def vendor_candidates(self) -> list[Path]:
        """Return every vendor directory candidate, existing or not."""
        if self._vendor_dirs is not None:
            candidates = list(self._vendor_dirs)
        else:
            candidates = []
            brew = detect_brew_prefix()
            if brew is not None:
                candidates.append(brew / "share" / APP_PREFIX / PLUGIN_SUBDIR)
            candidates.extend(LEGACY_VENDOR_DIRS)
        return candidates + self._extra_dirs

    def ensure_user_dir(self) -> Path | None:
        """Create the user plugin directory if needed and return it.

        Returns ``None`` when the directory cannot be created.
        """
        path = self.user_dir()
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Cannot create user plugin directory %s: %s", path, exc)
            return None
        return path

    def plugin_dirs(self) -> list[Path]:
        """Return the ordered list of existing directories to scan.

        The user directory always comes first.  Missing vendor directories
        are skipped silently and duplicates are dropped.
        """
        dirs: list[Path] = []
        seen: set[Path] = set()
        user = self.ensure_user_dir()
        for candidate in [user, *self.vendor_candidates()]:
            if candidate is None or not candidate.is_dir():
                continue
            key = candidate.resolve()
            if key in seen:
                continue
            seen.add(key)
            dirs.append(candidate)
        return dirs

    def origin_for(self, script_path: Path) -> str:
        """Return the provenance tag for a script.

        The tag is the name of the script's parent directory, or
        ``"user"`` when that directory is the user plugin root.
        """
        parent = script_path.parent
        if parent.resolve() == self.user_dir().resolve():
            return USER_ORIGIN
        return parent.name

    def __repr__(self) -> str:
        return (
            f"PathResolver(user_dir={self.user_dir()!s}, "
            f"vendor_candidates={[str(p) for p in self.vendor_candidates()]})"
        )
