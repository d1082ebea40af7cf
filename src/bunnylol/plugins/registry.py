"""Binding -> plugin registry with atomic snapshot swaps.

The registry publishes an immutable snapshot (a read-only mapping from
binding token to :class:`PluginDescriptor`).  ``rebuild()`` scans every
plugin directory into a brand new dict off to the side and then replaces
the published reference in a single assignment, so concurrent readers see
either the complete old snapshot or the complete new one and never wait
for a scan to finish.

Binding conflicts inside one scan are resolved last-write-wins in scan
order: directories in :class:`PathResolver` order, files sorted by path
within each directory.  Every overwrite is logged.

Example
-------
>>> registry = PluginRegistry(PathResolver(), PluginLoader(sandbox, resolver))
>>> registry.rebuild()
3
>>> registry.lookup("gh").description
'Navigate to GitHub repositories'
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from bunnylol.plugins.descriptor import PluginDescriptor
from bunnylol.plugins.loader import (
    SCRIPT_SUFFIX,
    PluginLoader,
    PluginLoadError,
    is_plugin_script,
)
from bunnylol.plugins.paths import PathResolver

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, PluginDescriptor] = MappingProxyType({})


class PluginRegistry:
    """Owns the published binding -> descriptor snapshot.

    Parameters
    ----------
    path_resolver:
        Supplies the directories to scan.
    loader:
        Turns individual script files into descriptors.
    """

    def __init__(self, path_resolver: PathResolver, loader: PluginLoader) -> None:
        self._path_resolver = path_resolver
        self._loader = loader
        self._snapshot: Mapping[str, PluginDescriptor] = _EMPTY
        self._generation: int = 0
        # Serialises writers only; readers never take it.
        self._rebuild_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self) -> int:
        """Rescan every plugin directory and publish a fresh snapshot.

        Files that fail to load are logged and skipped; they never abort
        the scan of their siblings.

        Returns
        -------
        int
            Number of unique plugins in the newly published snapshot.
        """
        with self._rebuild_lock:
            table: dict[str, PluginDescriptor] = {}
            skipped = 0
            for path in self._iter_scripts():
                try:
                    descriptor = self._loader.load(path)
                except PluginLoadError as exc:
                    skipped += 1
                    logger.warning("Skipping plugin %s: %s", exc.path, exc.reason)
                    continue
                except Exception:
                    skipped += 1
                    logger.exception("Skipping plugin %s: unexpected load failure", path)
                    continue
                self._insert(table, descriptor)

            self._snapshot = MappingProxyType(table)
            self._generation += 1
            count = len(self._unique(table))
            logger.info(
                "Published plugin snapshot #%d: %d plugins, %d bindings, %d skipped",
                self._generation,
                count,
                len(table),
                skipped,
            )
            return count

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def lookup(self, token: str) -> PluginDescriptor | None:
        """Return the descriptor bound to *token* in the current snapshot."""
        return self._snapshot.get(token)

    def list_unique(self) -> list[PluginDescriptor]:
        """Return each plugin once, deduplicated by primary binding."""
        return self._unique(self._snapshot)

    def snapshot(self) -> Mapping[str, PluginDescriptor]:
        """Return the currently published read-only snapshot."""
        return self._snapshot

    @property
    def generation(self) -> int:
        """Number of snapshots published so far."""
        return self._generation

    @property
    def path_resolver(self) -> PathResolver:
        return self._path_resolver

    def __contains__(self, token: object) -> bool:
        return token in self._snapshot

    def __len__(self) -> int:
        """Return the number of bindings in the current snapshot."""
        return len(self._snapshot)

    def __repr__(self) -> str:
        return (
            f"PluginRegistry(generation={self._generation}, "
            f"bindings={sorted(self._snapshot)})"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _iter_scripts(self) -> Iterator[Path]:
        for directory in self._path_resolver.plugin_dirs():
            try:
                candidates = sorted(directory.rglob(f"*{SCRIPT_SUFFIX}"))
            except OSError as exc:
                logger.warning("Cannot scan plugin directory %s: %s", directory, exc)
                continue
            for path in candidates:
                if is_plugin_script(path) and path.is_file():
                    yield path

    @staticmethod
    def _insert(table: dict[str, PluginDescriptor], descriptor: PluginDescriptor) -> None:
        for binding in descriptor.bindings:
            previous = table.get(binding)
            if previous is not None and previous.path != descriptor.path:
                logger.warning(
                    "Binding %r from %s overrides the one from %s",
                    binding,
                    descriptor.path,
                    previous.path,
                )
            table[binding] = descriptor

    @staticmethod
    def _unique(table: Mapping[str, PluginDescriptor]) -> list[PluginDescriptor]:
        seen: set[str] = set()
        unique: list[PluginDescriptor] = []
        for descriptor in table.values():
            if descriptor.primary in seen:
                continue
            seen.add(descriptor.primary)
            unique.append(descriptor)
        return unique
