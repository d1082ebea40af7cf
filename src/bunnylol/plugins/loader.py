"""Reads one plugin script and turns it into a :class:`PluginDescriptor`.

Loading runs the script's ``describe()`` entry point inside a fresh
sandbox, checks that ``process()`` is defined, and validates the shape of
the returned metadata.  Every failure is reported as a
:class:`PluginLoadError`; deciding whether to skip the file is the
caller's job.

Example
-------
>>> loader = PluginLoader(ExecutionSandbox(), PathResolver())
>>> descriptor = loader.load(Path("~/.local/share/bunnylol/commands/github.py").expanduser())
>>> descriptor.bindings
('gh', 'github')
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from bunnylol.plugins.descriptor import PluginDescriptor
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.sandbox import ExecutionSandbox, PluginExecutionError

logger = logging.getLogger(__name__)

SCRIPT_SUFFIX: str = ".py"


class PluginLoadError(ValueError):
    """Raised when a script cannot be turned into a plugin descriptor.

    Attributes
    ----------
    path:
        The offending script.
    reason:
        Human-readable description of what was wrong.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load plugin {path}: {reason}")


def is_plugin_script(path: str | Path) -> bool:
    """Return True when *path* has the recognised script extension."""
    name = Path(path).name
    return name.endswith(SCRIPT_SUFFIX) and not name.startswith(".")


class PluginLoader:
    """Loads and validates single plugin script files.

    Parameters
    ----------
    sandbox:
        Sandbox used to run ``describe()``.
    path_resolver:
        Used to derive the origin tag of each script.
    """

    def __init__(self, sandbox: ExecutionSandbox, path_resolver: PathResolver) -> None:
        self._sandbox = sandbox
        self._path_resolver = path_resolver

    def load(self, path: Path) -> PluginDescriptor:
        """Load the script at *path*.

        Parameters
        ----------
        path:
            A file with the ``.py`` extension.

        Returns
        -------
        PluginDescriptor
            The validated descriptor.

        Raises
        ------
        PluginLoadError
            On unreadable files, sandbox failures, a missing ``process()``
            entry point, or malformed ``describe()`` output.
        """
        if not is_plugin_script(path):
            raise PluginLoadError(path, f"not a {SCRIPT_SUFFIX} script")
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PluginLoadError(path, f"unreadable: {exc}") from exc

        try:
            metadata = self._sandbox.run(
                source, str(path), "describe", require=("process",)
            )
        except PluginExecutionError as exc:
            raise PluginLoadError(path, exc.reason) from exc

        bindings, description, example = self._validate(path, metadata)
        descriptor = PluginDescriptor(
            bindings=bindings,
            description=description,
            example=example,
            origin=self._path_resolver.origin_for(path),
            source_text=source,
            path=path,
        )
        logger.debug(
            "Loaded plugin %s with bindings %s (origin=%s)",
            path,
            ", ".join(bindings),
            descriptor.origin,
        )
        return descriptor

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(path: Path, metadata: object) -> tuple[tuple[str, ...], str, str]:
        """Check the ``describe()`` result and return its normalised fields."""
        if not isinstance(metadata, Mapping):
            raise PluginLoadError(
                path, f"describe() must return a dict, got {type(metadata).__name__}"
            )

        raw_bindings = metadata.get("bindings")
        if not isinstance(raw_bindings, (list, tuple)) or not raw_bindings:
            raise PluginLoadError(path, "'bindings' must be a non-empty list of strings")

        bindings: list[str] = []
        for binding in raw_bindings:
            if not isinstance(binding, str) or not binding:
                raise PluginLoadError(path, f"invalid binding {binding!r}")
            if binding.split() != [binding]:
                raise PluginLoadError(path, f"binding {binding!r} contains whitespace")
            if binding in bindings:
                raise PluginLoadError(path, f"duplicate binding {binding!r}")
            bindings.append(binding)

        description = metadata.get("description")
        if not isinstance(description, str):
            raise PluginLoadError(path, "'description' must be a string")
        example = metadata.get("example")
        if not isinstance(example, str):
            raise PluginLoadError(path, "'example' must be a string")

        return tuple(bindings), description, example
