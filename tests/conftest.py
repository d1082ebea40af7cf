"""Shared fixtures for the bunnylol test suite."""
from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from bunnylol.plugins.loader import PluginLoader
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox


PluginWriter = Callable[..., Path]


def plugin_source(
    bindings: list[str],
    url: str = "https://example.com/",
    description: str = "Example command",
    example: str = "",
) -> str:
    """Return a well-formed plugin that appends the encoded arguments to *url*."""
    return textwrap.dedent(
        f"""\
        def describe():
            return {{
                "bindings": {bindings!r},
                "description": {description!r},
                "example": {example or bindings[0]!r},
            }}


        def process(full_args):
            return {url!r} + url_encode(get_args(full_args, split(full_args, " ")[0]))
        """
    )


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG locations and the system config into the temp directory."""
    home = tmp_path / "home"
    monkeypatch.setenv("XDG_DATA_HOME", str(home / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / "config"))
    monkeypatch.setattr(
        "bunnylol.config.config_loader.SYSTEM_CONFIG_PATH", home / "etc" / "config.yaml"
    )
    return home


@pytest.fixture()
def user_dir(tmp_path: Path) -> Path:
    path = tmp_path / "user" / "commands"
    path.mkdir(parents=True)
    return path


@pytest.fixture()
def vendor_dir(tmp_path: Path) -> Path:
    path = tmp_path / "vendor" / "commands"
    path.mkdir(parents=True)
    return path


@pytest.fixture()
def resolver(user_dir: Path, vendor_dir: Path) -> PathResolver:
    return PathResolver(user_dir=user_dir, vendor_dirs=[vendor_dir])


@pytest.fixture()
def sandbox() -> ExecutionSandbox:
    return ExecutionSandbox(timeout_seconds=2.0)


@pytest.fixture()
def registry(resolver: PathResolver, sandbox: ExecutionSandbox) -> PluginRegistry:
    return PluginRegistry(resolver, PluginLoader(sandbox, resolver))


@pytest.fixture()
def write_plugin(user_dir: Path) -> PluginWriter:
    """Write a plugin script; defaults to the user directory."""

    def _write(
        name: str,
        bindings: list[str] | None = None,
        source: str | None = None,
        directory: Path | None = None,
        **kwargs: str,
    ) -> Path:
        target = (directory or user_dir) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if source is None:
            source = plugin_source(bindings or [Path(name).stem], **kwargs)
        target.write_text(source, encoding="utf-8")
        return target

    return _write
