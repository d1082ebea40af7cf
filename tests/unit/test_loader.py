"""Tests for PluginLoader."""
from __future__ import annotations

from pathlib import Path

import pytest

from bunnylol.plugins.loader import PluginLoadError, PluginLoader, is_plugin_script
from bunnylol.plugins.paths import PathResolver
from bunnylol.plugins.sandbox import ExecutionSandbox


@pytest.fixture()
def loader(sandbox: ExecutionSandbox, resolver: PathResolver) -> PluginLoader:
    return PluginLoader(sandbox, resolver)


def _describe_returning(value: str) -> str:
    return (
        f"def describe():\n    return {value}\n\n\n"
        "def process(full_args):\n    return 'https://example.com'\n"
    )


# ---------------------------------------------------------------------------
# Successful loads
# ---------------------------------------------------------------------------


class TestLoad:
    def test_load_valid_plugin(self, loader: PluginLoader, write_plugin) -> None:
        path = write_plugin("github.py", ["gh", "github"], example="gh facebook/react")
        descriptor = loader.load(path)
        assert descriptor.bindings == ("gh", "github")
        assert descriptor.primary == "gh"
        assert descriptor.example == "gh facebook/react"
        assert descriptor.path == path
        assert "def process" in descriptor.source_text

    def test_user_origin(self, loader: PluginLoader, write_plugin) -> None:
        descriptor = loader.load(write_plugin("a.py", ["a"]))
        assert descriptor.origin == "user"

    def test_vendor_origin_is_parent_name(
        self, loader: PluginLoader, write_plugin, vendor_dir: Path
    ) -> None:
        path = write_plugin("b.py", ["b"], directory=vendor_dir / "acme")
        assert loader.load(path).origin == "acme"

    def test_load_is_idempotent(self, loader: PluginLoader, write_plugin) -> None:
        path = write_plugin("ig.py", ["ig", "instagram"])
        assert loader.load(path).info() == loader.load(path).info()

    def test_tuple_bindings_accepted(self, loader: PluginLoader, write_plugin) -> None:
        source = _describe_returning('{"bindings": ("t",), "description": "", "example": ""}')
        assert loader.load(write_plugin("t.py", source=source)).bindings == ("t",)


# ---------------------------------------------------------------------------
# Load failures
# ---------------------------------------------------------------------------


class TestLoadErrors:
    def test_missing_process_rejected(self, loader: PluginLoader, write_plugin) -> None:
        source = 'def describe():\n    return {"bindings": ["x"], "description": "", "example": ""}\n'
        with pytest.raises(PluginLoadError, match="process"):
            loader.load(write_plugin("noproc.py", source=source))

    def test_missing_describe_rejected(self, loader: PluginLoader, write_plugin) -> None:
        source = "def process(full_args):\n    return 'https://example.com'\n"
        with pytest.raises(PluginLoadError, match="describe"):
            loader.load(write_plugin("nodesc.py", source=source))

    @pytest.mark.parametrize(
        ("value", "fragment"),
        [
            ("['not', 'a', 'dict']", "must return a dict"),
            ('{"bindings": [], "description": "", "example": ""}', "non-empty"),
            ('{"bindings": "gh", "description": "", "example": ""}', "non-empty"),
            ('{"bindings": [1], "description": "", "example": ""}', "invalid binding"),
            ('{"bindings": [""], "description": "", "example": ""}', "invalid binding"),
            ('{"bindings": ["a b"], "description": "", "example": ""}', "whitespace"),
            ('{"bindings": ["a", "a"], "description": "", "example": ""}', "duplicate"),
            ('{"bindings": ["a"], "example": ""}', "description"),
            ('{"bindings": ["a"], "description": "", "example": 3}', "example"),
        ],
    )
    def test_malformed_metadata(
        self, loader: PluginLoader, write_plugin, value: str, fragment: str
    ) -> None:
        with pytest.raises(PluginLoadError, match=fragment):
            loader.load(write_plugin("bad.py", source=_describe_returning(value)))

    def test_sandbox_violation_is_load_error(self, loader: PluginLoader, write_plugin) -> None:
        with pytest.raises(PluginLoadError, match="not allowed"):
            loader.load(write_plugin("evil.py", source="import os\n"))

    def test_timeout_is_load_error(self, resolver: PathResolver, write_plugin) -> None:
        loader = PluginLoader(ExecutionSandbox(timeout_seconds=0.2), resolver)
        source = "def describe():\n    while True:\n        pass\n\n\ndef process(a):\n    return a\n"
        with pytest.raises(PluginLoadError, match="deadline"):
            loader.load(write_plugin("slow.py", source=source))

    def test_wrong_extension_rejected(self, loader: PluginLoader, user_dir: Path) -> None:
        path = user_dir / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(PluginLoadError):
            loader.load(path)

    def test_unreadable_file_rejected(self, loader: PluginLoader, user_dir: Path) -> None:
        with pytest.raises(PluginLoadError, match="unreadable"):
            loader.load(user_dir / "missing.py")

    def test_load_error_is_value_error(self) -> None:
        assert issubclass(PluginLoadError, ValueError)


class TestIsPluginScript:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("gh.py", True), ("dir/gh.py", True), ("gh.lua", False), (".hidden.py", False), ("gh.pyc", False)],
    )
    def test_extension(self, name: str, expected: bool) -> None:
        assert is_plugin_script(name) is expected
