"""Tests for CommandDispatcher."""
from __future__ import annotations

import logging
import textwrap
from urllib.parse import urlsplit

import pytest

from bunnylol.dispatch.dispatcher import CommandDispatcher, leading_token
from bunnylol.dispatch.search import SearchProvider
from bunnylol.plugins.registry import PluginRegistry
from bunnylol.plugins.sandbox import ExecutionSandbox

_GITHUB = textwrap.dedent(
    """\
    def describe():
        return {
            "bindings": ["gh", "github"],
            "description": "GitHub",
            "example": "gh facebook/bunnylol",
        }


    def process(full_args):
        args = get_args(full_args, split(full_args, " ")[0])
        if args == "":
            return "https://github.com"
        return "https://github.com/" + url_encode_path(args)
    """
)


def _failing(body: str, binding: str = "bad") -> str:
    return (
        "def describe():\n"
        f"    return {{'bindings': [{binding!r}], 'description': '', 'example': ''}}\n\n\n"
        f"def process(full_args):\n    {body}\n"
    )


@pytest.fixture()
def dispatcher(
    registry: PluginRegistry, sandbox: ExecutionSandbox, write_plugin
) -> CommandDispatcher:
    write_plugin("github.py", source=_GITHUB)
    registry.rebuild()
    return CommandDispatcher(registry, sandbox)


# ---------------------------------------------------------------------------
# leading_token
# ---------------------------------------------------------------------------


class TestLeadingToken:
    @pytest.mark.parametrize(
        ("text", "token"),
        [("gh facebook/react", "gh"), ("gh", "gh"), ("  gh\tx", "gh"), ("", ""), ("   ", "")],
    )
    def test_leading_token(self, text: str, token: str) -> None:
        assert leading_token(text) == token


# ---------------------------------------------------------------------------
# Plugin dispatch
# ---------------------------------------------------------------------------


class TestPluginDispatch:
    def test_plugin_result_returned_verbatim(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("gh facebook/bunnylol") == "https://github.com/facebook/bunnylol"

    def test_secondary_binding_dispatches(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("github facebook/react") == "https://github.com/facebook/react"

    def test_binding_only(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("gh") == "https://github.com"

    def test_input_trimmed(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("  gh facebook/react  ") == "https://github.com/facebook/react"

    def test_deterministic(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("gh a/b") == dispatcher.resolve("gh a/b")

    def test_token_must_match_exactly(self, dispatcher: CommandDispatcher) -> None:
        url = dispatcher.resolve("ghx foo")
        assert url == "https://www.google.com/search?q=ghx%20foo"


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


class TestFallback:
    def test_unbound_token_searches(self, dispatcher: CommandDispatcher) -> None:
        url = dispatcher.resolve("tw")
        parts = urlsplit(url)
        assert parts.netloc == "www.google.com"
        assert "q=tw" in parts.query

    def test_full_input_encoded(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("rust async book") == (
            "https://www.google.com/search?q=rust%20async%20book"
        )

    def test_empty_input(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("   ") == "https://www.google.com/search?q="

    def test_provider_override(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("tw", search_engine="ddg") == "https://duckduckgo.com/?q=tw"

    def test_default_provider_from_constructor(
        self, registry: PluginRegistry, sandbox: ExecutionSandbox
    ) -> None:
        dispatcher = CommandDispatcher(registry, sandbox, search_engine="bing")
        assert dispatcher.search_engine is SearchProvider.BING
        assert dispatcher.resolve("tw") == "https://www.bing.com/search?q=tw"

    @pytest.mark.parametrize(
        "body",
        [
            "raise ValueError('nope')",
            "return 42",
            "return None",
            "return undefined_name",
        ],
    )
    def test_plugin_failure_falls_back(
        self,
        registry: PluginRegistry,
        sandbox: ExecutionSandbox,
        write_plugin,
        caplog: pytest.LogCaptureFixture,
        body: str,
    ) -> None:
        write_plugin("bad.py", source=_failing(body))
        registry.rebuild()
        dispatcher = CommandDispatcher(registry, sandbox)
        with caplog.at_level(logging.WARNING, logger="bunnylol.dispatch.dispatcher"):
            url = dispatcher.resolve("bad input")
        assert url == "https://www.google.com/search?q=bad%20input"
        assert "falling back" in caplog.text

    def test_empty_plugin_result_returned_verbatim(
        self, registry: PluginRegistry, sandbox: ExecutionSandbox, write_plugin
    ) -> None:
        write_plugin("blank.py", source=_failing("return ''", binding="blank"))
        registry.rebuild()
        assert CommandDispatcher(registry, sandbox).resolve("blank x") == ""

    def test_plugin_timeout_falls_back(self, registry: PluginRegistry, write_plugin) -> None:
        write_plugin("spin.py", source=_failing("while True: pass", binding="spin"))
        registry.rebuild()
        dispatcher = CommandDispatcher(registry, ExecutionSandbox(timeout_seconds=0.2))
        assert dispatcher.resolve("spin") == "https://www.google.com/search?q=spin"


# ---------------------------------------------------------------------------
# Aliases
# ---------------------------------------------------------------------------


class TestAliases:
    def test_alias_rewrites_whole_input(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("work", aliases={"work": "gh myorg"}) == "https://github.com/myorg"

    def test_alias_not_applied_to_leading_token(self, dispatcher: CommandDispatcher) -> None:
        url = dispatcher.resolve("work extra", aliases={"work": "gh myorg"})
        assert url == "https://www.google.com/search?q=work%20extra"

    def test_alias_matches_trimmed_input(self, dispatcher: CommandDispatcher) -> None:
        assert dispatcher.resolve("  work ", aliases={"work": "gh myorg"}) == "https://github.com/myorg"

    def test_alias_target_can_fall_back(self, dispatcher: CommandDispatcher) -> None:
        url = dispatcher.resolve("w", aliases={"w": "weather today"})
        assert url == "https://www.google.com/search?q=weather%20today"

    def test_constructor_aliases_used_by_default(
        self, registry: PluginRegistry, sandbox: ExecutionSandbox, write_plugin
    ) -> None:
        write_plugin("github.py", source=_GITHUB)
        registry.rebuild()
        dispatcher = CommandDispatcher(registry, sandbox, aliases={"work": "gh myorg"})
        assert dispatcher.resolve("work") == "https://github.com/myorg"
        assert dispatcher.resolve("work", aliases={}) == "https://www.google.com/search?q=work"

    def test_apply_alias_static(self) -> None:
        assert CommandDispatcher.apply_alias(" x ", {"x": " gh y "}) == "gh y"
        assert CommandDispatcher.apply_alias(" x z", {"x": "gh y"}) == "x z"


# ---------------------------------------------------------------------------
# Listing and listeners
# ---------------------------------------------------------------------------


class TestListCommands:
    def test_multi_binding_listed_once(
        self, registry: PluginRegistry, sandbox: ExecutionSandbox, write_plugin
    ) -> None:
        write_plugin("instagram.py", ["ig", "instagram"])
        registry.rebuild()
        commands = CommandDispatcher(registry, sandbox).list_commands()
        assert len(commands) == 1
        assert commands[0].bindings == ("ig", "instagram")
        assert commands[0].aliases == ("instagram",)
        assert commands[0].origin == "user"


class TestListeners:
    def test_listener_receives_raw_input_and_url(self, dispatcher: CommandDispatcher) -> None:
        calls: list[tuple[str, str]] = []
        dispatcher.add_listener(lambda raw, url: calls.append((raw, url)))
        dispatcher.resolve(" gh a/b ")
        assert calls == [(" gh a/b ", "https://github.com/a/b")]

    def test_failing_listener_does_not_change_result(
        self, dispatcher: CommandDispatcher, caplog: pytest.LogCaptureFixture
    ) -> None:
        def broken(raw: str, url: str) -> None:
            raise RuntimeError("listener down")

        dispatcher.add_listener(broken)
        with caplog.at_level(logging.ERROR, logger="bunnylol.dispatch.dispatcher"):
            assert dispatcher.resolve("gh a/b") == "https://github.com/a/b"
        assert "listener" in caplog.text

    def test_remove_listener(self, dispatcher: CommandDispatcher) -> None:
        calls: list[str] = []

        def record(raw: str, url: str) -> None:
            calls.append(raw)

        dispatcher.add_listener(record)
        dispatcher.remove_listener(record)
        dispatcher.resolve("gh")
        assert calls == []
