"""Capability-limited execution of plugin scripts.

A plugin script is a small Python module restricted to a safe subset of
the language.  It never gets imported: its source is validated with an
AST walk, compiled, and executed inside a brand new namespace on every
invocation.  The namespace exposes a curated set of builtins plus the
string helpers from :mod:`bunnylol.plugins.helpers` and nothing else, so
a script has no filesystem, network, process or environment access.

Key classes
-----------
ExecutionSandbox     : Runs one entry point of one script per call.
PluginExecutionError : Any failure while running plugin code.
SandboxViolation     : The script uses a construct the sandbox forbids.
ExecutionTimeout     : The script exceeded its wall-clock deadline.

Example
-------
>>> sandbox = ExecutionSandbox(timeout_seconds=1.0)
>>> source = "def process(args):\\n    return 'https://example.com/' + url_encode(args)\\n"
>>> sandbox.run(source, "<example>", "process", "a b")
'https://example.com/a%20b'
"""
from __future__ import annotations

import ast
import builtins
import contextlib
import functools
import sys
import time
from collections.abc import Iterator
from types import CodeType, FrameType
from typing import Any

from bunnylol.plugins.helpers import HELPERS

DEFAULT_TIMEOUT_SECONDS: float = 2.0


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PluginExecutionError(RuntimeError):
    """Raised when plugin code cannot be run to a valid result.

    Attributes
    ----------
    filename:
        The script the failure came from.
    reason:
        Human-readable description of the failure.
    """

    def __init__(self, filename: str, reason: str) -> None:
        self.filename = filename
        self.reason = reason
        super().__init__(f"{filename}: {reason}")


class SandboxViolation(PluginExecutionError):
    """Raised when a script uses a construct outside the allowed subset."""


class ExecutionTimeout(PluginExecutionError):
    """Raised when a script runs past its deadline."""


class _DeadlineExceeded(BaseException):
    # BaseException so ``except Exception`` inside a script cannot swallow it.
    pass


# ---------------------------------------------------------------------------
# Static validation
# ---------------------------------------------------------------------------

_SAFE_BUILTINS: dict[str, object] = {
    name: getattr(builtins, name)
    for name in (
        "abs", "all", "any", "bool", "chr", "dict", "enumerate", "filter",
        "float", "int", "isinstance", "len", "list", "map", "max", "min",
        "ord", "range", "repr", "reversed", "round", "set", "sorted", "str",
        "sum", "tuple", "zip",
        "Exception", "IndexError", "KeyError", "LookupError", "TypeError",
        "ValueError",
    )
}

_FORBIDDEN_NODES: tuple[type[ast.AST], ...] = (
    ast.Import,
    ast.ImportFrom,
    ast.Global,
    ast.Nonlocal,
    ast.ClassDef,
    ast.AsyncFunctionDef,
    ast.AsyncFor,
    ast.AsyncWith,
    ast.Await,
)

# Introspection handles that lead from a value back to frames or globals.
_FORBIDDEN_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "ag_code", "ag_frame",
        "cr_await", "cr_code", "cr_frame",
        "f_back", "f_builtins", "f_code", "f_globals", "f_locals",
        "gi_code", "gi_frame", "gi_yieldfrom",
        "tb_frame", "tb_next",
        "format", "format_map", "mro",
    }
)


def _is_forbidden_attribute(name: str) -> bool:
    return name.startswith("_") or name in _FORBIDDEN_ATTRIBUTES


def _check_tree(tree: ast.AST, filename: str) -> None:
    for node in ast.walk(tree):
        if isinstance(node, _FORBIDDEN_NODES):
            raise SandboxViolation(
                filename,
                f"line {getattr(node, 'lineno', '?')}: "
                f"'{type(node).__name__}' is not allowed in plugin scripts",
            )
        if isinstance(node, ast.ExceptHandler) and node.type is None:
            raise SandboxViolation(
                filename, f"line {node.lineno}: bare 'except:' is not allowed"
            )
        if isinstance(node, ast.Name) and node.id.startswith("__"):
            raise SandboxViolation(
                filename, f"line {node.lineno}: name {node.id!r} is not allowed"
            )
        if isinstance(node, ast.Attribute) and _is_forbidden_attribute(node.attr):
            raise SandboxViolation(
                filename,
                f"line {node.lineno}: attribute {node.attr!r} is not allowed",
            )
        # Class patterns read attributes by name without an Attribute node.
        if isinstance(node, ast.MatchClass):
            for attr in node.kwd_attrs:
                if _is_forbidden_attribute(attr):
                    raise SandboxViolation(
                        filename,
                        f"line {node.lineno}: pattern attribute {attr!r} is not allowed",
                    )


@functools.lru_cache(maxsize=256)
def compile_script(source: str, filename: str) -> CodeType:
    """Validate and compile *source*.

    Code objects are immutable, so compiled scripts are cached; the
    namespaces they run in never are.

    Raises
    ------
    PluginExecutionError
        When the source does not parse or is too deeply nested to compile.
    SandboxViolation
        When the source uses a forbidden construct.
    """
    try:
        tree = ast.parse(source, filename=filename, mode="exec")
    except SyntaxError as exc:
        raise PluginExecutionError(
            filename, f"syntax error on line {exc.lineno}: {exc.msg}"
        ) from None
    except (ValueError, RecursionError, MemoryError) as exc:
        raise PluginExecutionError(
            filename, f"cannot parse script: {type(exc).__name__}: {exc}"
        ) from None
    _check_tree(tree, filename)
    try:
        return compile(tree, filename, "exec")
    except (SyntaxError, ValueError, RecursionError, MemoryError) as exc:
        raise PluginExecutionError(
            filename, f"cannot compile script: {type(exc).__name__}: {exc}"
        ) from None


# ---------------------------------------------------------------------------
# Sandbox
# ---------------------------------------------------------------------------


class ExecutionSandbox:
    """Runs plugin entry points in fresh, capability-limited namespaces.

    The sandbox itself is stateless apart from its configuration, so one
    instance may be shared freely between threads.

    Parameters
    ----------
    timeout_seconds:
        Wall-clock budget for a single invocation, covering both module
        execution and the entry point call.  ``None`` disables the limit.
    """

    def __init__(self, timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive or None, got {timeout_seconds}"
            )
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float | None:
        """The per-invocation deadline in seconds, or ``None``."""
        return self._timeout_seconds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        source: str,
        filename: str,
        entry_point: str,
        *args: object,
        require: tuple[str, ...] = (),
    ) -> Any:
        """Execute *source* and call its *entry_point* with *args*.

        Parameters
        ----------
        source:
            Plugin script body.
        filename:
            Name used in tracebacks and for scoping the deadline.
        entry_point:
            Name of the top-level function to call.
        *args:
            Positional arguments for the entry point.
        require:
            Further top-level names that must be defined as callables.

        Returns
        -------
        Any
            Whatever the entry point returned.

        Raises
        ------
        PluginExecutionError
            On any failure, including a missing entry point, an exception
            raised by the script, a sandbox violation or a timeout.
        """
        try:
            code = compile_script(source, filename)
            namespace = self._new_namespace()
            with self._deadline(filename):
                exec(code, namespace)
                for name in (entry_point, *require):
                    if not callable(namespace.get(name)):
                        raise PluginExecutionError(
                            filename, f"missing entry point {name}()"
                        )
                return namespace[entry_point](*args)
        except PluginExecutionError:
            raise
        except _DeadlineExceeded:
            raise ExecutionTimeout(
                filename,
                f"{entry_point}() exceeded {self._timeout_seconds}s deadline",
            ) from None
        except Exception as exc:
            raise PluginExecutionError(
                filename, f"{entry_point}() raised {type(exc).__name__}: {exc}"
            ) from exc

    def process(self, source: str, filename: str, full_args: str) -> str:
        """Run ``process(full_args)`` and return the destination URL.

        Raises
        ------
        PluginExecutionError
            When execution fails or the result is not a string.
        """
        result = self.run(source, filename, "process", full_args)
        if not isinstance(result, str):
            raise PluginExecutionError(
                filename,
                f"process() must return str, got {type(result).__name__}",
            )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _new_namespace() -> dict[str, object]:
        namespace: dict[str, object] = {"__builtins__": dict(_SAFE_BUILTINS)}
        namespace.update(HELPERS)
        return namespace

    @contextlib.contextmanager
    def _deadline(self, filename: str) -> Iterator[None]:
        """Trace plugin frames on this thread and abort past the deadline."""
        if self._timeout_seconds is None:
            yield
            return

        deadline = time.monotonic() + self._timeout_seconds

        def local_trace(frame: FrameType, event: str, arg: object) -> object:
            if time.monotonic() > deadline:
                raise _DeadlineExceeded
            return local_trace

        def global_trace(frame: FrameType, event: str, arg: object) -> object:
            if frame.f_code.co_filename != filename:
                return None
            if time.monotonic() > deadline:
                raise _DeadlineExceeded
            return local_trace

        previous = sys.gettrace()
        sys.settrace(global_trace)
        try:
            yield
        finally:
            sys.settrace(previous)
