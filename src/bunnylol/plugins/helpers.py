"""Pure string helpers exposed to plugin scripts.

Every function here is deterministic, performs no I/O and keeps no state,
so the same callables are shared by every sandbox invocation.

Example
-------
>>> url_encode("hello world")
'hello%20world'
>>> get_args("gh facebook/react", "gh")
'facebook/react'
"""
from __future__ import annotations

import string
from collections.abc import Callable

_ALPHANUMERIC: frozenset[int] = frozenset(
    (string.ascii_letters + string.digits).encode("ascii")
)

# Controls and non-ASCII are always encoded; these are added on top.
_PATH_RESERVED: frozenset[int] = frozenset(b' "#<>?`{}')


def _percent_encode(value: str, keep: Callable[[int], bool]) -> str:
    return "".join(
        chr(byte) if keep(byte) else f"%{byte:02X}"
        for byte in value.encode("utf-8")
    )


def _keep_alphanumeric(byte: int) -> bool:
    return byte in _ALPHANUMERIC


def _keep_path_safe(byte: int) -> bool:
    if byte < 0x20 or byte >= 0x7F:
        return False
    return byte not in _PATH_RESERVED


def url_encode(value: str) -> str:
    """Percent-encode every byte that is not an ASCII letter or digit."""
    return _percent_encode(value, _keep_alphanumeric)


def url_encode_path(value: str) -> str:
    """Percent-encode *value* for use inside a URL path.

    Slashes and most punctuation are preserved; only controls, non-ASCII
    bytes, and the characters ``space " # < > ? ` { }`` are encoded.
    """
    return _percent_encode(value, _keep_path_safe)


def get_args(full_args: str, binding: str) -> str:
    """Return *full_args* with the leading *binding* token removed.

    When *full_args* does not start with *binding* it is returned
    unchanged apart from leading whitespace.
    """
    if full_args.startswith(binding):
        full_args = full_args[len(binding):]
    return full_args.lstrip()


def trim(value: str) -> str:
    return value.strip()


def split(value: str, delimiter: str) -> list[str]:
    if not delimiter:
        raise ValueError("split() delimiter must not be empty")
    return value.split(delimiter)


def starts_with(value: str, prefix: str) -> bool:
    return value.startswith(prefix)


def ends_with(value: str, suffix: str) -> bool:
    return value.endswith(suffix)


def contains(value: str, needle: str) -> bool:
    return needle in value


def upper(value: str) -> str:
    return value.upper()


def lower(value: str) -> str:
    return value.lower()


# Name -> callable table injected into every sandbox namespace.
HELPERS: dict[str, object] = {
    "url_encode": url_encode,
    "url_encode_path": url_encode_path,
    "get_args": get_args,
    "trim": trim,
    "split": split,
    "starts_with": starts_with,
    "ends_with": ends_with,
    "contains": contains,
    "upper": upper,
    "lower": lower,
}