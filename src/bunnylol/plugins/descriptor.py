"""Immutable value types describing loaded plugins.

PluginDescriptor : Everything the registry needs to dispatch to a plugin.
CommandInfo      : Read-only projection used for listing only.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

USER_ORIGIN: str = "user"


@dataclass(frozen=True)
class CommandInfo:
    """Display metadata for one plugin.

    Attributes
    ----------
    bindings:
        Every token the plugin answers to; the first is the primary one.
    description:
        One-line human description.
    example:
        Sample invocation shown in listings.
    origin:
        ``"user"`` or the vendor identifier the plugin was loaded from.
    """

    bindings: tuple[str, ...]
    description: str
    example: str
    origin: str

    @property
    def primary(self) -> str:
        """The primary binding token."""
        return self.bindings[0]

    @property
    def aliases(self) -> tuple[str, ...]:
        """Secondary binding tokens (may be empty)."""
        return self.bindings[1:]

    def to_dict(self) -> dict[str, object]:
        return {
            "bindings": list(self.bindings),
            "description": self.description,
            "example": self.example,
            "origin": self.origin,
        }


@dataclass(frozen=True)
class PluginDescriptor:
    """A successfully loaded plugin script.

    The ``source_text`` is opaque outside the sandbox: it is only ever
    compiled and run by :class:`~bunnylol.plugins.sandbox.ExecutionSandbox`.

    Attributes
    ----------
    bindings:
        Non-empty tuple of unique tokens; the first is primary.
    description:
        Human description returned by ``describe()``.
    example:
        Example invocation returned by ``describe()``.
    origin:
        Provenance tag (``"user"`` or a vendor identifier).
    source_text:
        The full script body.
    path:
        File the script was read from.
    """

    bindings: tuple[str, ...]
    description: str
    example: str
    origin: str
    source_text: str
    path: Path

    def __post_init__(self) -> None:
        if not self.bindings:
            raise ValueError("PluginDescriptor requires at least one binding")

    @property
    def primary(self) -> str:
        """The primary binding token."""
        return self.bindings[0]

    def info(self) -> CommandInfo:
        """Return the listing projection of this descriptor."""
        return CommandInfo(
            bindings=self.bindings,
            description=self.description,
            example=self.example,
            origin=self.origin,
        )
