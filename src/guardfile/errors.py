"""Exceptions raised by the Guardfile engine."""

from __future__ import annotations


class GuardfileError(Exception):
    """Base class for guardfile errors."""


class StubNotFoundError(GuardfileError, FileNotFoundError):
    """No stub template exists for the requested plugin."""

    def __init__(self, plugin: str) -> None:
        self.plugin = plugin
        super().__init__(f"Plugin name or stub not recognized: {plugin!r}")


class UnsupportedValueError(GuardfileError, TypeError):
    """A config value has no Ruby literal form."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Cannot render {type(value).__name__} as a Ruby literal")
