"""Render configuration values as Ruby literals for Guardfile options.

Strings that start with a colon are emitted as bare symbols, so a config
value of ``":compressed"`` becomes ``:compressed`` rather than
``':compressed'``. This is a naming convention, not a type: a string that
genuinely needs a leading colon cannot be expressed as a quoted string.

TOML dates and times have no Ruby literal and are written as quoted ISO 8601
strings.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import Any

import guardfile.errors


def _string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    literal = f"'{escaped}'"
    # ':compressed' -> :compressed
    if literal.startswith("':"):
        literal = literal.strip("'")
    return literal


def _sequence(value: list | tuple) -> str:
    return "[" + ", ".join(literal(item) for item in value) + "]"


def _mapping(value: Mapping) -> str:
    return "{" + ", ".join(attributes(value)) + "}"


def literal(value: Any) -> str:
    """Return the Ruby literal for a single config value.

    Raises :class:`~guardfile.errors.UnsupportedValueError` for values with
    no literal form.
    """
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _string(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return f"'{value.isoformat()}'"
    if isinstance(value, (list, tuple)):
        return _sequence(value)
    if isinstance(value, Mapping):
        return _mapping(value)
    raise guardfile.errors.UnsupportedValueError(value)


def attributes(options: Mapping[str, Any]) -> list[str]:
    """Format an options mapping as ``:key => value`` pairs, in order."""
    return [f":{key} => {literal(val)}" for key, val in options.items()]
