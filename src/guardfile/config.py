"""Layered configuration with TOML-backed persistence.

Two kinds of sections live in the same TOML files:

* typed sections, registered with ``@configurable`` as dataclasses and
  loaded with :func:`load` (e.g. ``[guardfile]``);
* the free-form ``[guard]`` table holding the values stubs are compiled
  from (``css_path``, ``guard_options``, ``js_concat`` ...), read through
  a :class:`DictConfig` returned by :func:`load_guard_config`.

Both merge code defaults → global TOML → local TOML.

Config files:
    ~/.config/guardfile/config.toml     global (user-wide)
    .guardfile/config.toml              local  (project-specific)
"""

from __future__ import annotations

import copy
import dataclasses
import logging
import pathlib
import tomllib
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

import guardfile.ruby

T = TypeVar("T")

logger = logging.getLogger("guardfile.config")

_REGISTRY: dict[str, type] = {}

GUARD_SECTION = "guard"

# Values a fresh project starts from; TOML overrides merge key by key.
GUARD_DEFAULTS: dict[str, Any] = {
    "css_path": "public/css",
    "js_path": "public/js",
    "sass_path": "app/assets/sass",
    "less_path": "app/assets/less",
    "coffee_path": "app/assets/coffee",
    "js_concat": [],
    "css_concat": [],
    "guard_options": {},
}

_MISSING = object()


# ---------------------------------------------------------------------------
# Provider interface
# ---------------------------------------------------------------------------

class ConfigProvider(Protocol):
    """Anything the engine can read dotted configuration keys from."""

    def get(self, key: str, default: Any = None) -> Any: ...


class DictConfig:
    """Read-only view over a nested mapping, addressed by dotted keys.

    ``get("guard_options.sass")`` walks ``data["guard_options"]["sass"]``.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping):
                return default
            node = node.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._data))


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------

def configurable(section: str):
    """Class decorator — register a dataclass as a configurable section."""

    def decorator(cls: type[T]) -> type[T]:
        _REGISTRY[section] = cls
        return cls

    return decorator


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

def _global_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "guardfile" / "config.toml"


def _local_path(root: pathlib.Path) -> pathlib.Path:
    return root / ".guardfile" / "config.toml"


def find_repo_root(cwd: pathlib.Path) -> pathlib.Path | None:
    """Walk up from *cwd* looking for a ``.git`` directory."""
    current = cwd.resolve()
    while True:
        if (current / ".git").is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _find_root(root: pathlib.Path | None = None) -> pathlib.Path:
    """Locate the project root (repo root or cwd)."""
    if root is not None:
        return root
    found = find_repo_root(pathlib.Path.cwd())
    return found if found is not None else pathlib.Path.cwd()


# ---------------------------------------------------------------------------
# TOML I/O
# ---------------------------------------------------------------------------

def _load_toml(path: pathlib.Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        logger.warning("Ignoring unreadable config file %s", path, exc_info=True)
        return {}


def _write_toml(path: pathlib.Path, data: dict[str, Any]) -> None:
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(tomli_w.dumps(data).encode())


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into a copy of *base*, recursing into tables."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# ---------------------------------------------------------------------------
# CLI values
# ---------------------------------------------------------------------------

def _parse_literal(value: str) -> Any:
    """Read a CLI string as a TOML value, falling back to the raw string.

    ``true`` → True, ``3`` → 3, ``["a.js", "b.js"]`` → list; anything that
    is not valid TOML (e.g. ``public/css``) stays a string.
    """
    try:
        return tomllib.loads(f"v = {value}")["v"]
    except tomllib.TOMLDecodeError:
        return value


def _coerce_field(cls: type, section: str, key: str, raw: str) -> Any:
    """Turn a CLI string into a value of the same type as the field default.

    String fields take *raw* verbatim; other fields parse it as a TOML
    literal and must come out as the default's type.
    """
    defaults = {f.name: f.default for f in dataclasses.fields(cls)}
    if key not in defaults:
        raise KeyError(f"Unknown key: {section}.{key}")
    expected = type(defaults[key])
    if expected is str:
        return raw
    value = _parse_literal(raw)
    if expected is float and type(value) is int:
        value = float(value)
    if type(value) is not expected:
        raise ValueError(f"{section}.{key} expects {expected.__name__}, got {raw!r}")
    return value


# ---------------------------------------------------------------------------
# Typed sections
# ---------------------------------------------------------------------------

def _layers(section: str, root: pathlib.Path | None) -> list[dict[str, Any]]:
    """The global then local TOML tables for *section*."""
    root = _find_root(root)
    return [
        _load_toml(_global_path()).get(section, {}),
        _load_toml(_local_path(root)).get(section, {}),
    ]


def list_sections() -> dict[str, type]:
    """Return a copy of the registry."""
    return dict(_REGISTRY)


def load(section: str, root: pathlib.Path | None = None) -> Any:
    """Build a typed section from its defaults plus the TOML layers."""
    cls = _REGISTRY.get(section)
    if cls is None:
        raise KeyError(f"Unknown config section: {section}")

    fields = {f.name for f in dataclasses.fields(cls)}
    values: dict[str, Any] = {}
    for layer in _layers(section, root):
        for name, value in layer.items():
            if name in fields:
                values[name] = value
            else:
                logger.debug("Ignoring unknown key %s.%s", section, name)
    return cls(**values)


def get_effective(
    section: str,
    key: str,
    root: pathlib.Path | None = None,
) -> Any:
    """Return the value *key* resolves to after layering."""
    if section == GUARD_SECTION:
        value = load_guard_config(root).get(key, _MISSING)
    else:
        value = getattr(load(section, root), key, _MISSING)
    if value is _MISSING:
        raise KeyError(f"Unknown key: {section}.{key}")
    return value


# ---------------------------------------------------------------------------
# Free-form [guard] section
# ---------------------------------------------------------------------------

def load_guard_config(root: pathlib.Path | None = None) -> DictConfig:
    """Return the effective ``[guard]`` values for the project at *root*."""
    data = GUARD_DEFAULTS
    for layer in _layers(GUARD_SECTION, root):
        data = _deep_merge(data, layer)
    return DictConfig(data)


def validate_guard_value(key: str, value: Any) -> None:
    """Reject a ``[guard]`` value the stub compiler could not use.

    * ``<lang>_path`` must be a string;
    * ``<lang>_concat`` must be a string or a list of strings;
    * ``guard_options`` holds one table per plugin, and every option value
      must have a Ruby literal form.
    """
    parts = key.split(".")
    top = parts[0]
    if top.endswith("_path") and len(parts) == 1:
        if not isinstance(value, str):
            raise ValueError(f"{GUARD_SECTION}.{key} must be a string")
    elif top.endswith("_concat") and len(parts) == 1:
        items = [value] if isinstance(value, str) else value
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise ValueError(f"{GUARD_SECTION}.{key} must be a list of file names")
    elif top == "guard_options":
        if len(parts) == 1:
            if not isinstance(value, Mapping) or not all(
                isinstance(v, Mapping) for v in value.values()
            ):
                raise ValueError(f"{GUARD_SECTION}.{key} must be a table of plugin tables")
        elif len(parts) == 2 and not isinstance(value, Mapping):
            raise ValueError(f"{GUARD_SECTION}.{key} must be a table of options")
        try:
            guardfile.ruby.literal(value)
        except TypeError as exc:
            raise ValueError(f"{GUARD_SECTION}.{key}: {exc}") from exc


def _set_nested(data: dict[str, Any], dotted: str, value: Any) -> None:
    *parents, leaf = dotted.split(".")
    node = data
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


def _remove_nested(data: dict[str, Any], dotted: str) -> bool:
    *parents, leaf = dotted.split(".")
    chain = [data]
    for part in parents:
        child = chain[-1].get(part)
        if not isinstance(child, dict):
            return False
        chain.append(child)
    if leaf not in chain[-1]:
        return False
    del chain[-1][leaf]
    # Prune tables left empty by the removal.
    for part, node in zip(reversed(parents), reversed(chain[:-1])):
        if node[part]:
            break
        del node[part]
    return True


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _scope_path(scope: str, root: pathlib.Path | None) -> pathlib.Path:
    if scope == "global":
        return _global_path()
    return _local_path(_find_root(root))


def set_value(
    section: str,
    key: str,
    value: Any,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> None:
    """Write *value* under ``section.key`` in the *scope* TOML file.

    String values coming from the CLI are parsed first: TOML literals for
    ``[guard]``, the field's type for typed sections. Raises ``KeyError``
    for unknown sections or fields and ``ValueError`` for values that do
    not fit.
    """
    if section == GUARD_SECTION:
        if isinstance(value, str):
            value = _parse_literal(value)
        validate_guard_value(key, value)
    else:
        cls = _REGISTRY.get(section)
        if cls is None:
            raise KeyError(f"Unknown config section: {section}")
        if isinstance(value, str):
            value = _coerce_field(cls, section, key, value)
        elif key not in {f.name for f in dataclasses.fields(cls)}:
            raise KeyError(f"Unknown key: {section}.{key}")

    path = _scope_path(scope, root)
    data = _load_toml(path)
    _set_nested(data.setdefault(section, {}), key, value)
    _write_toml(path, data)
    logger.info("Set %s.%s in %s", section, key, path)


def reset_value(
    section: str,
    key: str,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> bool:
    """Drop the ``section.key`` override from the *scope* file.

    Returns whether anything was removed; the file is only rewritten then.
    """
    path = _scope_path(scope, root)
    data = _load_toml(path)
    table = data.get(section, {})
    if not _remove_nested(table, key):
        return False
    if not table:
        del data[section]
    _write_toml(path, data)
    logger.info("Reset %s.%s in %s", section, key, path)
    return True
