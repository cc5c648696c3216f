"""CLI for the values Guardfile stubs are compiled from.

Usage:
    guardfile config list                          Show sections and defaults
    guardfile config get <key>                     Print an effective value
    guardfile config set [--global] <key> <value>  Write an override
    guardfile config reset [--global] <key>        Remove an override
    guardfile config show                          Dump the effective config

Keys without a section prefix belong to ``[guard]``; values are read as TOML
literals where they parse as one::

    guardfile config set css_path public/styles
    guardfile config set guard_options.sass.style :compressed
    guardfile config set js_concat '["vendor/jquery", "app.js"]'
    guardfile config set guardfile.stub_dir resources/guard
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w

import guardfile.config
import guardfile.settings  # noqa: F401  registers [guardfile]

GUARD = guardfile.config.GUARD_SECTION


def resolve_key(key: str) -> tuple[str, str]:
    """Split *key* into ``(section, field)``.

    ``guardfile.filename`` names a typed section; anything else, with or
    without a ``guard.`` prefix, is a ``[guard]`` key.
    """
    if not key or any(not part for part in key.split(".")):
        raise ValueError(f"Invalid key: {key!r}")
    section, _, rest = key.partition(".")
    if rest and (section == GUARD or section in guardfile.config.list_sections()):
        return section, rest
    return GUARD, key


def _render(value: Any) -> str:
    """Format a config value for the terminal; tables and lists as TOML."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return tomli_w.dumps(dict(value)).rstrip("\n") or "{}"
    return tomli_w.dumps({"v": value}).partition(" = ")[2].rstrip("\n")


def _effective_tables(root: Path | None) -> dict[str, dict[str, Any]]:
    tables = {
        name: dataclasses.asdict(guardfile.config.load(name, root))
        for name in sorted(guardfile.config.list_sections())
    }
    tables[GUARD] = guardfile.config.load_guard_config(root).as_dict()
    return tables


def cmd_list() -> int:
    """Print every section with its keys and built-in defaults."""
    for name, cls in sorted(guardfile.config.list_sections().items()):
        print(f"[{name}]")
        for f in dataclasses.fields(cls):
            print(f"  {f.name} = {f.default!r}  ({type(f.default).__name__})")
        print()

    print(f"[{GUARD}]")
    for key, value in guardfile.config.GUARD_DEFAULTS.items():
        print(f"  {key} = {value!r}")
    return 0


def cmd_get(key: str, root: Path | None) -> int:
    section, field = resolve_key(key)
    print(_render(guardfile.config.get_effective(section, field, root)))
    return 0


def cmd_set(key: str, value: str, *, global_flag: bool, root: Path | None) -> int:
    section, field = resolve_key(key)
    scope = "global" if global_flag else "local"
    guardfile.config.set_value(section, field, value, scope=scope, root=root)
    print(f"{section}.{field} = {value} ({scope})")
    return 0


def cmd_reset(key: str, *, global_flag: bool, root: Path | None) -> int:
    section, field = resolve_key(key)
    scope = "global" if global_flag else "local"
    if guardfile.config.reset_value(section, field, scope=scope, root=root):
        print(f"{section}.{field} reset ({scope})")
    else:
        print(f"{section}.{field} has no {scope} override")
    return 0


def cmd_show(root: Path | None) -> int:
    """Print the merged configuration as a TOML document."""
    print(tomli_w.dumps(_effective_tables(root)), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``guardfile config``."""
    project = argparse.ArgumentParser(add_help=False)
    project.add_argument("--path", type=Path, default=None, help="Project root")
    scoped = argparse.ArgumentParser(add_help=False, parents=[project])
    scoped.add_argument(
        "--global", dest="global_flag", action="store_true",
        help="Write ~/.config/guardfile/config.toml instead of the project file",
    )

    parser = argparse.ArgumentParser(
        prog="guardfile config",
        description="Inspect and change Guardfile configuration.",
    )
    sub = parser.add_subparsers(dest="subcmd")
    sub.add_parser("list", help="Show sections and defaults")
    sub.add_parser("get", parents=[project], help="Print an effective value").add_argument("key")
    p_set = sub.add_parser("set", parents=[scoped], help="Write an override")
    p_set.add_argument("key")
    p_set.add_argument("value")
    sub.add_parser("reset", parents=[scoped], help="Remove an override").add_argument("key")
    sub.add_parser("show", parents=[project], help="Dump the effective config")

    args = parser.parse_args(argv)

    handlers = {
        "list": cmd_list,
        "get": lambda: cmd_get(args.key, args.path),
        "set": lambda: cmd_set(
            args.key, args.value, global_flag=args.global_flag, root=args.path
        ),
        "reset": lambda: cmd_reset(args.key, global_flag=args.global_flag, root=args.path),
        "show": lambda: cmd_show(args.path),
    }
    handler = handlers.get(args.subcmd)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler()
    except KeyError as exc:
        print(exc.args[0] if exc.args else exc, file=sys.stderr)
    except ValueError as exc:
        print(exc, file=sys.stderr)
    return 1
