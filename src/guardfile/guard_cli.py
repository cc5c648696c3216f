"""CLI for generating and updating the project's Guardfile.

Usage:
    guardfile plugins [--path DIR]                 List plugins with a stub
    guardfile show <plugin> [--installed] [--path DIR]
                                                   Print a compiled stub, or
                                                   the block already installed
    guardfile make <plugin>... [--path DIR]        Write a fresh Guardfile
    guardfile update <plugin>... [--append-missing] [--path DIR]
                                                   Refresh plugin signatures
    guardfile files <language> [--path DIR]        Show the concat file list
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import guardfile.engine
import guardfile.errors
import guardfile.stubs


def cmd_plugins(root: Path) -> int:
    """Print every plugin a stub exists for."""
    gf = guardfile.engine.for_project(root)
    plugins = guardfile.stubs.available_plugins(gf.stub_dir)
    for plugin in plugins:
        print(plugin)
    return 0


def cmd_show(plugin: str, root: Path, *, installed: bool = False) -> int:
    """Print the compiled stub for *plugin* without touching the Guardfile.

    With *installed*, print the block the Guardfile holds for it instead.
    """
    gf = guardfile.engine.for_project(root)
    if not installed:
        print(gf.compile_plugin(plugin))
        return 0

    blocks = gf.installed_signatures(plugin)
    if not blocks:
        print(f"No {plugin} signature in {gf.path}", file=sys.stderr)
        return 1
    print("\n\n".join(blocks))
    return 0


def cmd_make(plugins: list[str], root: Path, *, force: bool = False) -> int:
    """Generate the Guardfile from *plugins*, in the given order."""
    gf = guardfile.engine.for_project(root)
    if gf.path.exists() and not force:
        print(f"{gf.path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    gf.make(plugins)
    print(f"Wrote {gf.path} ({len(plugins)} plugin(s))")
    return 0


def cmd_update(plugins: list[str], root: Path, *, append_missing: bool = False) -> int:
    """Refresh each plugin's signature in the existing Guardfile."""
    gf = guardfile.engine.for_project(root)
    missing: list[str] = []
    for plugin in plugins:
        if append_missing and not gf.has_signature(plugin):
            gf.append_signature(plugin)
            print(f"  appended: {plugin}")
            continue
        if gf.update_signature(plugin):
            print(f"  updated: {plugin}")
        else:
            missing.append(plugin)

    if missing:
        print(
            f"No signature found for: {', '.join(missing)} "
            "(use --append-missing to add them)",
            file=sys.stderr,
        )
        return 1
    return 0


def cmd_files(language: str, root: Path) -> int:
    """Print the files a concat plugin would merge, one per line."""
    gf = guardfile.engine.for_project(root)
    for name in gf.get_files_to_concat(language):
        print(name)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the Guardfile commands."""
    parser = argparse.ArgumentParser(
        prog="guardfile",
        description="Generate and update a Guardfile from plugin stubs.",
    )
    sub = parser.add_subparsers(dest="subcmd")

    p_plugins = sub.add_parser("plugins", help="List plugins with a stub")
    p_plugins.add_argument("--path", type=Path, default=None)

    p_show = sub.add_parser("show", help="Print a compiled stub")
    p_show.add_argument("plugin")
    p_show.add_argument(
        "--installed", action="store_true", help="Show the block in the Guardfile"
    )
    p_show.add_argument("--path", type=Path, default=None)

    p_make = sub.add_parser("make", help="Write a fresh Guardfile")
    p_make.add_argument("plugins", nargs="+")
    p_make.add_argument("--force", "-f", action="store_true")
    p_make.add_argument("--path", type=Path, default=None)

    p_update = sub.add_parser("update", help="Refresh plugin signatures")
    p_update.add_argument("plugins", nargs="+")
    p_update.add_argument("--append-missing", action="store_true")
    p_update.add_argument("--path", type=Path, default=None)

    p_files = sub.add_parser("files", help="Show the concat file list")
    p_files.add_argument("language")
    p_files.add_argument("--path", type=Path, default=None)

    args = parser.parse_args(argv)

    if args.subcmd is None:
        parser.print_help()
        return 1

    try:
        if args.subcmd == "plugins":
            return cmd_plugins(args.path)
        elif args.subcmd == "show":
            return cmd_show(args.plugin, args.path, installed=args.installed)
        elif args.subcmd == "make":
            return cmd_make(args.plugins, args.path, force=args.force)
        elif args.subcmd == "update":
            return cmd_update(
                args.plugins, args.path, append_missing=args.append_missing
            )
        elif args.subcmd == "files":
            return cmd_files(args.language, args.path)
    except (guardfile.errors.GuardfileError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    parser.print_help()
    return 1
