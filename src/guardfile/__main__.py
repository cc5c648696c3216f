"""guardfile CLI — build and maintain a Guardfile from plugin stubs.

Usage:
    guardfile plugins              List plugins with a stub
    guardfile show <plugin>        Print the compiled stub for a plugin
    guardfile make <plugin>...     Generate the Guardfile from scratch
    guardfile update <plugin>...   Refresh plugin signatures in place
    guardfile files <language>     Show the files a concat plugin merges
    guardfile config <cmd>         Configuration (list/get/set/reset/show)

Global flags (before the command):
    -v, --verbose                  Log at DEBUG level
"""

from __future__ import annotations

import logging
import pathlib
import sys

_GUARD_COMMANDS = {"plugins", "show", "make", "update", "files"}


def _project_root(args: list[str]) -> pathlib.Path | None:
    """The ``--path`` a subcommand was given, if any."""
    for i, arg in enumerate(args):
        if arg == "--path" and i + 1 < len(args):
            return pathlib.Path(args[i + 1])
        if arg.startswith("--path="):
            return pathlib.Path(arg.partition("=")[2])
    return None


def _configure_logging(verbose: bool, root: pathlib.Path | None = None) -> None:
    """Send log records to stderr at the level configured for *root*."""
    level_name = "DEBUG"
    if not verbose:
        import guardfile.config
        import guardfile.settings  # noqa: F401

        try:
            level_name = guardfile.config.load("guardfile", root).log_level
        except (KeyError, TypeError):
            level_name = "WARNING"
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _cmd_guard(args: list[str]) -> int:
    """Generate or update the Guardfile."""
    import guardfile.guard_cli

    return guardfile.guard_cli.main(args)


def _cmd_config(args: list[str]) -> int:
    """Configuration."""
    import guardfile.config_cli

    return guardfile.config_cli.main(args)


def main() -> None:
    args = sys.argv[1:]
    verbose = False
    while args and args[0] in ("-v", "--verbose"):
        verbose = True
        args = args[1:]

    if not args:
        print(__doc__)
        sys.exit(1)

    _configure_logging(verbose, _project_root(args))

    cmd = args[0]
    rest = args[1:]

    if cmd in _GUARD_COMMANDS:
        sys.exit(_cmd_guard(args))
    elif cmd == "config":
        sys.exit(_cmd_config(rest))
    else:
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()
