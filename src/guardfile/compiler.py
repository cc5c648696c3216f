"""Compile stub templates against the ``[guard]`` configuration.

Placeholders:

* ``{{<lang>Path}}`` — the configured ``<lang>_path`` (case-insensitive tag);
* ``{{options}}``    — ``guard_options.<plugin>`` rendered as trailing Ruby
  keyword arguments, or nothing when the plugin has no options;
* ``{{files}}``      — concat plugins only: the space-separated file list
  built from ``<lang>_concat``.

Lookups always go to the config provider; nothing is cached between
placeholders or calls.
"""

from __future__ import annotations

import logging
import pathlib
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

import guardfile.ruby

if TYPE_CHECKING:
    from guardfile.config import ConfigProvider

logger = logging.getLogger("guardfile.compiler")

CONCAT_PREFIX = "concat"

_PATH_TAG_RE = re.compile(r"\{\{([a-z]+?)Path\}\}", re.IGNORECASE)
_CONCAT_RE = re.compile(rf"^{CONCAT_PREFIX}[-_](.+)$")
_MINIFIED_RE = re.compile(r"\.min\.(js|css)$", re.IGNORECASE)

OPTIONS_TAG = "{{options}}"
FILES_TAG = "{{files}}"


def concat_language(plugin: str) -> str | None:
    """Return the language of a ``concat-<lang>`` plugin, else None."""
    m = _CONCAT_RE.match(plugin)
    return m.group(1) if m else None


def split_plugin(plugin: str) -> tuple[str, str | None]:
    """Split ``"concat-js"`` into ``("concat", "js")``; others get None."""
    language = concat_language(plugin)
    if language is None:
        return plugin, None
    return CONCAT_PREFIX, language


def remove_merged_files(files: Iterable[str]) -> list[str]:
    """Drop ``*.min.js`` / ``*.min.css`` outputs from a concat list."""
    return [f for f in files if not _MINIFIED_RE.search(f)]


def remove_file_extensions(files: Iterable[str]) -> list[str]:
    """Reduce each file to its base name without extension.

    Entries with no extension are vendor references such as
    ``vendor/jquery`` and are returned untouched.
    """
    stripped = []
    for f in files:
        path = pathlib.PurePosixPath(f)
        stripped.append(path.stem if path.suffix else f)
    return stripped


class StubCompiler:
    """Fills in stub placeholders from a :class:`ConfigProvider`."""

    def __init__(self, config: ConfigProvider) -> None:
        self.config = config

    def compile(self, stub: str, plugin: str) -> str:
        stub = self.apply_paths_to_stub(stub)
        stub = self.apply_options(stub, plugin)

        language = concat_language(plugin)
        if language is not None:
            stub = self.apply_file_list(stub, language)

        return stub

    def apply_paths_to_stub(self, stub: str) -> str:
        return _PATH_TAG_RE.sub(self._resolve_path, stub)

    def _resolve_path(self, match: re.Match[str]) -> str:
        key = f"{match.group(1)}_path"
        value = self.config.get(key)
        if value is None:
            logger.warning("No value configured for %s; %s left empty", key, match.group(0))
            return ""
        return str(value)

    def apply_options(self, stub: str, plugin: str) -> str:
        options = self.config.get(f"guard_options.{plugin}")

        if options and not isinstance(options, Mapping):
            logger.warning(
                "guard_options.%s should be a table, got %s; ignoring",
                plugin,
                type(options).__name__,
            )
            options = None

        if options:
            formatted = guardfile.ruby.attributes(options)
            return stub.replace(OPTIONS_TAG, ", " + ", ".join(formatted))

        return stub.replace(OPTIONS_TAG, "")

    def apply_file_list(self, stub: str, language: str) -> str:
        files = self.get_files_to_concat(language)
        return stub.replace(FILES_TAG, " ".join(files))

    def get_files_to_concat(self, language: str) -> list[str]:
        files = self.config.get(f"{language}_concat")
        if files is None:
            logger.warning("No %s_concat list configured", language)
            files = []
        elif isinstance(files, str):
            files = [files]
        return remove_file_extensions(remove_merged_files(files))
