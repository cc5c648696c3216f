"""Bundled Guardfile stubs and the lookup that resolves plugins to them.

Each plugin has exactly one template, stored next to this module as::

    guard-{plugin}-stub.txt

A project may point ``guardfile.stub_dir`` at its own directory; stubs found
there shadow the bundled ones with the same name.
"""

from __future__ import annotations

import importlib.resources
import logging
import pathlib
import re

import guardfile.errors

logger = logging.getLogger("guardfile.stubs")

_STUB_RE = re.compile(r"^guard-(.+)-stub\.txt$")


def stub_filename(plugin: str) -> str:
    """Return the file name a stub for *plugin* is stored under."""
    return f"guard-{plugin}-stub.txt"


def _bundled_dir():
    return importlib.resources.files("guardfile.stubs")


def _is_valid_identifier(plugin: str) -> bool:
    return bool(plugin) and "/" not in plugin and "\\" not in plugin and plugin not in (".", "..")


def get_plugin_stub(plugin: str, stub_dir: pathlib.Path | None = None) -> str:
    """Return the raw template text for *plugin*.

    Raises :class:`~guardfile.errors.StubNotFoundError` when neither
    *stub_dir* nor the bundled stubs contain a template for it.
    """
    if _is_valid_identifier(plugin):
        name = stub_filename(plugin)
        if stub_dir is not None:
            candidate = pathlib.Path(stub_dir) / name
            if candidate.is_file():
                logger.debug("Using project stub %s", candidate)
                return candidate.read_text(encoding="utf-8")
        bundled = _bundled_dir() / name
        if bundled.is_file():
            return bundled.read_text(encoding="utf-8")

    logger.debug("No stub for plugin %r", plugin)
    raise guardfile.errors.StubNotFoundError(plugin)


def available_plugins(stub_dir: pathlib.Path | None = None) -> list[str]:
    """List every plugin identifier with a stub, sorted by name."""
    found: set[str] = set()
    sources = [_bundled_dir()]
    if stub_dir is not None and pathlib.Path(stub_dir).is_dir():
        sources.append(pathlib.Path(stub_dir))
    for source in sources:
        for entry in source.iterdir():
            m = _STUB_RE.match(entry.name)
            if m and entry.is_file():
                found.add(m.group(1))
    return sorted(found)
