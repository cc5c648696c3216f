"""The Guardfile engine: compile plugin stubs and splice them into the file.

Typical use::

    gf = Guardfile(LocalFilesystem(), load_guard_config(root), root)
    gf.make(["sass", "concat-js"])      # write a fresh Guardfile
    gf.update_signature("concat-js")    # refresh one block in place

Every write rewrites the whole file. Concurrent writers are not
coordinated; callers must serialize them.
"""

from __future__ import annotations

import logging
import pathlib
from collections.abc import Iterable
from typing import TYPE_CHECKING

import guardfile.compiler
import guardfile.signatures
import guardfile.stubs

if TYPE_CHECKING:
    from guardfile.config import ConfigProvider
    from guardfile.storage import Storage

logger = logging.getLogger("guardfile.engine")

DEFAULT_FILENAME = "Guardfile"


class Guardfile:
    """A Guardfile under *base_path*, read and written through *storage*."""

    def __init__(
        self,
        storage: Storage,
        config: ConfigProvider,
        base_path: pathlib.Path,
        *,
        filename: str = DEFAULT_FILENAME,
        stub_dir: pathlib.Path | None = None,
    ) -> None:
        self.storage = storage
        self.config = config
        self.base_path = pathlib.Path(base_path)
        self.filename = filename
        self.stub_dir = stub_dir
        self.compiler = guardfile.compiler.StubCompiler(config)

    @property
    def path(self) -> pathlib.Path:
        return self.base_path / self.filename

    # -- persistence -------------------------------------------------------

    def get_contents(self) -> str:
        return self.storage.read(self.path)

    def put(self, contents: str) -> None:
        self.storage.write(self.path, contents)

    # -- stubs -------------------------------------------------------------

    def get_plugin_stub(self, plugin: str) -> str:
        return guardfile.stubs.get_plugin_stub(plugin, self.stub_dir)

    def compile(self, stub: str, plugin: str) -> str:
        return self.compiler.compile(stub, plugin)

    def compile_plugin(self, plugin: str) -> str:
        """Look up and compile the stub for *plugin*."""
        return self.compile(self.get_plugin_stub(plugin), plugin)

    def get_stubs(self, plugins: Iterable[str]) -> str:
        """Compile each plugin in order and stitch them with blank lines."""
        return "\n\n".join(self.compile_plugin(plugin) for plugin in plugins)

    def get_files_to_concat(self, language: str) -> list[str]:
        return self.compiler.get_files_to_concat(language)

    # -- writes ------------------------------------------------------------

    def make(self, plugins: Iterable[str]) -> str:
        """Write a Guardfile containing exactly *plugins*; return its text."""
        plugins = list(plugins)
        contents = self.get_stubs(plugins)
        self.put(contents)
        logger.info("Generated %s with %d plugin(s)", self.path, len(plugins))
        return contents

    def has_signature(self, plugin: str) -> bool:
        return guardfile.signatures.has_signature(self.get_contents(), plugin)

    def installed_signatures(self, plugin: str) -> list[str]:
        """Return the blocks *plugin* currently owns in the Guardfile."""
        return guardfile.signatures.extract_signatures(self.get_contents(), plugin)

    def update_signature(self, plugin: str) -> int:
        """Replace *plugin*'s block with a freshly compiled stub.

        Returns how many blocks were replaced. When the plugin has no block
        yet the file is rewritten unchanged; see :meth:`append_signature`.
        """
        stub = self.compile_plugin(plugin)
        contents, replaced = guardfile.signatures.replace_signature(
            self.get_contents(), plugin, stub
        )
        if not replaced:
            logger.warning("No %s signature in %s; nothing replaced", plugin, self.path)
        else:
            logger.info("Updated %d %s signature(s) in %s", replaced, plugin, self.path)
        self.put(contents)
        return replaced

    def append_signature(self, plugin: str) -> None:
        """Add *plugin*'s compiled stub as a new block at the end of the file."""
        stub = self.compile_plugin(plugin)
        contents = self.get_contents().rstrip("\n")
        self.put(f"{contents}\n\n{stub}" if contents else stub)
        logger.info("Appended %s signature to %s", plugin, self.path)


def for_project(root: pathlib.Path | None = None) -> Guardfile:
    """Build a :class:`Guardfile` from the project's layered config."""
    import guardfile.config
    import guardfile.settings
    import guardfile.storage

    root = guardfile.config._find_root(root)
    settings = guardfile.config.load("guardfile", root)
    stub_dir = None
    if settings.stub_dir:
        stub_dir = pathlib.Path(settings.stub_dir)
        if not stub_dir.is_absolute():
            stub_dir = root / stub_dir
    return Guardfile(
        guardfile.storage.LocalFilesystem(),
        guardfile.config.load_guard_config(root),
        root,
        filename=settings.filename,
        stub_dir=stub_dir,
    )
