"""Storage collaborator used to read and rewrite the Guardfile."""

from __future__ import annotations

import logging
import pathlib
from typing import Protocol

logger = logging.getLogger("guardfile.storage")


class Storage(Protocol):
    """Whole-file text storage."""

    def read(self, path: pathlib.Path) -> str: ...

    def write(self, path: pathlib.Path, text: str) -> None: ...


class LocalFilesystem:
    """:class:`Storage` backed by the local filesystem."""

    def read(self, path: pathlib.Path) -> str:
        return pathlib.Path(path).read_text(encoding="utf-8")

    def write(self, path: pathlib.Path, text: str) -> None:
        path = pathlib.Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %d chars to %s", len(text), path)
