"""Configuration for the Guardfile engine itself."""

from __future__ import annotations

import dataclasses

import guardfile.config


@guardfile.config.configurable("guardfile")
@dataclasses.dataclass
class EngineConfig:
    """Where the Guardfile lives and where extra stubs come from."""

    # Name of the generated file, relative to the project root.
    filename: str = "Guardfile"

    # Directory searched for guard-<plugin>-stub.txt before the bundled
    # stubs. Relative paths resolve against the project root.
    stub_dir: str = ""

    # Root logger level for the CLI (DEBUG, INFO, WARNING, ERROR).
    log_level: str = "WARNING"
