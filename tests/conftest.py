"""Shared test fixtures for guardfile tests."""

from __future__ import annotations

import pathlib

import pytest

import guardfile.config
import guardfile.engine
import guardfile.storage


class MemoryStorage:
    """In-memory Storage that records every write."""

    def __init__(self, files: dict[pathlib.Path, str] | None = None) -> None:
        self.files: dict[pathlib.Path, str] = dict(files or {})
        self.writes: list[pathlib.Path] = []

    def read(self, path: pathlib.Path) -> str:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def write(self, path: pathlib.Path, text: str) -> None:
        self.files[path] = text
        self.writes.append(path)


@pytest.fixture
def memory_storage():
    """The in-memory Storage class, for injecting into a Guardfile."""
    return MemoryStorage


@pytest.fixture(autouse=True)
def isolated_global_config(
    tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
) -> pathlib.Path:
    """Keep tests away from the real ~/.config/guardfile/config.toml."""
    global_toml = tmp_path / "_global" / "config.toml"
    monkeypatch.setattr(guardfile.config, "_global_path", lambda: global_toml)
    return global_toml


@pytest.fixture
def guard_config():
    """Factory for a DictConfig layered over the built-in defaults."""

    def _create(overrides: dict | None = None) -> guardfile.config.DictConfig:
        data = guardfile.config._deep_merge(
            guardfile.config.GUARD_DEFAULTS, overrides or {}
        )
        return guardfile.config.DictConfig(data)

    return _create


@pytest.fixture
def make_guardfile(tmp_path: pathlib.Path, guard_config):
    """Factory for a Guardfile in tmp_path, optionally pre-filled."""

    def _create(
        contents: str | None = None, overrides: dict | None = None
    ) -> guardfile.engine.Guardfile:
        gf = guardfile.engine.Guardfile(
            guardfile.storage.LocalFilesystem(),
            guard_config(overrides),
            tmp_path,
        )
        if contents is not None:
            gf.path.write_text(contents)
        return gf

    return _create


@pytest.fixture
def local_config(tmp_path: pathlib.Path):
    """Factory for writing the project-local .guardfile/config.toml."""

    def _create(text: str) -> pathlib.Path:
        path = tmp_path / ".guardfile" / "config.toml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return _create
