"""Tests for guardfile.stubs -- bundled stub lookup."""

from __future__ import annotations

import pathlib

import pytest

import guardfile.errors
import guardfile.stubs

BUNDLED = [
    "coffeescript",
    "concat-css",
    "concat-js",
    "less",
    "livereload",
    "phpunit",
    "refresher",
    "sass",
    "uglify",
]


class TestStubFilename:
    def test_naming_convention(self) -> None:
        assert guardfile.stubs.stub_filename("sass") == "guard-sass-stub.txt"
        assert guardfile.stubs.stub_filename("concat-js") == "guard-concat-js-stub.txt"


class TestGetPluginStub:
    @pytest.mark.parametrize("plugin", BUNDLED)
    def test_bundled_stub_is_not_empty(self, plugin: str) -> None:
        stub = guardfile.stubs.get_plugin_stub(plugin)
        assert stub.strip()
        assert f"guard :{plugin.split('-')[0]}" in stub

    def test_unknown_plugin_raises(self) -> None:
        with pytest.raises(guardfile.errors.StubNotFoundError, match="not recognized"):
            guardfile.stubs.get_plugin_stub("jasmine")

    def test_error_is_a_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            guardfile.stubs.get_plugin_stub("jasmine")

    def test_error_carries_plugin(self) -> None:
        with pytest.raises(guardfile.errors.StubNotFoundError) as excinfo:
            guardfile.stubs.get_plugin_stub("jasmine")
        assert excinfo.value.plugin == "jasmine"

    @pytest.mark.parametrize("plugin", ["", "../sass", "concat/js", ".."])
    def test_malformed_identifiers_are_unknown(self, plugin: str) -> None:
        with pytest.raises(guardfile.errors.StubNotFoundError):
            guardfile.stubs.get_plugin_stub(plugin)

    def test_stubs_have_no_trailing_newline(self) -> None:
        assert not guardfile.stubs.get_plugin_stub("sass").endswith("\n")


class TestStubDirOverride:
    def test_project_stub_shadows_bundled(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "guard-sass-stub.txt").write_text("guard :sass{{options}}")
        assert guardfile.stubs.get_plugin_stub("sass", tmp_path) == "guard :sass{{options}}"

    def test_falls_back_to_bundled(self, tmp_path: pathlib.Path) -> None:
        stub = guardfile.stubs.get_plugin_stub("less", tmp_path)
        assert stub.startswith("guard :less")

    def test_project_only_plugin(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "guard-rspec-stub.txt").write_text("guard :rspec")
        assert guardfile.stubs.get_plugin_stub("rspec", tmp_path) == "guard :rspec"

    def test_missing_dir_is_ignored(self, tmp_path: pathlib.Path) -> None:
        stub = guardfile.stubs.get_plugin_stub("sass", tmp_path / "nope")
        assert stub.startswith("guard :sass")

    def test_project_stub_read_as_utf8(self, tmp_path: pathlib.Path) -> None:
        text = "# Übersetzung\nguard :i18n"
        (tmp_path / "guard-i18n-stub.txt").write_bytes(text.encode("utf-8"))
        assert guardfile.stubs.get_plugin_stub("i18n", tmp_path) == text


class TestAvailablePlugins:
    def test_lists_bundled(self) -> None:
        assert guardfile.stubs.available_plugins() == BUNDLED

    def test_includes_project_stubs(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "guard-rspec-stub.txt").write_text("guard :rspec")
        (tmp_path / "notes.txt").write_text("not a stub")
        plugins = guardfile.stubs.available_plugins(tmp_path)
        assert "rspec" in plugins
        assert "notes" not in plugins
        assert plugins == sorted(plugins)
