"""
Tests for linker search path exposure.
"""

import os

import pytest

from core.constants import Architecture, Platform
from infrastructure.assets.environment import (
    LibraryPathConfigurator,
    NoopEnvironmentConfigurator,
    get_environment_configurator,
)
from models.schemas import PlatformTarget


@pytest.fixture
def lib_dir(tmp_path):
    path = tmp_path / "bin" / "linux"
    path.mkdir(parents=True)
    return path


class TestProcessEnvironment:
    def test_prepends_to_existing_value(self, lib_dir):
        environ = {"LD_LIBRARY_PATH": "/usr/local/lib"}
        configurator = LibraryPathConfigurator(environ=environ)

        assert configurator.expose_library_dir(lib_dir) is True
        assert environ["LD_LIBRARY_PATH"] == os.pathsep.join(
            [str(lib_dir.resolve()), "/usr/local/lib"]
        )

    def test_sets_unset_variable(self, lib_dir):
        environ = {}
        configurator = LibraryPathConfigurator(environ=environ)

        configurator.expose_library_dir(lib_dir)

        assert environ["LD_LIBRARY_PATH"] == str(lib_dir.resolve())

    def test_idempotent(self, lib_dir):
        environ = {}
        configurator = LibraryPathConfigurator(environ=environ)

        configurator.expose_library_dir(lib_dir)
        assert configurator.expose_library_dir(lib_dir) is False
        assert environ["LD_LIBRARY_PATH"] == str(lib_dir.resolve())

    def test_only_touches_its_variable(self, lib_dir):
        environ = {"PATH": "/usr/bin", "HOME": "/root"}
        configurator = LibraryPathConfigurator(variable="DYLD_LIBRARY_PATH", environ=environ)

        configurator.expose_library_dir(lib_dir)

        assert environ["PATH"] == "/usr/bin"
        assert environ["HOME"] == "/root"
        assert "LD_LIBRARY_PATH" not in environ


class TestShellProfile:
    def test_appends_export_line(self, lib_dir, tmp_path):
        profile = tmp_path / ".bashrc"
        profile.write_text("alias ll='ls -l'")
        configurator = LibraryPathConfigurator(shell_profile=profile, environ={})

        configurator.expose_library_dir(lib_dir)

        lines = profile.read_text().splitlines()
        assert lines[0] == "alias ll='ls -l'"
        assert lines[1] == f'export LD_LIBRARY_PATH="{lib_dir.resolve()}:$LD_LIBRARY_PATH"'

    def test_updates_existing_export_line(self, lib_dir, tmp_path):
        profile = tmp_path / ".bashrc"
        profile.write_text('export LD_LIBRARY_PATH="/opt/lib"\necho hi\n')
        configurator = LibraryPathConfigurator(shell_profile=profile, environ={})

        configurator.expose_library_dir(lib_dir)

        content = profile.read_text()
        assert content.count("export LD_LIBRARY_PATH") == 1
        assert f'export LD_LIBRARY_PATH="{lib_dir.resolve()}{os.pathsep}/opt/lib"' in content
        assert content.endswith("echo hi\n")

    def test_profile_not_rewritten_twice(self, lib_dir, tmp_path):
        profile = tmp_path / ".bashrc"
        environ = {}
        LibraryPathConfigurator(shell_profile=profile, environ=environ).expose_library_dir(lib_dir)
        first = profile.read_text()

        # Fresh configurator, as after a restart
        changed = LibraryPathConfigurator(shell_profile=profile, environ={}).expose_library_dir(
            lib_dir
        )

        assert profile.read_text() == first
        assert changed is True  # only the process environment changed

    def test_unwritable_profile_only_warns(self, lib_dir, tmp_path):
        profile = tmp_path / "profile-dir"
        profile.mkdir()  # a directory cannot be read as text
        environ = {}
        configurator = LibraryPathConfigurator(shell_profile=profile, environ=environ)

        assert configurator.expose_library_dir(lib_dir) is True
        assert environ["LD_LIBRARY_PATH"] == str(lib_dir.resolve())


class TestFactory:
    def test_win32_gets_noop(self):
        target = PlatformTarget(platform=Platform.WIN32, architecture=Architecture.X64)

        configurator = get_environment_configurator(target)

        assert isinstance(configurator, NoopEnvironmentConfigurator)
        assert configurator.expose_library_dir("C:/bin") is False

    def test_linux_uses_ld_library_path(self):
        target = PlatformTarget(platform=Platform.LINUX, architecture=Architecture.ARM64)

        configurator = get_environment_configurator(target)

        assert isinstance(configurator, LibraryPathConfigurator)
        assert configurator.variable == "LD_LIBRARY_PATH"

    def test_darwin_uses_dyld_library_path(self):
        target = PlatformTarget(platform=Platform.DARWIN, architecture=Architecture.ARM64)

        assert get_environment_configurator(target).variable == "DYLD_LIBRARY_PATH"
