"""
Tests for AssetProvisioner.

Network is replaced by FakeDownloader and linker path changes are recorded
by RecordingEnvironment.
"""

import os
import stat

import pytest

from core.constants import AssetStatus, Component, ErrorKind, Platform
from infrastructure.assets.provisioner import AssetProvisioner
from tests.conftest import BASE_URL


@pytest.fixture
def provisioner(tmp_path, manifest, downloader, environment):
    return AssetProvisioner(
        manifest=manifest,
        install_dir=tmp_path / "bin",
        downloader=downloader,
        environment=environment,
    )


class TestProvisionValidation:
    @pytest.mark.asyncio
    async def test_empty_components_is_invalid_input(self, provisioner, linux_x64, downloader):
        result = await provisioner.provision(linux_x64, [])

        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert downloader.requests == []

    @pytest.mark.asyncio
    async def test_unknown_component_is_not_found(self, provisioner, linux_x64, downloader):
        result = await provisioner.provision(linux_x64, ["whisper", "sox"])

        assert not result.success
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert "sox" in result.error
        assert downloader.requests == []

    @pytest.mark.asyncio
    async def test_component_missing_for_target(self, provisioner, linux_arm64, downloader, tmp_path):
        result = await provisioner.provision(linux_arm64, ["ffmpeg"])

        assert not result.success
        assert result.error_kind == ErrorKind.UNSUPPORTED_PLATFORM
        assert downloader.requests == []
        assert not (tmp_path / "bin").exists()


class TestProvisionInstall:
    @pytest.mark.asyncio
    async def test_installs_primaries_and_dependencies(self, provisioner, linux_x64, downloader, tmp_path):
        result = await provisioner.provision(linux_x64, ["whisper", "ffmpeg"])

        assert result.success
        assert [a.filename for a in result.files.success] == ["whisper", "ffmpeg"]
        assert [a.filename for a in result.dependencies.success] == [
            "libwhisper.so.1",
            "libggml.so",
        ]
        assert all(a.status == AssetStatus.DOWNLOADED for a in result.installed)
        assert f"{BASE_URL}/linux/whisper" in downloader.requests
        assert (tmp_path / "bin" / "linux" / "libggml.so").exists()

    @pytest.mark.asyncio
    async def test_second_call_makes_no_requests(self, provisioner, linux_x64, downloader):
        first = await provisioner.provision(linux_x64, ["whisper"])
        count = len(downloader.requests)

        second = await provisioner.provision(linux_x64, ["whisper"])

        assert len(downloader.requests) == count
        assert second.success
        assert all(a.status == AssetStatus.EXISTS for a in second.installed)
        assert [a.path for a in second.installed] == [a.path for a in first.installed]

    @pytest.mark.asyncio
    async def test_existing_file_is_not_downloaded(self, provisioner, linux_x64, downloader, tmp_path):
        existing = tmp_path / "bin" / "linux" / "ffmpeg"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"local build")

        result = await provisioner.provision(linux_x64, ["ffmpeg"])

        assert result.success
        assert downloader.requests == []
        assert existing.read_bytes() == b"local build"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    @pytest.mark.asyncio
    async def test_downloaded_executables_are_made_executable(self, provisioner, linux_x64, tmp_path):
        await provisioner.provision(linux_x64, ["ffprobe"])

        mode = stat.S_IMODE((tmp_path / "bin" / "linux" / "ffprobe").stat().st_mode)
        assert mode == 0o755

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    @pytest.mark.asyncio
    async def test_existing_executables_are_made_executable(
        self, provisioner, linux_x64, downloader, tmp_path
    ):
        existing = tmp_path / "bin" / "linux" / "ffprobe"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"copied without mode")
        existing.chmod(0o644)

        await provisioner.provision(linux_x64, ["ffprobe"])

        assert downloader.requests == []
        assert stat.S_IMODE(existing.stat().st_mode) == 0o755

    @pytest.mark.asyncio
    async def test_library_dirs_exposed(self, provisioner, linux_arm64, environment, tmp_path):
        await provisioner.provision(linux_arm64, ["whisper"])

        assert environment.directories == [
            tmp_path / "bin" / "linux",
            tmp_path / "bin" / "linux" / "aarch64",
        ]

    @pytest.mark.asyncio
    async def test_platform_dir_exposed_without_dependencies(
        self, provisioner, linux_x64, environment, tmp_path
    ):
        await provisioner.provision(linux_x64, ["ffmpeg"])

        assert environment.directories == [tmp_path / "bin" / "linux"]


class TestProvisionFailures:
    @pytest.mark.asyncio
    async def test_failed_dependency_is_recorded(self, provisioner, linux_x64, downloader):
        downloader.fail(f"{BASE_URL}/linux/libggml.so")

        result = await provisioner.provision(linux_x64, ["whisper"])

        assert not result.success
        assert result.error is None
        assert [a.filename for a in result.files.success] == ["whisper"]
        assert [f.filename for f in result.dependencies.failed] == ["libggml.so"]
        assert result.dependencies.failed[0].error_kind == ErrorKind.TRANSPORT_FAILURE

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_files(self, provisioner, linux_x64, downloader, tmp_path):
        downloader.fail(f"{BASE_URL}/linux/ffmpeg")

        result = await provisioner.provision(linux_x64, ["ffmpeg", "ffprobe"])

        assert not result.success
        assert [f.filename for f in result.files.failed] == ["ffmpeg"]
        assert (tmp_path / "bin" / "linux" / "ffprobe").exists()
        assert not (tmp_path / "bin" / "linux" / "ffmpeg").exists()

    @pytest.mark.asyncio
    async def test_retry_after_failure_only_fetches_missing(self, provisioner, linux_x64, downloader):
        downloader.fail(f"{BASE_URL}/linux/ffmpeg")
        await provisioner.provision(linux_x64, ["ffmpeg", "ffprobe"])

        downloader.failing.clear()
        downloader.requests.clear()
        result = await provisioner.provision(linux_x64, ["ffmpeg", "ffprobe"])

        assert result.success
        assert downloader.requests == [f"{BASE_URL}/linux/ffmpeg"]


class TestExecutablePath:
    @pytest.mark.asyncio
    async def test_executable_path(self, provisioner, linux_x64, win32_x64):
        assert provisioner.executable_path(linux_x64, Component.WHISPER) is None

        await provisioner.provision(linux_x64, ["whisper"])

        path = provisioner.executable_path(linux_x64, Component.WHISPER)
        assert path is not None and path.name == "whisper"
        assert provisioner.executable_path(win32_x64, Component.WHISPER) is None

    @pytest.mark.asyncio
    async def test_win32_target_skips_chmod_and_linker(self, provisioner, win32_x64, environment, tmp_path):
        result = await provisioner.provision(win32_x64, ["whisper"])

        assert result.success
        assert (tmp_path / "bin" / Platform.WIN32.value / "whisper.dll").exists()
        assert environment.directories == []
