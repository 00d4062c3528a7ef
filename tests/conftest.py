"""
Shared fixtures.

Subprocesses are replaced by FakeProcessRunner (injected wherever a
``process_runner`` is accepted) and network downloads by FakeDownloader,
so no test spawns ffmpeg/whisper or touches the network.
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.constants import Architecture, Platform  # noqa: E402
from core.errors import TransportError  # noqa: E402
from infrastructure.process import ProcessResult  # noqa: E402
from interfaces.environment_configurator import EnvironmentConfigurator  # noqa: E402
from interfaces.file_downloader import IFileDownloader  # noqa: E402
from models.schemas import PlatformTarget  # noqa: E402


class FakeProcessRunner:
    """
    Records every command and answers with a scripted ProcessResult.

    Handlers are matched on the program basename (e.g. "ffmpeg") and may
    create files to simulate the child's side effects.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.timeouts: List[Optional[float]] = []
        self.handlers: Dict[str, Callable[[List[str]], ProcessResult]] = {}

    def on(self, program: str, handler: Callable[[List[str]], ProcessResult]) -> None:
        self.handlers[program] = handler

    def programs(self) -> List[str]:
        return [Path(call[0]).name for call in self.calls]

    async def __call__(self, command, timeout=None, env=None) -> ProcessResult:
        command = [str(part) for part in command]
        self.calls.append(command)
        self.timeouts.append(timeout)
        handler = self.handlers.get(Path(command[0]).name)
        if handler is None:
            return ProcessResult(command=command, returncode=0, stdout="", stderr="")
        return handler(command)


def completed(command, returncode=0, stdout="", stderr="") -> ProcessResult:
    return ProcessResult(
        command=list(command), returncode=returncode, stdout=stdout, stderr=stderr
    )


class FakeDownloader(IFileDownloader):
    """Writes ``payload`` to the destination; URLs in ``failing`` raise."""

    def __init__(self, payload: bytes = b"binary"):
        self.payload = payload
        self.requests: List[str] = []
        self.failing: Dict[str, str] = {}

    def fail(self, url: str, message: str = "HTTP 404") -> None:
        self.failing[url] = message

    async def download(self, url: str, destination: Path) -> float:
        self.requests.append(url)
        if url in self.failing:
            raise TransportError(f"Failed to download {url}: {self.failing[url]}", url=url)
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(self.payload)
        return len(self.payload) / (1024 * 1024)


class RecordingEnvironment(EnvironmentConfigurator):
    def __init__(self):
        self.directories: List[Path] = []

    def expose_library_dir(self, directory: Path) -> bool:
        if Path(directory) in self.directories:
            return False
        self.directories.append(Path(directory))
        return True


MANIFEST_DATA = {
    "win32": [
        {
            "component": "whisper",
            "filename": "whisper.exe",
            "url": "{base_url}/win32/whisper.exe",
            "path": "win32/whisper.exe",
            "architecture": "x64",
            "dependencies": [
                {
                    "filename": "whisper.dll",
                    "url": "{base_url}/win32/whisper.dll",
                    "path": "win32/whisper.dll",
                }
            ],
        },
        {
            "component": "ffmpeg",
            "filename": "ffmpeg.exe",
            "url": "{base_url}/win32/ffmpeg.exe",
            "path": "win32/ffmpeg.exe",
            "architecture": "x64",
        },
    ],
    "linux": [
        {
            "component": "whisper",
            "filename": "whisper",
            "url": "{base_url}/linux/whisper",
            "path": "linux/whisper",
            "architecture": "x64",
            "dependencies": [
                {
                    "filename": "libwhisper.so.1",
                    "url": "{base_url}/linux/libwhisper.so.1",
                    "path": "linux/libwhisper.so.1",
                },
                {
                    "filename": "libggml.so",
                    "url": "{base_url}/linux/libggml.so",
                    "path": "linux/libggml.so",
                },
            ],
        },
        {
            "component": "ffmpeg",
            "filename": "ffmpeg",
            "url": "{base_url}/linux/ffmpeg",
            "path": "linux/ffmpeg",
            "architecture": "x64",
        },
        {
            "component": "ffprobe",
            "filename": "ffprobe",
            "url": "{base_url}/linux/ffprobe",
            "path": "linux/ffprobe",
            "architecture": "x64",
        },
        {
            "component": "whisper",
            "filename": "whisper-aarch64",
            "url": "{base_url}/linux/whisper-aarch64",
            "path": "linux/whisper-aarch64",
            "architecture": "arm64",
            "dependencies": [
                {
                    "filename": "libwhisper.so.1",
                    "url": "{base_url}/linux/aarch64/libwhisper.so.1",
                    "path": "linux/aarch64/libwhisper.so.1",
                }
            ],
        },
    ],
}

BASE_URL = "https://assets.example.com/bin"


@pytest.fixture
def process_runner():
    return FakeProcessRunner()


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def environment():
    return RecordingEnvironment()


@pytest.fixture
def manifest():
    from infrastructure.assets.manifest import AssetManifest

    return AssetManifest.from_dict(MANIFEST_DATA, base_url=BASE_URL)


@pytest.fixture
def linux_x64():
    return PlatformTarget(platform=Platform.LINUX, architecture=Architecture.X64)


@pytest.fixture
def linux_arm64():
    return PlatformTarget(platform=Platform.LINUX, architecture=Architecture.ARM64)


@pytest.fixture
def win32_x64():
    return PlatformTarget(platform=Platform.WIN32, architecture=Architecture.X64)
