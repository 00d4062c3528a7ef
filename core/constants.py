"""Constants for the audio-to-text pipeline."""

from enum import Enum


class Platform(str, Enum):
    LINUX = "linux"
    WIN32 = "win32"
    DARWIN = "darwin"

    @property
    def is_posix(self) -> bool:
        return self is not Platform.WIN32


class Architecture(str, Enum):
    X64 = "x64"
    ARM64 = "arm64"


class Component(str, Enum):
    """Executables the provisioner knows how to install."""

    WHISPER = "whisper"
    FFMPEG = "ffmpeg"
    FFPROBE = "ffprobe"


class OutputFormat(str, Enum):
    JSON = "json"
    TXT = "txt"
    CSV = "csv"


class AssetStatus(str, Enum):
    EXISTS = "exists"
    DOWNLOADED = "downloaded"


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    INVALID_MODEL = "InvalidModel"
    UNSUPPORTED_PLATFORM = "UnsupportedPlatform"
    NOT_FOUND = "NotFound"
    TRANSPORT_FAILURE = "TransportFailure"
    SUBPROCESS_FAILURE = "SubprocessFailure"
    ARTIFACT_MISSING = "ArtifactMissing"


class PipelineStage(str, Enum):
    START = "start"
    MODEL_READY = "model-ready"
    AUDIO_NORMALIZED = "audio-normalized"
    ENGINE_INVOKED = "engine-invoked"
    OUTPUTS_COLLECTED = "outputs-collected"
    DONE = "done"
    FAILED = "failed"


# Platform aliases reported by sys.platform / platform.machine()
PLATFORM_ALIASES = {
    "linux": Platform.LINUX,
    "android": Platform.LINUX,
    "win32": Platform.WIN32,
    "cygwin": Platform.WIN32,
    "darwin": Platform.DARWIN,
}

ARCHITECTURE_ALIASES = {
    "x86_64": Architecture.X64,
    "amd64": Architecture.X64,
    "x64": Architecture.X64,
    "aarch64": Architecture.ARM64,
    "arm64": Architecture.ARM64,
    "armv7l": Architecture.ARM64,
    "armv8l": Architecture.ARM64,
    "arm": Architecture.ARM64,
}

# Dynamic linker search path variable per POSIX platform
LIBRARY_PATH_VARIABLES = {
    Platform.LINUX: "LD_LIBRARY_PATH",
    Platform.DARWIN: "DYLD_LIBRARY_PATH",
}


# =============================================================================
# Audio Constants
# =============================================================================

CANONICAL_EXTENSION = ".wav"
DEFAULT_SAMPLE_RATE = 16000

# Suffixes appended to the input path for intermediate/normalized files
TEMP_WAV_SUFFIX = ".TEMP.wav"
OUTPUT_WAV_SUFFIX = ".OUTPUT.wav"


# =============================================================================
# HTTP Client Constants
# =============================================================================

# Timeout configuration for asset downloads (in seconds)
HTTP_CONNECT_TIMEOUT = 10.0  # Time to establish connection
HTTP_READ_TIMEOUT = 120.0  # Time between received chunks (large model files)
HTTP_WRITE_TIMEOUT = 10.0  # Time to write request
HTTP_POOL_TIMEOUT = 5.0  # Time to acquire connection from pool

HTTP_MAX_KEEPALIVE_CONNECTIONS = 10
HTTP_MAX_CONNECTIONS = 20
HTTP_KEEPALIVE_EXPIRY = 30.0

DOWNLOAD_CHUNK_SIZE = 1024 * 1024
PARTIAL_DOWNLOAD_SUFFIX = ".part"


# =============================================================================
# Whisper Model Configurations
# =============================================================================

ALL_MODELS = "all"

WHISPER_MODELS = (
    "tiny.en",
    "tiny",
    "base.en",
    "base",
    "small.en",
    "small",
    "medium.en",
    "medium",
    "large-v1",
    "large",
    "small.en-tdrz",
)

# Approximate disk size per model (MB)
WHISPER_MODEL_SIZES_MB = {
    "tiny.en": 75,
    "tiny": 75,
    "base.en": 142,
    "base": 142,
    "small.en": 466,
    "small": 466,
    "medium.en": 1500,
    "medium": 1500,
    "large-v1": 2900,
    "large": 2900,
    "small.en-tdrz": 465,
}

MODEL_SOURCE_URL = "https://huggingface.co/ggerganov/whisper.cpp"
DIARIZE_MODEL_SOURCE_URL = "https://huggingface.co/akashmjn/tinydiarize-whisper.cpp"
MODEL_URL_PREFIX = "resolve/main/ggml"
DIARIZE_MODEL_MARKER = "tdrz"
