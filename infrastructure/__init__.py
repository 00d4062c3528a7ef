"""
Infrastructure Layer - External system integrations.

This layer contains implementations of interfaces defined in the interfaces/ layer.
Each subdirectory groups implementations by external dependency.

Structure:
- assets/   - Platform binaries manifest and provisioning
- ffmpeg/   - Audio normalization
- whisper/  - Whisper.cpp engine and model cache
- http/     - HTTP client implementations
"""

from .assets import AssetProvisioner, get_asset_provisioner
from .ffmpeg import FFmpegAudioNormalizer, get_audio_normalizer
from .http import HttpFileDownloader, get_file_downloader
from .whisper import ModelCache, WhisperRunner, get_model_cache, get_whisper_runner

__all__ = [
    # Binaries
    "AssetProvisioner",
    "get_asset_provisioner",
    # Audio normalization
    "FFmpegAudioNormalizer",
    "get_audio_normalizer",
    # HTTP download
    "HttpFileDownloader",
    "get_file_downloader",
    # Whisper
    "ModelCache",
    "WhisperRunner",
    "get_model_cache",
    "get_whisper_runner",
]
