"""
Interface Layer - Abstract interfaces for dependency injection.

This layer defines contracts that infrastructure implementations must fulfill.
Services depend on these interfaces, not concrete implementations.
"""

from .asset_provisioner import IAssetProvisioner
from .audio_normalizer import IAudioNormalizer
from .environment_configurator import EnvironmentConfigurator
from .file_downloader import IFileDownloader
from .model_cache import IModelCache
from .transcription_runner import ITranscriptionRunner

__all__ = [
    "IAssetProvisioner",
    "IAudioNormalizer",
    "EnvironmentConfigurator",
    "IFileDownloader",
    "IModelCache",
    "ITranscriptionRunner",
]
