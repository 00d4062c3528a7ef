"""
Models Layer - Data models and Pydantic schemas.

This layer contains the values exchanged between pipeline components:
- Platform/asset descriptors and provisioning results
- Model cache results
- Audio normalization jobs
- Transcription configuration and results
"""

from .schemas import (
    PlatformTarget,
    AssetDescriptor,
    InstalledAsset,
    FailedAsset,
    AssetBatch,
    ProvisionResult,
    ModelHandle,
    ModelResult,
    AudioJob,
    NormalizeResult,
    TranscriptionConfig,
    TranscriptionOutput,
    TranscriptionResult,
    parse_output_formats,
)

__all__ = [
    # Assets
    "PlatformTarget",
    "AssetDescriptor",
    "InstalledAsset",
    "FailedAsset",
    "AssetBatch",
    "ProvisionResult",
    # Models
    "ModelHandle",
    "ModelResult",
    # Audio
    "AudioJob",
    "NormalizeResult",
    # Transcription
    "TranscriptionConfig",
    "TranscriptionOutput",
    "TranscriptionResult",
    "parse_output_formats",
]
