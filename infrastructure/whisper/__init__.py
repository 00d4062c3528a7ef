"""
Whisper Infrastructure - Whisper.cpp integration implementations.

This module provides:
- WhisperRunner: whisper.cpp CLI wrapper (implements ITranscriptionRunner)
- ModelCache: ggml model downloader (implements IModelCache)
"""

from .model_cache import ModelCache, get_model_cache
from .runner import WhisperRunner, build_command, get_whisper_runner

__all__ = [
    # Engine
    "WhisperRunner",
    "build_command",
    "get_whisper_runner",
    # Models
    "ModelCache",
    "get_model_cache",
]
