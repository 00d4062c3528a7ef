"""
FFmpeg Infrastructure - audio normalization via ffmpeg/ffprobe.

This module provides:
- FFmpegAudioNormalizer: WAV conversion and resampling (implements IAudioNormalizer)
"""

from .normalizer import FFmpegAudioNormalizer, get_audio_normalizer

__all__ = [
    "FFmpegAudioNormalizer",
    "get_audio_normalizer",
]
