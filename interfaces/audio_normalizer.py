"""
Audio Normalizer Interface - converts input media to the canonical container.
"""

from abc import ABC, abstractmethod

from core.constants import DEFAULT_SAMPLE_RATE
from models.schemas import NormalizeResult


class IAudioNormalizer(ABC):
    """
    Abstract interface for audio normalization.

    Implementations:
    - infrastructure.ffmpeg.normalizer.FFmpegAudioNormalizer
    """

    @abstractmethod
    async def normalize(
        self, input_path: str, target_sample_rate: int = DEFAULT_SAMPLE_RATE
    ) -> NormalizeResult:
        """
        Produce a canonical WAV file at ``target_sample_rate``.

        Args:
            input_path: Path to any audio/video file
            target_sample_rate: Desired sample rate in Hz

        Returns:
            NormalizeResult whose ``output`` is handed to the engine
        """
        pass

    @abstractmethod
    async def has_audio_stream(self, input_path: str) -> bool:
        """
        Check whether a media file contains at least one audio stream.
        """
        pass
