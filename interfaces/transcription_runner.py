"""
Transcription Runner Interface - drives the speech-to-text engine.
"""

from abc import ABC, abstractmethod

from models.schemas import TranscriptionConfig, TranscriptionResult


class ITranscriptionRunner(ABC):
    """
    Abstract interface for engine invocation.

    Implementations:
    - infrastructure.whisper.runner.WhisperRunner
    """

    @abstractmethod
    async def run(
        self,
        audio_path: str,
        model_path: str,
        language: str,
        config: TranscriptionConfig,
    ) -> TranscriptionResult:
        """
        Run the engine on normalized audio and collect requested outputs.

        Args:
            audio_path: Canonical WAV produced by the normalizer
            model_path: Path to the model file
            language: Spoken language ('auto' for auto-detect)
            config: Engine configuration

        Returns:
            TranscriptionResult (never raises for expected failures)
        """
        pass
