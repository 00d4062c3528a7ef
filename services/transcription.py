"""
Transcription Pipeline - Business logic for audio transcription.

Composes the model cache, audio normalizer and engine runner through their
interfaces. Each request walks a linear state machine:

    start -> model-ready -> audio-normalized -> engine-invoked
          -> outputs-collected -> done

Any failure moves the request to ``failed`` and short-circuits, keeping the
failing component's message verbatim.
"""

import time
from pathlib import Path
from typing import Iterable, List, Optional

from core.config import get_settings
from core.constants import (
    Component,
    OUTPUT_WAV_SUFFIX,
    OutputFormat,
    PipelineStage,
    TEMP_WAV_SUFFIX,
)
from core.errors import UnsupportedPlatformError
from core.logger import logger
from core.messages import LogMessages
from interfaces.asset_provisioner import IAssetProvisioner
from interfaces.audio_normalizer import IAudioNormalizer
from interfaces.model_cache import IModelCache
from interfaces.transcription_runner import ITranscriptionRunner
from models.schemas import (
    PlatformTarget,
    ProvisionResult,
    TranscriptionConfig,
    TranscriptionResult,
)


class TranscriptionPipeline:
    """
    Stateless service that turns an audio file into engine outputs.

    Uses dependency injection through interfaces:
    - IModelCache: For model files
    - IAudioNormalizer: For WAV conversion
    - ITranscriptionRunner: For the engine process
    - IAssetProvisioner: For executables (ensure_assets only)
    """

    def __init__(
        self,
        model_cache: Optional[IModelCache] = None,
        normalizer: Optional[IAudioNormalizer] = None,
        runner: Optional[ITranscriptionRunner] = None,
        provisioner: Optional[IAssetProvisioner] = None,
        config: Optional[TranscriptionConfig] = None,
        target: Optional[PlatformTarget] = None,
    ):
        """
        If dependencies are not provided, defaults are used from infrastructure layer.
        """
        settings = get_settings()

        if model_cache is None:
            from infrastructure.whisper import get_model_cache

            model_cache = get_model_cache()
        if normalizer is None:
            from infrastructure.ffmpeg import get_audio_normalizer

            normalizer = get_audio_normalizer()
        if runner is None:
            from infrastructure.whisper import get_whisper_runner

            runner = get_whisper_runner()

        self.model_cache = model_cache
        self.normalizer = normalizer
        self.runner = runner
        self._provisioner = provisioner
        self._target = target
        self.config = config or TranscriptionConfig.from_settings(settings)
        self.default_model = settings.whisper_model
        self.default_language = settings.whisper_language
        self.target_sample_rate = settings.target_sample_rate

        logger.info(
            f"TranscriptionPipeline initialized "
            f"(models={self.model_cache.__class__.__name__}, "
            f"normalizer={self.normalizer.__class__.__name__}, "
            f"runner={self.runner.__class__.__name__})"
        )

    @property
    def provisioner(self) -> IAssetProvisioner:
        if self._provisioner is None:
            from infrastructure.assets import get_asset_provisioner

            self._provisioner = get_asset_provisioner()
        return self._provisioner

    @property
    def target(self) -> PlatformTarget:
        if self._target is None:
            from infrastructure.assets import detect_platform_target

            self._target = detect_platform_target()
        return self._target

    async def ensure_assets(
        self, components: Optional[Iterable[str]] = None
    ) -> ProvisionResult:
        """Install executables for the current platform (all components by default)."""
        if components is None:
            components = [c.value for c in Component]
        try:
            target = self.target
        except UnsupportedPlatformError as e:
            logger.error(e.message)
            return ProvisionResult.fatal(e.message, e.kind)
        return await self.provisioner.provision(target, list(components))

    async def check_audio_presence(self, input_path: str) -> bool:
        return await self.normalizer.has_audio_stream(input_path)

    @staticmethod
    def _advance(current: PipelineStage, nxt: PipelineStage) -> PipelineStage:
        logger.debug(
            LogMessages.STAGE_TRANSITION.format(previous=current.value, current=nxt.value)
        )
        return nxt

    @staticmethod
    def _fail(
        stage: PipelineStage, result: TranscriptionResult
    ) -> TranscriptionResult:
        logger.error(LogMessages.STAGE_FAILED.format(stage=stage.value, message=result.message))
        return result.model_copy(update={"stage": PipelineStage.FAILED})

    async def transcribe(
        self,
        input_file: str,
        model_name: Optional[str] = None,
        language: Optional[str] = None,
    ) -> TranscriptionResult:
        """
        Args:
            input_file: Any media file ffmpeg can read
            model_name: Whisper model (default: WHISPER_MODEL)
            language: Spoken language, 'auto' to detect (default: WHISPER_LANGUAGE)
        """
        model_name = model_name or self.default_model
        language = language or self.default_language
        start_time = time.time()
        stage = PipelineStage.START

        logger.info(
            f"Starting transcription: file={input_file}, model={model_name}, language={language}"
        )

        model = await self.model_cache.ensure_model(model_name)
        if not model.success or not model.model_file:
            return self._fail(
                stage,
                TranscriptionResult.failure(model.message, model.error_kind),
            )
        stage = self._advance(stage, PipelineStage.MODEL_READY)

        audio = await self.normalizer.normalize(input_file, self.target_sample_rate)
        if not audio.success or not audio.output:
            return self._fail(
                stage,
                TranscriptionResult.failure(audio.message, audio.error_kind),
            )
        stage = self._advance(stage, PipelineStage.AUDIO_NORMALIZED)

        stage = self._advance(stage, PipelineStage.ENGINE_INVOKED)
        result = await self.runner.run(audio.output, model.model_file, language, self.config)
        if not result.success:
            return self._fail(stage, result)

        stage = self._advance(stage, PipelineStage.OUTPUTS_COLLECTED)
        stage = self._advance(stage, PipelineStage.DONE)

        elapsed_time = time.time() - start_time
        logger.info(
            f"Transcription successful: outputs={len(result.outputs)}, time={elapsed_time:.2f}s"
        )
        return result.model_copy(update={"stage": stage})

    @staticmethod
    def derived_files(input_file: str) -> List[Path]:
        """Files the normalizer and engine may write beside ``input_file``."""
        paths: List[Path] = []
        for wav in (
            input_file,
            f"{input_file}{TEMP_WAV_SUFFIX}",
            f"{input_file}{OUTPUT_WAV_SUFFIX}",
        ):
            if wav != input_file:
                paths.append(Path(wav))
            paths.extend(Path(f"{wav}.{fmt.value}") for fmt in OutputFormat)
        return paths


# Global singleton instance
_transcription_pipeline: Optional[TranscriptionPipeline] = None


def get_transcription_pipeline() -> TranscriptionPipeline:
    """Get or create global TranscriptionPipeline instance (singleton)."""
    global _transcription_pipeline

    if _transcription_pipeline is None:
        logger.info("Creating TranscriptionPipeline instance...")
        _transcription_pipeline = TranscriptionPipeline()

    return _transcription_pipeline
