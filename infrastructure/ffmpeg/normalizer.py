"""
FFmpeg Audio Normalizer - converts any media file to a WAV at the
sample rate the engine expects.

Implements IAudioNormalizer interface for dependency injection.

Derived files are written beside the input:
- ``<input>.TEMP.wav``: container conversion of a non-WAV input
- ``<input>.OUTPUT.wav``: resampled result
The temporary file is always removed unless it is itself the result.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from core.constants import (
    CANONICAL_EXTENSION,
    Component,
    DEFAULT_SAMPLE_RATE,
    ErrorKind,
    OUTPUT_WAV_SUFFIX,
    TEMP_WAV_SUFFIX,
)
from core.errors import NotFoundError, STTError, SubprocessError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from infrastructure.process import ProcessRunner, run_process
from interfaces.audio_normalizer import IAudioNormalizer
from models.schemas import AudioJob, NormalizeResult


def transcode_command(ffmpeg: str, input_path: str, output_path: str) -> list:
    return [ffmpeg, "-y", "-i", input_path, output_path]


def resample_command(ffmpeg: str, input_path: str, sample_rate: int, output_path: str) -> list:
    return [ffmpeg, "-y", "-i", input_path, "-ar", str(sample_rate), output_path]


def probe_rate_command(ffprobe: str, path: str) -> list:
    return [
        ffprobe,
        "-v",
        "error",
        "-show_entries",
        "stream=sample_rate",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        path,
    ]


def probe_audio_command(ffprobe: str, path: str) -> list:
    return [
        ffprobe,
        "-v",
        "error",
        "-select_streams",
        "a:0",
        "-show_entries",
        "stream=codec_type",
        "-of",
        "default=nokey=1:noprint_wrappers=1",
        path,
    ]


class FFmpegAudioNormalizer(IAudioNormalizer):
    """Drives ffmpeg/ffprobe through the async process helper."""

    def __init__(
        self,
        ffmpeg_path: Optional[Union[str, Path]] = None,
        ffprobe_path: Optional[Union[str, Path]] = None,
        process_runner: ProcessRunner = run_process,
        timeout: Optional[float] = None,
    ):
        self._ffmpeg_path = Path(ffmpeg_path) if ffmpeg_path else None
        self._ffprobe_path = Path(ffprobe_path) if ffprobe_path else None
        self._run_process = process_runner
        self.timeout = timeout

    def _resolve_tools(self) -> Tuple[str, str]:
        """
        Raises:
            NotFoundError: If either executable is missing
        """
        ffmpeg, ffprobe = self._ffmpeg_path, self._ffprobe_path

        if ffmpeg is None or ffprobe is None:
            from infrastructure.assets import detect_platform_target, get_asset_provisioner

            provisioner = get_asset_provisioner()
            target = detect_platform_target()
            ffmpeg = ffmpeg or provisioner.executable_path(target, Component.FFMPEG)
            ffprobe = ffprobe or provisioner.executable_path(target, Component.FFPROBE)

        if ffmpeg is None or ffprobe is None or not (ffmpeg.exists() and ffprobe.exists()):
            raise NotFoundError(ErrorMessages.CONVERTER_NOT_INSTALLED)

        return str(ffmpeg), str(ffprobe)

    async def _probe_sample_rate(self, ffprobe: str, path: str) -> int:
        result = await self._run_process(probe_rate_command(ffprobe, path), timeout=self.timeout)
        if not result.ok:
            raise SubprocessError(
                ErrorMessages.PROBE_FAILED.format(stderr=result.stderr.strip()),
                returncode=result.returncode,
                stderr=result.stderr,
            )

        lines = result.stdout.strip().splitlines()
        try:
            return int(lines[0].strip())
        except (IndexError, ValueError) as e:
            raise SubprocessError(
                ErrorMessages.PROBE_PARSE_FAILED.format(output=result.stdout)
            ) from e

    async def _transcode(self, ffmpeg: str, input_path: str, output_path: str) -> None:
        result = await self._run_process(
            transcode_command(ffmpeg, input_path, output_path), timeout=self.timeout
        )
        if not result.ok:
            raise SubprocessError(
                ErrorMessages.TRANSCODE_FAILED.format(stderr=result.stderr.strip()),
                returncode=result.returncode,
                stderr=result.stderr,
            )

    async def _resample(
        self, ffmpeg: str, input_path: str, sample_rate: int, output_path: str
    ) -> None:
        result = await self._run_process(
            resample_command(ffmpeg, input_path, sample_rate, output_path),
            timeout=self.timeout,
        )
        if not result.ok:
            raise SubprocessError(
                ErrorMessages.RESAMPLE_FAILED.format(
                    path=input_path, stderr=result.stderr.strip()
                ),
                returncode=result.returncode,
                stderr=result.stderr,
            )

    async def normalize(
        self, input_path: str, target_sample_rate: int = DEFAULT_SAMPLE_RATE
    ) -> NormalizeResult:
        input_path = str(input_path)
        job = AudioJob(input_path=input_path, target_sample_rate=target_sample_rate)
        temp_path = f"{input_path}{TEMP_WAV_SUFFIX}"
        output_path = f"{input_path}{OUTPUT_WAV_SUFFIX}"
        produced: Optional[str] = None

        try:
            ffmpeg, ffprobe = self._resolve_tools()

            if not Path(input_path).exists():
                raise NotFoundError(ErrorMessages.AUDIO_FILE_NOT_FOUND.format(path=input_path))

            is_wav = Path(input_path).suffix.lower() == CANONICAL_EXTENSION
            canonical = input_path
            if not is_wav:
                await self._transcode(ffmpeg, input_path, temp_path)
                canonical = temp_path

            job.detected_sample_rate = await self._probe_sample_rate(ffprobe, canonical)

            if job.detected_sample_rate == target_sample_rate:
                produced = canonical
                job.output_path = canonical
                job.converted = not is_wav
                template = (
                    LogMessages.AUDIO_ALREADY_CANONICAL
                    if is_wav
                    else LogMessages.AUDIO_CONVERTED_CANONICAL
                )
                message = template.format(path=input_path)
            else:
                await self._resample(ffmpeg, canonical, target_sample_rate, output_path)
                produced = output_path
                job.output_path = output_path
                job.converted = True
                message = LogMessages.AUDIO_RESAMPLED.format(
                    path=canonical, output=output_path, rate=target_sample_rate
                )

            logger.info(message)
            return NormalizeResult(success=True, message=message, output=produced, job=job)

        except STTError as e:
            error_msg = ErrorMessages.CONVERT_FAILED.format(path=input_path, error=e.message)
            logger.error(error_msg)
            self._discard(output_path)
            return NormalizeResult(success=False, message=error_msg, job=job, error_kind=e.kind)

        finally:
            if produced != temp_path:
                self._discard(temp_path)

    async def has_audio_stream(self, input_path: str) -> bool:
        """
        Raises:
            NotFoundError: If ffprobe or the input file is missing
            SubprocessError: If ffprobe exits with a non-zero code
        """
        _, ffprobe = self._resolve_tools()
        if not Path(input_path).exists():
            raise NotFoundError(ErrorMessages.AUDIO_FILE_NOT_FOUND.format(path=input_path))

        result = await self._run_process(
            probe_audio_command(ffprobe, str(input_path)), timeout=self.timeout
        )
        if not result.ok:
            raise SubprocessError(
                f"ffprobe process exited with code {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr,
            )

        return any(line.strip() == "audio" for line in result.stdout.splitlines())

    @staticmethod
    def _discard(path: str) -> None:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to cleanup {path}: {e}")


# Global singleton instance
_audio_normalizer: Optional[FFmpegAudioNormalizer] = None


def get_audio_normalizer() -> FFmpegAudioNormalizer:
    """Get or create global FFmpegAudioNormalizer instance (singleton)."""
    global _audio_normalizer

    if _audio_normalizer is None:
        from core.config import get_settings

        logger.info("Creating FFmpegAudioNormalizer instance...")
        _audio_normalizer = FFmpegAudioNormalizer(
            timeout=get_settings().converter_timeout_seconds
        )

    return _audio_normalizer
