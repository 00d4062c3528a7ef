"""
Whisper Runner - whisper.cpp CLI wrapper.

Implements ITranscriptionRunner interface for dependency injection.
The engine writes its outputs next to the input as ``<audio>.<format>``;
the runner reads them back after a successful exit.
"""

import json
import time
from pathlib import Path
from typing import List, Optional, Union

from core.constants import Component, ErrorKind, OutputFormat, PipelineStage
from core.errors import (
    ArtifactMissingError,
    SubprocessError,
    SubprocessTimeoutError,
    UnsupportedPlatformError,
)
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from infrastructure.process import ProcessRunner, run_process
from interfaces.transcription_runner import ITranscriptionRunner
from models.schemas import TranscriptionConfig, TranscriptionOutput, TranscriptionResult

# Order in which outputs are collected
OUTPUT_ORDER = (OutputFormat.JSON, OutputFormat.TXT, OutputFormat.CSV)


def build_command(
    executable: Union[str, Path],
    audio_path: str,
    model_path: str,
    language: str,
    config: TranscriptionConfig,
) -> List[str]:
    """
    Numeric flags are always passed; boolean toggles only when enabled.
    Flags whose value is empty are omitted.
    """
    command = [
        str(executable),
        "--threads",
        str(config.threads),
        "--processors",
        str(config.processors),
        "--duration",
        str(config.max_duration_ms),
        "--max-len",
        str(config.max_segment_len),
    ]
    for fmt in OUTPUT_ORDER:
        if config.wants(fmt):
            command.append(f"--output-{fmt.value}")
    if config.translate:
        command.append("--translate")
    if model_path:
        command += ["--model", str(model_path)]
    if language:
        command += ["--language", language]
    command += ["--file", str(audio_path)]
    return command


class WhisperRunner(ITranscriptionRunner):
    """Runs whisper.cpp as a child process."""

    def __init__(
        self,
        executable: Optional[Union[str, Path]] = None,
        process_runner: ProcessRunner = run_process,
    ):
        """
        Args:
            executable: whisper binary; default is the provisioned one for
                the detected platform, looked up on each run
            process_runner: Subprocess strategy (tests inject a fake)
        """
        self._executable = Path(executable) if executable else None
        self._run_process = process_runner

    def _resolve_executable(self) -> Optional[Path]:
        if self._executable is not None:
            return self._executable if self._executable.exists() else None

        from infrastructure.assets import detect_platform_target, get_asset_provisioner

        return get_asset_provisioner().executable_path(
            detect_platform_target(), Component.WHISPER
        )

    async def run(
        self,
        audio_path: str,
        model_path: str,
        language: str,
        config: TranscriptionConfig,
    ) -> TranscriptionResult:
        try:
            executable = self._resolve_executable()
        except UnsupportedPlatformError as e:
            logger.error(e.message)
            return TranscriptionResult.failure(
                e.message, e.kind, stage=PipelineStage.ENGINE_INVOKED
            )
        if executable is None:
            error_msg = ErrorMessages.ENGINE_NOT_FOUND.format(
                path=self._executable or Component.WHISPER.value
            )
            logger.error(error_msg)
            return TranscriptionResult.failure(
                error_msg, ErrorKind.NOT_FOUND, stage=PipelineStage.ENGINE_INVOKED
            )

        command = build_command(executable, audio_path, model_path, language, config)
        logger.info(LogMessages.ENGINE_COMMAND.format(command=" ".join(command)))
        start_time = time.time()

        try:
            result = await self._run_process(command, timeout=config.timeout_seconds)
        except SubprocessTimeoutError as e:
            error_msg = ErrorMessages.ENGINE_TIMEOUT.format(
                timeout=config.timeout_seconds, stderr=e.stderr
            )
            logger.error(error_msg)
            return TranscriptionResult.failure(
                error_msg,
                ErrorKind.SUBPROCESS_FAILURE,
                stage=PipelineStage.ENGINE_INVOKED,
                exit_code=e.returncode,
            )
        except SubprocessError as e:
            logger.error(e.message)
            return TranscriptionResult.failure(
                e.message, e.kind, stage=PipelineStage.ENGINE_INVOKED
            )

        elapsed_time = time.time() - start_time

        if not result.ok:
            error_msg = ErrorMessages.ENGINE_FAILED.format(
                code=result.returncode, stderr=result.stderr
            )
            logger.error(f"Whisper process failed with code {result.returncode}")
            logger.error(f"Stderr: {result.stderr[:1000] if result.stderr else 'No stderr'}")
            return TranscriptionResult.failure(
                error_msg,
                ErrorKind.SUBPROCESS_FAILURE,
                stage=PipelineStage.ENGINE_INVOKED,
                exit_code=result.returncode,
            )

        logger.info(f"Whisper finished in {elapsed_time:.2f}s")
        return self._collect_outputs(audio_path, config)

    @staticmethod
    def _read_output(fmt: OutputFormat, output_file: str):
        """
        Raises:
            ArtifactMissingError: If the file is missing or JSON is unparseable
        """
        try:
            with open(output_file, "r", encoding="utf-8") as f:
                content = f.read()
            if fmt is OutputFormat.JSON:
                return json.loads(content)
            return content
        except (OSError, ValueError) as e:
            if fmt is OutputFormat.JSON:
                raise ArtifactMissingError(ErrorMessages.OUTPUT_JSON_FAILED.format(error=e)) from e
            raise ArtifactMissingError(
                ErrorMessages.OUTPUT_TEXT_FAILED.format(format=fmt.value.upper(), error=e)
            ) from e

    def _collect_outputs(
        self, audio_path: str, config: TranscriptionConfig
    ) -> TranscriptionResult:
        outputs: List[TranscriptionOutput] = []

        try:
            for fmt in OUTPUT_ORDER:
                if not config.wants(fmt):
                    continue
                output_file = f"{audio_path}.{fmt.value}"
                content = self._read_output(fmt, output_file)
                outputs.append(
                    TranscriptionOutput(format=fmt, content=content, path=output_file)
                )
        except ArtifactMissingError as e:
            logger.error(e.message)
            return TranscriptionResult.failure(
                e.message, e.kind, stage=PipelineStage.OUTPUTS_COLLECTED
            )

        logger.info(LogMessages.ENGINE_COMPLETED)
        return TranscriptionResult(
            success=True,
            message=LogMessages.ENGINE_COMPLETED,
            outputs=outputs,
            exit_code=0,
        )


# Global singleton instance
_whisper_runner: Optional[WhisperRunner] = None


def get_whisper_runner() -> WhisperRunner:
    """Get or create global WhisperRunner instance (singleton)."""
    global _whisper_runner

    if _whisper_runner is None:
        logger.info("Creating WhisperRunner instance...")
        _whisper_runner = WhisperRunner()

    return _whisper_runner
