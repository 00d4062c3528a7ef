"""
Pydantic Schemas - domain values passed between pipeline components.

Every component boundary returns one of these result values instead of
raising. ``to_dict()`` renders the camelCase shape exposed to external
callers (CLI output, HTTP responses).
"""

from pathlib import Path
from typing import Any, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.constants import (
    Architecture,
    AssetStatus,
    Component,
    ErrorKind,
    OutputFormat,
    PipelineStage,
    Platform,
)


# =============================================================================
# Platform / Assets
# =============================================================================


class PlatformTarget(BaseModel):
    """Closed (platform, architecture) pair resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    platform: Platform
    architecture: Architecture

    @property
    def is_posix(self) -> bool:
        return self.platform.is_posix

    def __str__(self) -> str:
        return f"{self.platform.value}/{self.architecture.value}"


class AssetDescriptor(BaseModel):
    """One downloadable file from the manifest."""

    model_config = ConfigDict(frozen=True)

    id: str
    component: Optional[Component] = None
    filename: str
    platform: Platform
    architecture: Architecture
    url: str
    relative_path: str
    dependencies: Tuple[str, ...] = ()


class InstalledAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    filename: str
    path: str
    status: AssetStatus


class FailedAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    filename: str
    url: str
    error_kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE
    error: str = ""


class AssetBatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: Tuple[InstalledAsset, ...] = ()
    failed: Tuple[FailedAsset, ...] = ()


class ProvisionResult(BaseModel):
    """
    Outcome of one provisioning call.

    ``error``/``error_kind`` are set only when the whole call failed before
    any file was attempted; per-file failures are recorded in the batches.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    files: AssetBatch = Field(default_factory=AssetBatch)
    dependencies: AssetBatch = Field(default_factory=AssetBatch)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def installed(self) -> List[InstalledAsset]:
        return [*self.files.success, *self.dependencies.success]

    @property
    def failed(self) -> List[FailedAsset]:
        return [*self.files.failed, *self.dependencies.failed]

    @classmethod
    def fatal(cls, error: str, kind: ErrorKind) -> "ProvisionResult":
        return cls(success=False, error=error, error_kind=kind)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Models
# =============================================================================


class ModelHandle(BaseModel):
    """A model file on disk. Valid only while the file exists."""

    model_config = ConfigDict(frozen=True)

    name: str
    file_path: str
    size_hint_mb: Optional[int] = None

    def exists(self) -> bool:
        return Path(self.file_path).exists()


class ModelResult(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    success: bool
    message: str
    model_name: Optional[str] = Field(default=None, serialization_alias="modelName")
    model_file: Optional[str] = Field(default=None, serialization_alias="modelFile")
    error_kind: Optional[ErrorKind] = Field(
        default=None, serialization_alias="errorKind"
    )
    details: Tuple["ModelResult", ...] = ()
    handle: Optional[ModelHandle] = Field(default=None, exclude=True)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not self.details:
            data.pop("details", None)
        return data


ModelResult.model_rebuild()


# =============================================================================
# Audio
# =============================================================================


class AudioJob(BaseModel):
    """Per-request normalization record."""

    input_path: str
    target_sample_rate: int
    detected_sample_rate: Optional[int] = None
    output_path: Optional[str] = None
    converted: bool = False


class NormalizeResult(BaseModel):
    success: bool
    message: str
    output: Optional[str] = None
    job: Optional[AudioJob] = None
    error_kind: Optional[ErrorKind] = None


# =============================================================================
# Transcription
# =============================================================================


def parse_output_formats(value: Any) -> FrozenSet[OutputFormat]:
    """Accept a comma separated string or an iterable of format names."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        items = [item.strip().lower() for item in value.split(",")]
    else:
        items = [getattr(item, "value", item) for item in value]
    return frozenset(OutputFormat(item) for item in items if item)


class TranscriptionConfig(BaseModel):
    """Engine settings, built once and shared read-only."""

    model_config = ConfigDict(frozen=True)

    threads: int = Field(default=4, ge=1)
    processors: int = Field(default=1, ge=1)
    max_duration_ms: int = Field(default=0, ge=0)
    max_segment_len: int = Field(default=0, ge=0)
    output_formats: FrozenSet[OutputFormat] = frozenset()
    translate: bool = False
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @field_validator("output_formats", mode="before")
    @classmethod
    def _coerce_formats(cls, v: Any) -> FrozenSet[OutputFormat]:
        return parse_output_formats(v)

    def wants(self, fmt: OutputFormat) -> bool:
        return fmt in self.output_formats

    @classmethod
    def from_settings(cls, settings=None) -> "TranscriptionConfig":
        if settings is None:
            from core.config import get_settings

            settings = get_settings()
        return cls(
            threads=settings.whisper_threads,
            processors=settings.whisper_processors,
            max_duration_ms=settings.whisper_duration_ms,
            max_segment_len=settings.whisper_max_len,
            output_formats=settings.whisper_output_formats,
            translate=settings.whisper_translate,
            timeout_seconds=settings.whisper_timeout_seconds,
        )


class TranscriptionOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: OutputFormat = Field(serialization_alias="type")
    content: Any = Field(serialization_alias="data")
    path: str = Field(serialization_alias="outputFile")


class TranscriptionResult(BaseModel):
    """Terminal value of a transcription call."""

    success: bool
    message: str
    outputs: List[TranscriptionOutput] = Field(
        default_factory=list, serialization_alias="output"
    )
    stage: PipelineStage = PipelineStage.DONE
    exit_code: Optional[int] = Field(default=None, serialization_alias="exitCode")
    error_kind: Optional[ErrorKind] = Field(
        default=None, serialization_alias="errorKind"
    )

    @classmethod
    def failure(
        cls,
        message: str,
        kind: Optional[ErrorKind] = None,
        stage: PipelineStage = PipelineStage.FAILED,
        exit_code: Optional[int] = None,
    ) -> "TranscriptionResult":
        return cls(
            success=False,
            message=message,
            stage=stage,
            error_kind=kind,
            exit_code=exit_code,
        )

    def output_for(self, fmt: OutputFormat) -> Optional[TranscriptionOutput]:
        for output in self.outputs:
            if output.format == fmt:
                return output
        return None

    def to_dict(self) -> dict:
        return self.model_dump(
            mode="json",
            by_alias=True,
            include={"success", "message", "outputs"},
        )
