"""
Whisper Model Cache - Downloads ggml models on first use.

Models are stored as ``<models_dir>/ggml-<name>.bin``. A file that exists
is considered ready; downloads are atomic so a partial transfer never
shows up under the final name.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional

from core.constants import (
    ALL_MODELS,
    DIARIZE_MODEL_MARKER,
    DIARIZE_MODEL_SOURCE_URL,
    ErrorKind,
    MODEL_SOURCE_URL,
    MODEL_URL_PREFIX,
    WHISPER_MODEL_SIZES_MB,
    WHISPER_MODELS,
)
from core.errors import InvalidModelError, STTError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from interfaces.file_downloader import IFileDownloader
from interfaces.model_cache import IModelCache
from models.schemas import ModelHandle, ModelResult


class ModelCache(IModelCache):
    """Downloads Whisper models over HTTP into a local directory."""

    def __init__(
        self,
        models_dir: Optional[Path] = None,
        downloader: Optional[IFileDownloader] = None,
        source_url: Optional[str] = None,
        diarize_source_url: Optional[str] = None,
        concurrency: Optional[int] = None,
    ):
        from core.config import get_settings

        settings = get_settings()

        if downloader is None:
            from infrastructure.http import get_file_downloader

            downloader = get_file_downloader()

        self.models_dir = Path(models_dir or settings.models_dir)
        self.downloader = downloader
        self.source_url = (source_url or settings.model_source_url or MODEL_SOURCE_URL).rstrip("/")
        self.diarize_source_url = (
            diarize_source_url
            or settings.diarize_model_source_url
            or DIARIZE_MODEL_SOURCE_URL
        ).rstrip("/")
        self.concurrency = max(1, concurrency or settings.model_download_concurrency)
        logger.debug(f"ModelCache initialized: {self.models_dir}")

    @staticmethod
    def available_models() -> List[str]:
        return list(WHISPER_MODELS)

    def model_path(self, name: str) -> Path:
        return self.models_dir / f"ggml-{name}.bin"

    def model_url(self, name: str) -> str:
        """Diarization (tinydiarize) models live in a separate repository."""
        source = (
            self.diarize_source_url
            if DIARIZE_MODEL_MARKER in name
            else self.source_url
        )
        return f"{source}/{MODEL_URL_PREFIX}-{name}.bin"

    def handle(self, name: str) -> ModelHandle:
        return ModelHandle(
            name=name,
            file_path=str(self.model_path(name)),
            size_hint_mb=WHISPER_MODEL_SIZES_MB.get(name),
        )

    async def ensure_model(self, name: str) -> ModelResult:
        if name == ALL_MODELS:
            return await self._ensure_all()

        try:
            self._validate_name(name)
        except InvalidModelError as e:
            logger.error(e.message)
            return ModelResult(
                success=False, message=e.message, model_name=name, error_kind=e.kind
            )

        return await self._ensure_one(name)

    @staticmethod
    def _validate_name(name: str) -> None:
        """
        Raises:
            InvalidModelError: If name is not a known model
        """
        if name not in WHISPER_MODELS:
            raise InvalidModelError(
                ErrorMessages.MODEL_INVALID_NAME.format(
                    name=name, valid_models=", ".join(WHISPER_MODELS)
                )
            )

    async def _ensure_one(self, name: str) -> ModelResult:
        handle = self.handle(name)
        model_path = self.model_path(name)

        if model_path.exists():
            message = LogMessages.MODEL_EXISTS.format(model=name)
            logger.info(message)
            return ModelResult(
                success=True,
                message=message,
                model_name=name,
                model_file=str(model_path),
                handle=handle,
            )

        url = self.model_url(name)
        logger.info(LogMessages.MODEL_DOWNLOADING.format(model=name, url=url))
        if handle.size_hint_mb:
            logger.info(f"Expected size: ~{handle.size_hint_mb}MB")

        try:
            await self.downloader.download(url, model_path)
        except STTError as e:
            error_msg = ErrorMessages.MODEL_DOWNLOAD_FAILED.format(model=name, error=e)
            logger.error(error_msg)
            return ModelResult(
                success=False,
                message=error_msg,
                model_name=name,
                error_kind=e.kind,
            )
        except OSError as e:
            error_msg = ErrorMessages.MODEL_DOWNLOAD_FAILED.format(model=name, error=e)
            logger.error(error_msg)
            return ModelResult(
                success=False,
                message=error_msg,
                model_name=name,
                error_kind=ErrorKind.TRANSPORT_FAILURE,
            )

        message = LogMessages.MODEL_READY.format(model=name, path=model_path)
        logger.info(message)
        return ModelResult(
            success=True,
            message=message,
            model_name=name,
            model_file=str(model_path),
            handle=handle,
        )

    async def _ensure_all(self) -> ModelResult:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(name: str) -> ModelResult:
            async with semaphore:
                return await self._ensure_one(name)

        outcomes = await asyncio.gather(
            *(bounded(name) for name in WHISPER_MODELS), return_exceptions=True
        )
        details = [
            self._failed_outcome(name, outcome)
            if isinstance(outcome, BaseException)
            else outcome
            for name, outcome in zip(WHISPER_MODELS, outcomes)
        ]
        ready = sum(1 for result in details if result.success)
        message = LogMessages.MODEL_BATCH_DONE.format(ready=ready, total=len(details))
        logger.info(message)

        return ModelResult(
            success=ready == len(details),
            message=message,
            model_name=ALL_MODELS,
            details=tuple(details),
        )

    @staticmethod
    def _failed_outcome(name: str, error: BaseException) -> ModelResult:
        if not isinstance(error, Exception):
            raise error
        error_msg = ErrorMessages.MODEL_DOWNLOAD_FAILED.format(model=name, error=error)
        logger.opt(exception=error).error(error_msg)
        return ModelResult(
            success=False,
            message=error_msg,
            model_name=name,
            error_kind=getattr(error, "kind", ErrorKind.TRANSPORT_FAILURE),
        )

    def list_available_models(self) -> Dict[str, bool]:
        return {name: self.model_path(name).exists() for name in WHISPER_MODELS}


# Global singleton instance
_model_cache: Optional[ModelCache] = None


def get_model_cache() -> ModelCache:
    """Get or create global ModelCache instance (singleton)."""
    global _model_cache

    if _model_cache is None:
        logger.info("Creating ModelCache instance...")
        _model_cache = ModelCache()

    return _model_cache
