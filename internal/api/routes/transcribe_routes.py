"""
Transcription Routes - API endpoints for audio transcription and models.

All responses use unified format:
{
    "error_code": int,
    "message": str,
    "data": {...},
    "errors": {...}  // only on error
}
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.dependencies import (
    get_model_cache_dependency,
    get_transcription_pipeline_dependency,
)
from core.logger import logger
from interfaces.model_cache import IModelCache
from internal.api.schemas.common_schemas import StandardResponse
from internal.api.utils import (
    json_error_response,
    json_success_response,
    status_for_error_kind,
)
from services.transcription import TranscriptionPipeline

router = APIRouter()

UPLOAD_CHUNK_SIZE = 1024 * 1024


class UploadTooLarge(Exception):
    pass


async def save_upload(upload: UploadFile, destination: Path, max_size_mb: int) -> float:
    """
    Stream an uploaded file to disk.

    Raises:
        UploadTooLarge: If the upload exceeds ``max_size_mb``
    """
    size_bytes = 0
    limit = max_size_mb * 1024 * 1024
    with open(destination, "wb") as f:
        while True:
            chunk = await upload.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            size_bytes += len(chunk)
            if size_bytes > limit:
                raise UploadTooLarge(f"File too large: > {max_size_mb}MB")
            f.write(chunk)
    return size_bytes / (1024 * 1024)


def cleanup_request_files(input_path: Path) -> None:
    """Remove the upload and everything derived from it."""
    for path in [input_path, *TranscriptionPipeline.derived_files(str(input_path))]:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to cleanup {path}: {e}")


@router.post(
    "/transcribe",
    response_model=StandardResponse,
    tags=["Transcription"],
    summary="Transcribe an uploaded audio file",
    description="""
Upload an audio or video file (multipart field `file`) and transcribe it.

The file is converted to a 16 kHz WAV, passed to whisper.cpp and the
requested output formats (`WHISPER_OUTPUT_FORMATS`) are returned.

**Response Format:**
```json
{
  "error_code": 0,
  "message": "Transcription successful",
  "data": {
    "success": true,
    "message": "Whisper process completed successfully.",
    "output": [{"type": "json", "data": {...}, "outputFile": "..."}]
  }
}
```
""",
    responses={
        200: {"description": "Transcription successful"},
        400: {"description": "Bad request (no file, invalid model)"},
        413: {"description": "File too large"},
        500: {"description": "Conversion or engine failure"},
        502: {"description": "Model download failed"},
    },
)
async def transcribe(
    file: Optional[UploadFile] = File(default=None, description="Audio/video file"),
    model: Optional[str] = Form(default=None, description="Whisper model name"),
    language: Optional[str] = Form(default=None, description="Spoken language ('auto')"),
    pipeline: TranscriptionPipeline = Depends(get_transcription_pipeline_dependency),
) -> JSONResponse:
    """Transcribe an uploaded file; uploads and derived files are removed afterwards."""
    if file is None or not file.filename:
        return json_error_response(
            message="Please provide a valid audio file.",
            status_code=400,
            errors={"file": "File is required"},
        )

    settings = get_settings()
    temp_dir = Path(settings.temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    request_id = uuid.uuid4().hex
    input_path = temp_dir / f"{request_id}{Path(file.filename).suffix.lower()}"

    # request_id becomes a top-level key in JSON logs
    with logger.contextualize(request_id=request_id):
        try:
            size_mb = await save_upload(file, input_path, settings.max_upload_size_mb)
            logger.info(f"Received upload {file.filename} ({size_mb:.2f}MB) -> {input_path}")

            result = await pipeline.transcribe(str(input_path), model, language)

            if not result.success:
                return json_error_response(
                    message=result.message,
                    status_code=status_for_error_kind(result.error_kind),
                    errors={
                        "errorKind": result.error_kind.value if result.error_kind else None,
                        "exitCode": result.exit_code,
                    },
                )

            return json_success_response(
                message="Transcription successful",
                data=result.to_dict(),
            )

        except UploadTooLarge as e:
            logger.error(f"Upload rejected: {e}")
            return json_error_response(
                message="File too large",
                status_code=413,
                errors={"detail": str(e)},
            )

        finally:
            await file.close()
            cleanup_request_files(input_path)


@router.get(
    "/models",
    response_model=StandardResponse,
    tags=["Models"],
    summary="List whisper models and whether they are cached",
)
async def list_models(
    cache: IModelCache = Depends(get_model_cache_dependency),
) -> JSONResponse:
    return json_success_response(
        message="Available models",
        data=cache.list_available_models(),
    )


@router.post(
    "/models/{name}",
    response_model=StandardResponse,
    tags=["Models"],
    summary="Download a whisper model (or 'all')",
)
async def download_model(
    name: str,
    cache: IModelCache = Depends(get_model_cache_dependency),
) -> JSONResponse:
    result = await cache.ensure_model(name)

    if not result.success:
        return json_error_response(
            message=result.message,
            status_code=status_for_error_kind(result.error_kind),
            errors=result.to_dict(),
        )

    return json_success_response(message=result.message, data=result.to_dict())
