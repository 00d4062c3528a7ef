"""
Asset Routes - provision platform executables on demand.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from core.dependencies import get_transcription_pipeline_dependency
from core.logger import logger
from internal.api.schemas.common_schemas import ProvisionRequest, StandardResponse
from internal.api.utils import (
    json_error_response,
    json_success_response,
    status_for_error_kind,
)
from services.transcription import TranscriptionPipeline

router = APIRouter(tags=["Assets"])


@router.post(
    "/assets/provision",
    response_model=StandardResponse,
    summary="Install executables for the running platform",
    description="Downloads every missing file of the requested components. "
    "Files already present are never downloaded again.",
)
async def provision_assets(
    request: Optional[ProvisionRequest] = Body(default=None),
    pipeline: TranscriptionPipeline = Depends(get_transcription_pipeline_dependency),
) -> JSONResponse:
    components = request.components if request else None
    logger.info(f"Provision request for components={components or 'all'}")

    result = await pipeline.ensure_assets(components)

    if result.error:
        return json_error_response(
            message=result.error,
            status_code=status_for_error_kind(result.error_kind),
            errors=result.to_dict(),
        )

    if not result.success:
        return json_error_response(
            message="Some files could not be installed",
            status_code=502,
            errors=result.to_dict(),
        )

    return json_success_response(message="Assets installed", data=result.to_dict())
