"""
Health Check API Routes.
"""

from fastapi import APIRouter

from core.config import get_settings
from core.errors import STTError
from internal.api.schemas.common_schemas import HealthData, StandardResponse
from internal.api.utils import success_response


def create_health_routes(app) -> APIRouter:
    """
    Factory function to create health routes.

    Args:
        app: FastAPI application instance

    Returns:
        APIRouter: Configured router with health endpoints
    """
    router = APIRouter(tags=["Health"])

    @router.get(
        "/",
        response_model=StandardResponse,
        summary="Root Endpoint",
        description="Get basic API information",
        operation_id="get_root",
    )
    async def root():
        """
        Root endpoint.

        Returns service name, version, and current status.
        """
        settings = get_settings()
        return success_response(
            message="API service is running",
            data={
                "service": settings.app_name,
                "version": settings.app_version,
                "status": "running",
            },
        )

    @router.get(
        "/health",
        response_model=StandardResponse,
        summary="Health Check",
        description="Check that executables and the default model are installed",
        operation_id="health_check",
    )
    async def health_check():
        """
        Health check endpoint.

        **Returns:**
        - Overall health status (healthy/unhealthy)
        - Installed path of each executable (null if missing)
        - Whether the default model is cached
        """
        from core.container import get_model_cache
        from core.dependencies import check_executables
        from infrastructure.assets import detect_platform_target

        settings = get_settings()
        platform = None
        executables = {}
        error = None

        try:
            platform = str(detect_platform_target())
            executables = check_executables()
        except STTError as e:
            error = e.message

        models = get_model_cache().list_available_models()
        model_info = {
            "name": settings.whisper_model,
            "cached": models.get(settings.whisper_model, False),
        }

        healthy = (
            error is None
            and bool(executables)
            and all(executables.values())
            and model_info["cached"]
        )
        message = "Service is healthy" if healthy else "Service unhealthy: assets missing"
        if error:
            message = f"Service unhealthy: {error}"

        health = HealthData(
            status="healthy" if healthy else "unhealthy",
            service=settings.app_name,
            version=settings.app_version,
            platform=platform,
            executables=executables,
            default_model=model_info,
        )
        data = health.model_dump()
        data["provisioning"] = getattr(app.state, "provision_result", None)

        return success_response(message=message, data=data)

    return router
