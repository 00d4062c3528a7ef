"""
FastAPI Service - Main entry point for the Audio2Text API.
Transcribes uploaded audio with whisper.cpp, provisioning its executables
and models on demand.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException, status as http_status  # type: ignore
from fastapi.middleware.cors import CORSMiddleware  # type: ignore
from fastapi.responses import JSONResponse  # type: ignore
from fastapi.exceptions import RequestValidationError  # type: ignore

from core.config import get_settings
from core.logger import logger
from core.dependencies import validate_dependencies
from internal.api.routes.asset_routes import router as asset_router
from internal.api.routes.health_routes import create_health_routes
from internal.api.routes.transcribe_routes import router as transcribe_router
from internal.api.utils import error_response


async def provision_on_startup(app: FastAPI) -> None:
    """
    Install executables and the default model before serving requests.

    Failures are logged and recorded on app.state; the service still
    starts so that /health and /assets/provision can be used to recover.
    """
    from core.container import get_transcription_pipeline

    settings = get_settings()
    pipeline = get_transcription_pipeline()
    start = time.time()

    provision = await pipeline.ensure_assets()
    app.state.provision_result = provision.to_dict()
    if provision.success:
        logger.info("Executables provisioned")
    else:
        logger.warning(
            f"Provisioning incomplete: {provision.error or [f.id for f in provision.failed]}"
        )

    model = await pipeline.model_cache.ensure_model(settings.whisper_model)
    if model.success:
        logger.info(f"Default model ready: {model.model_file}")
    else:
        logger.warning(f"Default model not ready: {model.message}")

    logger.info(f"Startup provisioning finished in {time.time() - start:.2f}s")


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan - startup and shutdown.
    """
    try:
        settings = get_settings()
        logger.info(
            f"========== Starting {settings.app_name} v{settings.app_version} API service =========="
        )
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Debug mode: {settings.debug}")
        logger.info(f"API: {settings.api_host}:{settings.api_port}")

        # Initialize DI Container
        from core.container import bootstrap_container

        bootstrap_container()
        logger.info("DI Container initialized")

        app.state.provision_result = None
        if settings.provision_on_startup:
            await provision_on_startup(app)

        # Warn only: /assets/provision can still install missing files
        validate_dependencies(strict=False)

        logger.info(
            f"========== {settings.app_name} API service started successfully =========="
        )

        yield

        logger.info("========== Shutting down API service ==========")

        from infrastructure.http import get_file_downloader

        await get_file_downloader().aclose()

        logger.info("========== API service stopped successfully ==========")

    except Exception as e:
        logger.error(f"Fatal error in application lifespan: {e}")
        logger.exception("Lifespan error details:")
        raise


def create_app() -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    # OpenAPI metadata
    description = """
## Audio2Text API

Speech-to-text over whisper.cpp, with self-provisioned binaries and models.

### Processing Flow

1. **Upload** - POST a media file to `/transcribe`
2. **Model** - The requested ggml model is downloaded on first use
3. **Normalize** - ffmpeg converts the file to a 16 kHz WAV
4. **Transcribe** - whisper.cpp runs and its outputs (json/txt/csv) are returned

### Supported Audio Formats

Anything ffmpeg can decode (MP3, WAV, M4A, MP4, OGG, FLAC, ...)
    """

    tags_metadata = [
        {"name": "Transcription", "description": "Transcribe uploaded audio."},
        {"name": "Models", "description": "List and download whisper models."},
        {"name": "Assets", "description": "Install platform executables."},
        {"name": "Health", "description": "Health check endpoints."},
    ]

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=description,
        lifespan=lifespan,
        openapi_tags=tags_metadata,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(transcribe_router)  # /transcribe, /models
    app.include_router(asset_router)  # /assets/provision
    app.include_router(create_health_routes(app))  # / and /health

    # Add exception handlers for unified response format
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        """Handle validation errors - return 422 with errors field."""
        errors_dict = {}
        for e in exc.errors():
            field = e["loc"][-1] if e["loc"] else "unknown"
            errors_dict[str(field)] = e["msg"]

        error_msg = "; ".join([f"{k}: {v}" for k, v in errors_dict.items()])
        logger.error(f"Validation error: {error_msg}")

        return JSONResponse(
            status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_response(
                message="Validation error",
                error_code=1,
                errors=errors_dict,
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with unified format."""
        logger.error(f"HTTP error: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(
                message=exc.detail,
                error_code=1,
                errors={"detail": exc.detail},
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions with unified format."""
        logger.error(f"Unhandled exception: {str(exc)}")
        logger.exception("Exception details:")
        return JSONResponse(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(
                message="Internal server error",
                error_code=1,
                errors={"detail": str(exc)},
            ),
        )

    return app


# Create application instance
app = create_app()


# Run with: uvicorn entrypoints.api.main:app --host 0.0.0.0 --port 8000
if __name__ == "__main__":
    import uvicorn  # type: ignore

    settings = get_settings()

    logger.info("========== Starting Uvicorn Server ==========")
    logger.info(f"Host: {settings.api_host}")
    logger.info(f"Port: {settings.api_port}")
    logger.info(f"Reload: {settings.api_reload}")
    logger.info(f"Workers: {settings.api_workers}")

    uvicorn.run(
        "entrypoints.api.main:app" if settings.api_reload else app,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level="info" if settings.debug else "warning",
    )
