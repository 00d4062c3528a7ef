"""
Installed executables check and FastAPI dependency injection.

This module provides:
- Executable validation for the detected platform (whisper, ffmpeg, ffprobe)
- FastAPI dependency injection functions for routes
"""

import os
from typing import Dict, Optional

from core.constants import Component
from core.errors import NotFoundError, UnsupportedPlatformError
from core.logger import logger


def check_executables() -> Dict[str, Optional[str]]:
    """
    Locate every provisioned executable for the detected platform.

    Returns:
        Mapping of component name to installed path (None if missing)
    """
    from infrastructure.assets import detect_platform_target
    from core.container import get_asset_provisioner

    target = detect_platform_target()
    provisioner = get_asset_provisioner()

    found: Dict[str, Optional[str]] = {}
    for component in Component:
        path = provisioner.executable_path(target, component)
        found[component.value] = str(path) if path else None
    return found


def validate_dependencies(strict: bool = False) -> Dict[str, Optional[str]]:
    """
    Validate installed executables.

    Args:
        strict: Raise when something is missing instead of warning

    Raises:
        NotFoundError: If strict and an executable is missing
        UnsupportedPlatformError: If strict and the running platform has no mapping
    """
    logger.info("Validating installed executables...")

    try:
        found = check_executables()
    except UnsupportedPlatformError as e:
        if strict:
            logger.error(e.message)
            raise
        logger.warning(e.message)
        return {}

    missing = [name for name, path in found.items() if path is None]
    for name, path in found.items():
        if path is None:
            continue
        if os.access(path, os.X_OK):
            logger.info(f"{name} executable found: {path}")
        else:
            logger.warning(f"{name} executable exists but not executable: {path}")

    if missing:
        error_msg = (
            f"Executables not installed: {', '.join(missing)}. "
            "Run 'python -m entrypoints.cli.main provision' or enable PROVISION_ON_STARTUP."
        )
        if strict:
            logger.error(error_msg)
            raise NotFoundError(error_msg)
        logger.warning(error_msg)
    else:
        logger.info("System dependencies check passed")

    return found


# =============================================================================
# FastAPI Dependency Injection
# =============================================================================


def get_transcription_pipeline_dependency():
    """
    FastAPI dependency for TranscriptionPipeline.

    Usage in routes:
        @router.post("/transcribe")
        async def transcribe(
            pipeline: TranscriptionPipeline = Depends(get_transcription_pipeline_dependency)
        ):
            ...
    """
    from core.container import get_transcription_pipeline

    return get_transcription_pipeline()


def get_model_cache_dependency():
    """FastAPI dependency for IModelCache."""
    from core.container import get_model_cache

    return get_model_cache()
