"""
Common API schemas shared across different endpoints.

Unified response format:
{
    "error_code": int,      # 0 = success, 1+ = error
    "message": str,         # Human-readable message
    "data": Any,            # Response data (omit if empty)
    "errors": Any           # Validation/error details (omit if none)
}
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StandardResponse(BaseModel):
    """
    Unified API response format for all endpoints.

    - error_code: 0 = success, 1+ = error
    - message: Human-readable message
    - data: Response data (omit if empty)
    - errors: Validation/error details (omit if none)
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error_code": 0,
                    "message": "Transcription successful",
                    "data": {
                        "success": True,
                        "message": "Whisper process completed successfully.",
                        "output": [
                            {
                                "type": "json",
                                "data": {"transcription": []},
                                "outputFile": "/tmp/stt_processing/a.mp3.TEMP.wav.json",
                            }
                        ],
                    },
                },
                {
                    "error_code": 1,
                    "message": "Invalid model: huge. Valid models: tiny.en, tiny, ...",
                    "errors": {"errorKind": "InvalidModel"},
                },
            ]
        }
    )

    error_code: int = Field(default=0, description="0 = success, 1+ = error")
    message: str = Field(..., description="Human-readable message")
    data: Optional[Any] = Field(default=None, description="Response data")
    errors: Optional[Any] = Field(default=None, description="Error details")


# ============================================================================
# Request / data models
# ============================================================================


class ProvisionRequest(BaseModel):
    """Request body for asset provisioning (empty body = every component)."""

    components: Optional[List[str]] = Field(
        default=None,
        description="Component names (whisper, ffmpeg, ffprobe)",
    )


class HealthData(BaseModel):
    """Data model for health check response."""

    status: str = Field(..., description="Health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    platform: Optional[str] = Field(default=None, description="Detected platform target")
    executables: Dict[str, Optional[str]] = Field(
        default_factory=dict, description="Installed executable per component"
    )
    default_model: Optional[dict] = Field(default=None, description="Default model info")
