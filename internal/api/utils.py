"""
API utility functions for unified response formatting.

All responses follow the format:
{
    "error_code": int,      # 0 = success, 1+ = error
    "message": str,         # Human-readable message
    "data": Any,            # Response data (omit if empty)
    "errors": Any           # Validation/error details (omit if none)
}
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from core.constants import ErrorKind

# HTTP status per pipeline error kind
ERROR_KIND_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INVALID_MODEL: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNSUPPORTED_PLATFORM: 501,
    ErrorKind.TRANSPORT_FAILURE: 502,
    ErrorKind.SUBPROCESS_FAILURE: 500,
    ErrorKind.ARTIFACT_MISSING: 500,
}


def status_for_error_kind(kind: Optional[ErrorKind], default: int = 500) -> int:
    if kind is None:
        return default
    return ERROR_KIND_STATUS.get(ErrorKind(kind), default)


def success_response(
    message: str = "Success",
    data: Any = None,
) -> Dict[str, Any]:
    """
    Create a success response dictionary.

    Example:
        >>> success_response("Model ready", {"modelName": "base"})
        {"error_code": 0, "message": "Model ready", "data": {"modelName": "base"}}
    """
    response = {"error_code": 0, "message": message}
    if data is not None:
        response["data"] = data
    return response


def error_response(
    message: str,
    error_code: int = 1,
    errors: Any = None,
) -> Dict[str, Any]:
    """
    Create an error response dictionary.

    Args:
        message: Error message
        error_code: Error code (default: 1)
        errors: Detailed error info (validation errors, etc.)
    """
    response = {"error_code": error_code, "message": message}
    if errors is not None:
        response["errors"] = errors
    return response


def json_success_response(
    message: str = "Success",
    data: Any = None,
    status_code: int = 200,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=success_response(message=message, data=data),
    )


def json_error_response(
    message: str,
    status_code: int = 500,
    error_code: int = 1,
    errors: Any = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(message=message, error_code=error_code, errors=errors),
    )
