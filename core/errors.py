"""
Exception hierarchy for the pipeline.

Components raise these internally and convert them into structured
result values at their public boundary.
"""

from typing import Optional

from core.constants import ErrorKind


class STTError(Exception):
    """Base error carrying an ErrorKind."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(STTError):
    kind = ErrorKind.INVALID_INPUT


class InvalidModelError(InvalidInputError):
    kind = ErrorKind.INVALID_MODEL


class UnsupportedPlatformError(STTError):
    kind = ErrorKind.UNSUPPORTED_PLATFORM


class NotFoundError(STTError):
    kind = ErrorKind.NOT_FOUND


class TransportError(STTError):
    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class SubprocessError(STTError):
    kind = ErrorKind.SUBPROCESS_FAILURE

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class SubprocessTimeoutError(SubprocessError):
    """Child process exceeded its deadline and was killed."""


class ArtifactMissingError(STTError):
    kind = ErrorKind.ARTIFACT_MISSING


__all__ = [
    "STTError",
    "InvalidInputError",
    "InvalidModelError",
    "UnsupportedPlatformError",
    "NotFoundError",
    "TransportError",
    "SubprocessError",
    "SubprocessTimeoutError",
    "ArtifactMissingError",
]
