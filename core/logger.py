"""
Centralized logging configuration using Loguru.
Follows Single Responsibility Principle - only handles logging setup.

Features:
- Structured logging with Loguru
- Standard library logging interception (routes stdlib logging to Loguru)
- Third-party library logger configuration (httpx, httpcore, uvicorn)
- Script logging helper for the command line tool
- JSON logging format option for production
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger  # type: ignore


VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
SCRIPT_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


# =============================================================================
# Standard Library Logging Interception
# =============================================================================


class InterceptHandler(logging.Handler):
    """
    Intercept standard library logging and route to Loguru.

    This allows third-party libraries that use stdlib logging to have their
    logs captured and formatted consistently through Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where logging call originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def intercept_standard_logging() -> None:
    """Route Python standard library logging through Loguru."""
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def configure_third_party_loggers() -> None:
    """
    Configure third-party library loggers to reduce noise.

    httpx logs every request at INFO, which is one line per downloaded
    asset; keep those at WARNING.
    """
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Uvicorn loggers - keep at INFO for server events
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)

    logging.getLogger("fastapi").setLevel(logging.INFO)


def _normalize_level(level: Optional[str], default: str = "INFO") -> str:
    level = (level or default).upper()
    return level if level in VALID_LEVELS else default


# =============================================================================
# Script Logging Helper
# =============================================================================


def _add_stream_handler(stream, level: str, fmt, json_format: bool, **kwargs) -> None:
    if json_format:
        logger.add(stream, format=serialize_log_record, level=level, colorize=False, **kwargs)
    else:
        logger.add(stream, format=fmt, level=level, colorize=True, **kwargs)


def configure_script_logging(level: str = "INFO", json_format: bool = False) -> None:
    """
    Configure logging for the command line tool.

    Logs go to stderr so that transcripts printed on stdout can be piped.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output logs in JSON format
    """
    logger.remove()
    _add_stream_handler(sys.stderr, _normalize_level(level), SCRIPT_FORMAT, json_format)

    intercept_standard_logging()
    configure_third_party_loggers()


# =============================================================================
# Service Logging
# =============================================================================


def _skip_reloader(record) -> bool:
    # uvicorn --reload imports the app once more under these names
    return record.get("name", "") not in ("__main__", "__mp_main__")


def _add_file_handlers(log_dir: Path, json_format: bool) -> None:
    """app log at DEBUG and error log at ERROR, both rotated."""
    log_dir.mkdir(parents=True, exist_ok=True)
    suffix = ".json.log" if json_format else ".log"
    formatter = serialize_log_record if json_format else FILE_FORMAT

    for name, level in (("app", "DEBUG"), ("error", "ERROR")):
        logger.add(
            log_dir / f"{name}{suffix}",
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format=formatter,
            level=level,
            colorize=False,
        )


def setup_logger() -> None:
    """
    Configure logger handlers for the API service.

    LOG_FORMAT selects console (colored) or json output, LOG_FILE_ENABLED
    adds rotated files under LOG_DIR. Later calls are no-ops.
    """
    if getattr(setup_logger, "_configured", False):
        return

    from .config import get_settings

    settings = get_settings()
    if settings.log_level:
        log_level = _normalize_level(settings.log_level)
    else:
        log_level = "DEBUG" if settings.debug else "INFO"
    json_format = (settings.log_format or "console").lower() == "json"

    logger.remove()
    _add_stream_handler(
        sys.stdout, log_level, CONSOLE_FORMAT, json_format, filter=_skip_reloader
    )
    if settings.log_file_enabled:
        _add_file_handlers(Path(settings.log_dir), json_format)

    intercept_standard_logging()
    configure_third_party_loggers()
    setup_logger._configured = True


# =============================================================================
# JSON Logging Format
# =============================================================================


def serialize_log_record(record: dict) -> str:
    """
    Serialize log record to a flat JSON dictionary.

    Replaces Loguru's nested JSON serialization with a flattened structure
    suitable for log aggregation.
    """
    log_record = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
    }

    if record.get("exception"):
        exception = record["exception"]
        log_record["exception"] = {
            "type": exception.type.__name__ if exception.type else "Unknown",
            "message": str(exception.value),
        }

    # Context bound via logger.bind()
    if record.get("extra"):
        for key, value in record["extra"].items():
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, OverflowError):
                log_record[key] = str(value)

    # Loguru calls format() on the result: escape braces and color tags
    return (
        json.dumps(log_record).replace("{", "{{").replace("}", "}}").replace("<", "\\<")
        + "\n"
    )


# Configure logger on module import
setup_logger()

__all__ = [
    "logger",
    "configure_script_logging",
    "configure_third_party_loggers",
    "intercept_standard_logging",
    "setup_logger",
    "serialize_log_record",
    "InterceptHandler",
]
