"""
Configuration management using Pydantic Settings.
Follows Single Responsibility Principle - only handles configuration.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),  # Allow 'model_*' fields
    )

    # Application
    app_name: str = Field(default="Audio2Text API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=True, alias="DEBUG")

    # API Service
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    api_reload: bool = Field(default=False, alias="API_RELOAD")
    api_workers: int = Field(default=1, alias="API_WORKERS")
    max_upload_size_mb: int = Field(default=500, alias="MAX_UPLOAD_SIZE_MB")
    # Provision binaries and the default model when the API starts
    provision_on_startup: bool = Field(default=True, alias="PROVISION_ON_STARTUP")

    # Storage (temporary processing)
    temp_dir: str = Field(default="/tmp/stt_processing", alias="TEMP_DIR")

    # Assets: binaries land in BIN_DIR/<platform>/, models in MODELS_DIR
    bin_dir: str = Field(default="assets/bin", alias="BIN_DIR")
    models_dir: str = Field(default="assets/models", alias="MODELS_DIR")
    # Empty means the manifest packaged with infrastructure/assets
    manifest_path: Optional[str] = Field(default=None, alias="MANIFEST_PATH")
    asset_base_url: str = Field(
        default="https://github.com/rn0x/Audio2TextJS/raw/main/src/bin",
        alias="ASSET_BASE_URL",
    )
    model_source_url: str = Field(
        default="https://huggingface.co/ggerganov/whisper.cpp",
        alias="MODEL_SOURCE_URL",
    )
    diarize_model_source_url: str = Field(
        default="https://huggingface.co/akashmjn/tinydiarize-whisper.cpp",
        alias="DIARIZE_MODEL_SOURCE_URL",
    )
    model_download_concurrency: int = Field(
        default=4, alias="MODEL_DOWNLOAD_CONCURRENCY"
    )

    # Platform overrides (default: detected from the running interpreter)
    target_platform: Optional[str] = Field(default=None, alias="TARGET_PLATFORM")
    target_arch: Optional[str] = Field(default=None, alias="TARGET_ARCH")

    # Dynamic linker path exposure (POSIX only)
    update_shell_profile: bool = Field(default=True, alias="UPDATE_SHELL_PROFILE")
    shell_profile_path: str = Field(default="~/.bashrc", alias="SHELL_PROFILE_PATH")

    # Whisper engine defaults
    whisper_model: str = Field(default="base", alias="WHISPER_MODEL")
    whisper_language: str = Field(default="auto", alias="WHISPER_LANGUAGE")
    whisper_threads: int = Field(default=4, alias="WHISPER_THREADS")
    whisper_processors: int = Field(default=1, alias="WHISPER_PROCESSORS")
    whisper_duration_ms: int = Field(
        default=0, alias="WHISPER_DURATION_MS"
    )  # 0 = whole file
    whisper_max_len: int = Field(default=0, alias="WHISPER_MAX_LEN")  # 0 = no limit
    # Comma separated subset of json,txt,csv
    whisper_output_formats: str = Field(
        default="json", alias="WHISPER_OUTPUT_FORMATS"
    )
    whisper_translate: bool = Field(default=False, alias="WHISPER_TRANSLATE")
    # Wall-clock deadline for the engine process; unset = wait indefinitely
    whisper_timeout_seconds: Optional[float] = Field(
        default=None, alias="WHISPER_TIMEOUT_SECONDS"
    )

    # Audio normalization
    target_sample_rate: int = Field(default=16000, alias="TARGET_SAMPLE_RATE")
    converter_timeout_seconds: Optional[float] = Field(
        default=None, alias="CONVERTER_TIMEOUT_SECONDS"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Log format: "console" (colored, human-readable) or "json" (for log aggregation)
    log_format: str = Field(default="console", alias="LOG_FORMAT")
    # Enable/disable file logging (logs/app.log and logs/error.log)
    log_file_enabled: bool = Field(default=False, alias="LOG_FILE_ENABLED")
    log_dir: str = Field(default="logs", alias="LOG_DIR")
    # Log level for the command line tool
    script_log_level: str = Field(default="INFO", alias="SCRIPT_LOG_LEVEL")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Using lru_cache to ensure single instance (Singleton pattern).
    """
    return Settings()
