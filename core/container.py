"""
Dependency Injection Container.

Maps interfaces (interfaces/) to the infrastructure implementations used
by the API service and the CLI.
"""

from typing import Any, Callable, Dict, Type, TypeVar

from core.logger import logger

T = TypeVar("T")


class Container:
    """
    Process-wide registry from interface type to implementation.

    ``register`` stores a ready instance; ``register_factory`` stores a
    callable invoked on every ``resolve``. The infrastructure factories are
    themselves memoized, so resolving twice yields the same object.
    """

    _instances: Dict[Type, Any] = {}
    _providers: Dict[Type, Callable[[], Any]] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, interface: Type[T], instance: Any) -> None:
        cls._instances[interface] = instance

    @classmethod
    def register_factory(cls, interface: Type[T], factory: Callable[[], T]) -> None:
        cls._providers[interface] = factory

    @classmethod
    def resolve(cls, interface: Type[T]) -> T:
        """
        Raises:
            KeyError: If nothing is registered for ``interface``
        """
        if interface in cls._instances:
            return cls._instances[interface]
        if interface in cls._providers:
            return cls._providers[interface]()
        raise KeyError(f"No provider registered for {interface.__name__}")

    @classmethod
    def is_registered(cls, interface: Type[T]) -> bool:
        return interface in cls._instances or interface in cls._providers

    @classmethod
    def clear(cls) -> None:
        """Drop every registration. Tests call this between cases."""
        cls._instances.clear()
        cls._providers.clear()
        cls._initialized = False

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    def _mark_initialized(cls) -> None:
        cls._initialized = True


def bootstrap_container() -> None:
    """
    Initialize the dependency injection container.

    Registers all interface implementations:
    - IFileDownloader -> HttpFileDownloader
    - IAssetProvisioner -> AssetProvisioner
    - IModelCache -> ModelCache
    - IAudioNormalizer -> FFmpegAudioNormalizer
    - ITranscriptionRunner -> WhisperRunner
    - TranscriptionPipeline -> TranscriptionPipeline (with injected dependencies)

    This function is idempotent - calling it multiple times has no effect
    after the first successful initialization.
    """
    if Container.is_initialized():
        return

    logger.info("Bootstrapping dependency injection container...")

    try:
        # Import interfaces
        from interfaces import (
            IAssetProvisioner,
            IAudioNormalizer,
            IFileDownloader,
            IModelCache,
            ITranscriptionRunner,
        )

        # Import implementations
        from infrastructure.assets import get_asset_provisioner
        from infrastructure.ffmpeg import get_audio_normalizer
        from infrastructure.http import get_file_downloader
        from infrastructure.whisper import get_model_cache, get_whisper_runner

        # Import services
        from services.transcription import TranscriptionPipeline

        Container.register_factory(IFileDownloader, get_file_downloader)
        logger.info("Registered IFileDownloader -> HttpFileDownloader (factory)")

        Container.register_factory(IAssetProvisioner, get_asset_provisioner)
        logger.info("Registered IAssetProvisioner -> AssetProvisioner (factory)")

        Container.register_factory(IModelCache, get_model_cache)
        logger.info("Registered IModelCache -> ModelCache (factory)")

        Container.register_factory(IAudioNormalizer, get_audio_normalizer)
        logger.info("Registered IAudioNormalizer -> FFmpegAudioNormalizer (factory)")

        Container.register_factory(ITranscriptionRunner, get_whisper_runner)
        logger.info("Registered ITranscriptionRunner -> WhisperRunner (factory)")

        # Single pipeline shared by all requests
        pipeline = TranscriptionPipeline(
            model_cache=Container.resolve(IModelCache),
            normalizer=Container.resolve(IAudioNormalizer),
            runner=Container.resolve(ITranscriptionRunner),
            provisioner=Container.resolve(IAssetProvisioner),
        )
        Container.register(TranscriptionPipeline, pipeline)
        logger.info("Registered TranscriptionPipeline with DI (singleton)")

        Container._mark_initialized()
        logger.info("Dependency injection container bootstrapped successfully")

    except Exception as e:
        logger.error(f"Failed to bootstrap container: {e}")
        logger.exception("Container bootstrap error details:")
        raise


def get_model_cache():
    """
    Get IModelCache implementation from container.
    """
    from interfaces import IModelCache

    if not Container.is_initialized():
        bootstrap_container()

    return Container.resolve(IModelCache)


def get_asset_provisioner():
    """
    Get IAssetProvisioner implementation from container.
    """
    from interfaces import IAssetProvisioner

    if not Container.is_initialized():
        bootstrap_container()

    return Container.resolve(IAssetProvisioner)


def get_transcription_pipeline():
    """
    Get TranscriptionPipeline from container.

    Returns:
        TranscriptionPipeline with injected dependencies
    """
    from services.transcription import TranscriptionPipeline

    if not Container.is_initialized():
        bootstrap_container()

    return Container.resolve(TranscriptionPipeline)
