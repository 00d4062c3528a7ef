"""
Model Cache Interface - maps model names to cached model files.
"""

from abc import ABC, abstractmethod
from typing import Dict

from models.schemas import ModelResult


class IModelCache(ABC):
    """
    Abstract interface for transcription model provisioning.

    Implementations:
    - infrastructure.whisper.model_cache.ModelCache
    """

    @abstractmethod
    async def ensure_model(self, name: str) -> ModelResult:
        """
        Ensure a model file exists locally, downloading it on first use.

        Args:
            name: Model identifier, or "all" for every model

        Returns:
            ModelResult (never raises for expected failures)
        """
        pass

    @abstractmethod
    def list_available_models(self) -> Dict[str, bool]:
        """
        Map every supported model name to whether it is cached.
        """
        pass
