"""
Asset Provisioner Interface - ensures platform binaries are installed.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from core.constants import Component
from models.schemas import PlatformTarget, ProvisionResult


class IAssetProvisioner(ABC):
    """
    Abstract interface for installing executables and their shared libraries.

    Implementations:
    - infrastructure.assets.provisioner.AssetProvisioner
    """

    @abstractmethod
    async def provision(
        self, target: PlatformTarget, component_ids: Iterable[str]
    ) -> ProvisionResult:
        """
        Download every missing file for the requested components.

        Args:
            target: Platform/architecture to provision for
            component_ids: Non-empty collection of component names

        Returns:
            ProvisionResult (never raises for expected failures)
        """
        pass

    @abstractmethod
    def executable_path(
        self, target: PlatformTarget, component: Component
    ) -> Optional[Path]:
        """
        Installed path of a component's executable, or None if absent.
        """
        pass
