"""
Environment Configurator Interface - exposes installed shared libraries to
the dynamic linker of future child processes.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class EnvironmentConfigurator(ABC):
    """
    Capability to mutate process-wide linker search path state.

    Implementations:
    - infrastructure.assets.environment.LibraryPathConfigurator (POSIX)
    - infrastructure.assets.environment.NoopEnvironmentConfigurator
    """

    @abstractmethod
    def expose_library_dir(self, directory: Path) -> bool:
        """
        Make ``directory`` part of the linker search path.

        Must be idempotent.

        Returns:
            True if any state was changed, False if already present
        """
        pass
