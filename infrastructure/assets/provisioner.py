"""
Asset Provisioner - installs platform executables and their shared libraries.

Implements IAssetProvisioner interface for dependency injection.

Files land at ``<install_dir>/<relative_path>``, so ``linux/whisper``
installs into ``<install_dir>/linux/whisper``. A file already present is
never re-downloaded.
"""

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from core.constants import AssetStatus, Component, ErrorKind
from core.errors import STTError
from core.logger import logger
from core.messages import ErrorMessages, LogMessages
from infrastructure.assets.environment import get_environment_configurator
from infrastructure.assets.manifest import AssetManifest, get_asset_manifest
from interfaces.asset_provisioner import IAssetProvisioner
from interfaces.environment_configurator import EnvironmentConfigurator
from interfaces.file_downloader import IFileDownloader
from models.schemas import (
    AssetBatch,
    AssetDescriptor,
    FailedAsset,
    InstalledAsset,
    PlatformTarget,
    ProvisionResult,
)

EXECUTABLE_MODE = 0o755


class AssetProvisioner(IAssetProvisioner):
    """
    Manifest driven installer.

    Collaborators default to the process-wide singletons; tests inject
    their own manifest, downloader and configurator.
    """

    def __init__(
        self,
        manifest: Optional[AssetManifest] = None,
        install_dir: Optional[Path] = None,
        downloader: Optional[IFileDownloader] = None,
        environment: Optional[EnvironmentConfigurator] = None,
    ):
        if install_dir is None:
            from core.config import get_settings

            install_dir = get_settings().bin_dir

        if downloader is None:
            from infrastructure.http import get_file_downloader

            downloader = get_file_downloader()

        self.manifest = manifest or get_asset_manifest()
        self.install_dir = Path(install_dir)
        self.downloader = downloader
        self._environment = environment

    def install_path(self, descriptor: AssetDescriptor) -> Path:
        return self.install_dir / descriptor.relative_path

    def executable_path(
        self, target: PlatformTarget, component: Component
    ) -> Optional[Path]:
        for descriptor in self.manifest.entries_for(target, Component(component)):
            path = self.install_path(descriptor)
            if path.exists():
                return path
        return None

    def _resolve_components(
        self, target: PlatformTarget, component_ids: Iterable[str]
    ) -> Tuple[List[AssetDescriptor], Optional[ProvisionResult]]:
        """Validate the request before touching the filesystem."""
        ids = list(component_ids or [])
        if not ids or not all(isinstance(i, str) and i for i in ids):
            return [], ProvisionResult.fatal(
                ErrorMessages.COMPONENTS_EMPTY, ErrorKind.INVALID_INPUT
            )

        known = self.manifest.components()
        primaries: List[AssetDescriptor] = []
        for component_id in dict.fromkeys(ids):
            if component_id not in known:
                return [], ProvisionResult.fatal(
                    ErrorMessages.COMPONENT_UNKNOWN.format(
                        component=component_id, known=", ".join(known)
                    ),
                    ErrorKind.NOT_FOUND,
                )

            entries = self.manifest.entries_for(target, Component(component_id))
            if not entries:
                return [], ProvisionResult.fatal(
                    ErrorMessages.COMPONENT_NO_FILES.format(
                        component=component_id,
                        platform=target.platform.value,
                        arch=target.architecture.value,
                    ),
                    ErrorKind.UNSUPPORTED_PLATFORM,
                )
            primaries.extend(entries)

        return primaries, None

    async def _install(
        self, descriptors: Iterable[AssetDescriptor], dependency: bool = False
    ) -> AssetBatch:
        """Ensure each descriptor exists on disk."""
        exists_msg = LogMessages.DEPENDENCY_EXISTS if dependency else LogMessages.ASSET_EXISTS
        done_msg = (
            LogMessages.DEPENDENCY_DOWNLOADED if dependency else LogMessages.ASSET_DOWNLOADED
        )
        failed_msg = LogMessages.DEPENDENCY_FAILED if dependency else LogMessages.ASSET_FAILED

        success: List[InstalledAsset] = []
        failed: List[FailedAsset] = []

        for descriptor in descriptors:
            path = self.install_path(descriptor)

            if path.exists():
                logger.info(exists_msg.format(filename=descriptor.filename, path=path))
                success.append(
                    InstalledAsset(
                        id=descriptor.id,
                        filename=descriptor.filename,
                        path=str(path),
                        status=AssetStatus.EXISTS,
                    )
                )
                continue

            try:
                await self.downloader.download(descriptor.url, path)
            except STTError as e:
                logger.error(failed_msg.format(filename=descriptor.filename, error=e))
                failed.append(
                    FailedAsset(
                        id=descriptor.id,
                        filename=descriptor.filename,
                        url=descriptor.url,
                        error_kind=e.kind,
                        error=e.message,
                    )
                )
                continue
            except OSError as e:
                logger.error(failed_msg.format(filename=descriptor.filename, error=e))
                failed.append(
                    FailedAsset(
                        id=descriptor.id,
                        filename=descriptor.filename,
                        url=descriptor.url,
                        error=str(e),
                    )
                )
                continue

            logger.info(done_msg.format(filename=descriptor.filename, path=path))
            success.append(
                InstalledAsset(
                    id=descriptor.id,
                    filename=descriptor.filename,
                    path=str(path),
                    status=AssetStatus.DOWNLOADED,
                )
            )

        return AssetBatch(success=tuple(success), failed=tuple(failed))

    @staticmethod
    def _make_executable(path: Path) -> None:
        try:
            os.chmod(path, EXECUTABLE_MODE)
        except OSError as e:
            logger.warning(f"Failed to set permissions on {path}: {e}")
            return
        logger.debug(f"Permissions set to 755 for {path}")

    def _expose_libraries(
        self, target: PlatformTarget, dependencies: Iterable[AssetDescriptor]
    ) -> None:
        environment = self._environment or get_environment_configurator(target)

        directories: Dict[str, Path] = {}
        platform_dir = self.install_dir / target.platform.value
        directories[str(platform_dir)] = platform_dir
        for descriptor in dependencies:
            parent = self.install_path(descriptor).parent
            directories.setdefault(str(parent), parent)

        for directory in directories.values():
            environment.expose_library_dir(directory)

    async def provision(
        self, target: PlatformTarget, component_ids: Iterable[str]
    ) -> ProvisionResult:
        primaries, error = self._resolve_components(target, component_ids)
        if error is not None:
            logger.error(error.error)
            return error

        components = sorted({d.component.value for d in primaries})
        logger.info(
            LogMessages.PROVISION_START.format(
                components=", ".join(components),
                platform=target.platform.value,
                arch=target.architecture.value,
                dest=self.install_dir,
            )
        )
        self.install_dir.mkdir(parents=True, exist_ok=True)

        files = await self._install(primaries)

        # Dependency closure, each file once even if shared between components
        closure: Dict[str, AssetDescriptor] = {}
        for primary in primaries:
            for dep in self.manifest.dependencies_of(primary):
                closure.setdefault(dep.id, dep)
        dependencies = await self._install(closure.values(), dependency=True)

        if target.is_posix:
            for installed in files.success:
                self._make_executable(Path(installed.path))
            self._expose_libraries(target, closure.values())

        all_present = all(
            self.install_path(d).exists() for d in [*primaries, *closure.values()]
        )
        result = ProvisionResult(
            success=all_present and not files.failed and not dependencies.failed,
            files=files,
            dependencies=dependencies,
        )

        logger.info(
            LogMessages.PROVISION_DONE.format(
                success=result.success,
                files=len(files.success),
                dependencies=len(dependencies.success),
                failed=len(result.failed),
            )
        )
        return result


# Global singleton instance
_asset_provisioner: Optional[AssetProvisioner] = None


def get_asset_provisioner() -> AssetProvisioner:
    """Get or create global AssetProvisioner instance (singleton)."""
    global _asset_provisioner

    if _asset_provisioner is None:
        logger.info("Creating AssetProvisioner instance...")
        _asset_provisioner = AssetProvisioner()

    return _asset_provisioner
