"""
Asset Manifest - static description of every downloadable binary.

The manifest file maps a platform name to an ordered list of records:

    {"linux": [{"component": "whisper", "filename": "whisper",
                "url": "{base_url}/linux/whisper", "path": "linux/whisper",
                "architecture": "x64",
                "dependencies": [{"filename": ..., "url": ..., "path": ...}]}]}

Inline dependency records become descriptors of their own, referenced from
the primary descriptor by id.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from core.constants import Architecture, Component, Platform
from core.errors import InvalidInputError, NotFoundError
from core.logger import logger
from core.messages import ErrorMessages
from models.schemas import AssetDescriptor, PlatformTarget

DEFAULT_MANIFEST_PATH = Path(__file__).parent / "bin_files.json"


class ManifestDependency(BaseModel):
    filename: str
    url: str
    path: str


class ManifestRecord(BaseModel):
    component: Component
    filename: str
    url: str
    path: str
    architecture: Architecture
    dependencies: List[ManifestDependency] = Field(default_factory=list)


def asset_id(platform: Platform, relative_path: str) -> str:
    return f"{platform.value}/{relative_path}"


class AssetManifest:
    """Immutable index of AssetDescriptors keyed by id."""

    def __init__(self, descriptors: Iterable[AssetDescriptor]):
        self._descriptors: Dict[str, AssetDescriptor] = {}
        for descriptor in descriptors:
            self._descriptors.setdefault(descriptor.id, descriptor)
        self.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, list], base_url: str = "") -> "AssetManifest":
        """
        Build a manifest from its JSON structure.

        Raises:
            InvalidInputError: If a record is malformed or a platform unknown
        """
        base_url = base_url.rstrip("/")
        descriptors: List[AssetDescriptor] = []

        try:
            for platform_name, records in data.items():
                platform = Platform(platform_name)
                for raw in records:
                    record = ManifestRecord.model_validate(raw)
                    dependency_ids = []

                    for dep in record.dependencies:
                        dep_id = asset_id(platform, dep.path)
                        dependency_ids.append(dep_id)
                        descriptors.append(
                            AssetDescriptor(
                                id=dep_id,
                                filename=dep.filename,
                                platform=platform,
                                architecture=record.architecture,
                                url=dep.url.replace("{base_url}", base_url),
                                relative_path=dep.path,
                            )
                        )

                    descriptors.append(
                        AssetDescriptor(
                            id=asset_id(platform, record.path),
                            component=record.component,
                            filename=record.filename,
                            platform=platform,
                            architecture=record.architecture,
                            url=record.url.replace("{base_url}", base_url),
                            relative_path=record.path,
                            dependencies=tuple(dependency_ids),
                        )
                    )
        except (ValidationError, ValueError, TypeError, AttributeError) as e:
            raise InvalidInputError(ErrorMessages.MANIFEST_INVALID.format(error=e)) from e

        return cls(descriptors)

    @classmethod
    def load(
        cls, path: Optional[Path] = None, base_url: Optional[str] = None
    ) -> "AssetManifest":
        """
        Read the manifest JSON file.

        Args:
            path: Manifest file (default: MANIFEST_PATH or the packaged one)
            base_url: Substituted for ``{base_url}`` (default: ASSET_BASE_URL)
        """
        from core.config import get_settings

        settings = get_settings()
        path = Path(path or settings.manifest_path or DEFAULT_MANIFEST_PATH)
        base_url = settings.asset_base_url if base_url is None else base_url

        if not path.exists():
            raise NotFoundError(ErrorMessages.MANIFEST_NOT_FOUND.format(path=path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidInputError(ErrorMessages.MANIFEST_INVALID.format(error=e)) from e

        manifest = cls.from_dict(data, base_url=base_url)
        logger.debug(f"Loaded asset manifest {path} ({len(manifest)} entries)")
        return manifest

    def validate(self) -> None:
        """Every dependency must resolve to a descriptor on the same platform."""
        for descriptor in self._descriptors.values():
            for dep_id in descriptor.dependencies:
                dep = self._descriptors.get(dep_id)
                if dep is None or dep.platform != descriptor.platform:
                    raise InvalidInputError(
                        ErrorMessages.MANIFEST_DEPENDENCY_UNRESOLVED.format(
                            dependency=dep_id,
                            asset=descriptor.id,
                            platform=descriptor.platform.value,
                        )
                    )

    def __len__(self) -> int:
        return len(self._descriptors)

    def get(self, descriptor_id: str) -> AssetDescriptor:
        return self._descriptors[descriptor_id]

    def components(self) -> List[str]:
        """Component names that have at least one entry on any platform."""
        found = {d.component for d in self._descriptors.values() if d.component}
        return [c.value for c in Component if c in found]

    def entries_for(
        self, target: PlatformTarget, component: Component
    ) -> List[AssetDescriptor]:
        """Primary descriptors of ``component`` built for ``target``."""
        return [
            d
            for d in self._descriptors.values()
            if d.component == component
            and d.platform == target.platform
            and d.architecture == target.architecture
        ]

    def dependencies_of(self, descriptor: AssetDescriptor) -> List[AssetDescriptor]:
        return [self._descriptors[dep_id] for dep_id in descriptor.dependencies]


_manifest: Optional[AssetManifest] = None


def get_asset_manifest() -> AssetManifest:
    """Get or load global AssetManifest instance (singleton)."""
    global _manifest

    if _manifest is None:
        _manifest = AssetManifest.load()

    return _manifest
