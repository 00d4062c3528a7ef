"""
Assets Infrastructure - platform binaries and their shared libraries.

This module provides:
- AssetManifest: Static index of downloadable files per platform
- AssetProvisioner: Idempotent installer (implements IAssetProvisioner)
- LibraryPathConfigurator: Linker path exposure (implements EnvironmentConfigurator)
"""

from .environment import (
    LibraryPathConfigurator,
    NoopEnvironmentConfigurator,
    get_environment_configurator,
)
from .manifest import AssetManifest, get_asset_manifest
from .platform import detect_platform_target, resolve_platform_target
from .provisioner import AssetProvisioner, get_asset_provisioner

__all__ = [
    "AssetManifest",
    "AssetProvisioner",
    "LibraryPathConfigurator",
    "NoopEnvironmentConfigurator",
    "detect_platform_target",
    "get_asset_manifest",
    "get_asset_provisioner",
    "get_environment_configurator",
    "resolve_platform_target",
]
