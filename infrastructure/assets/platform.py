"""
Platform detection - resolves the running (platform, architecture) once.
"""

import platform as _platform
import sys
from typing import Optional

from core.constants import ARCHITECTURE_ALIASES, PLATFORM_ALIASES
from core.errors import UnsupportedPlatformError
from core.messages import ErrorMessages
from models.schemas import PlatformTarget


def resolve_platform_target(
    platform_name: Optional[str] = None, arch_name: Optional[str] = None
) -> PlatformTarget:
    """
    Map raw platform/architecture strings onto the closed PlatformTarget.

    Args:
        platform_name: e.g. "linux", "win32" (default: sys.platform)
        arch_name: e.g. "x86_64", "arm64" (default: platform.machine())

    Raises:
        UnsupportedPlatformError: If either value has no mapping
    """
    raw_platform = (platform_name or sys.platform).lower()
    raw_arch = (arch_name or _platform.machine()).lower()

    # sys.platform reports e.g. "linux2" on very old interpreters
    platform = PLATFORM_ALIASES.get(raw_platform) or next(
        (value for key, value in PLATFORM_ALIASES.items() if raw_platform.startswith(key)),
        None,
    )
    if platform is None:
        raise UnsupportedPlatformError(
            ErrorMessages.PLATFORM_UNSUPPORTED.format(platform=raw_platform)
        )

    architecture = ARCHITECTURE_ALIASES.get(raw_arch)
    if architecture is None:
        raise UnsupportedPlatformError(
            ErrorMessages.ARCH_UNSUPPORTED.format(arch=raw_arch)
        )

    return PlatformTarget(platform=platform, architecture=architecture)


_detected_target: Optional[PlatformTarget] = None


def detect_platform_target() -> PlatformTarget:
    """
    PlatformTarget for this process, honouring TARGET_PLATFORM/TARGET_ARCH.

    Resolved on first call and cached.
    """
    global _detected_target

    if _detected_target is None:
        from core.config import get_settings

        settings = get_settings()
        _detected_target = resolve_platform_target(
            settings.target_platform, settings.target_arch
        )
    return _detected_target
