"""
Linker path exposure for installed shared libraries.

On POSIX targets the whisper executable links against libwhisper/libggml
that live next to it, so their directory must be on the dynamic linker
search path of every child process. The variable is updated in the
current process environment and, optionally, persisted to a shell profile.
"""

import os
import re
import threading
from pathlib import Path
from typing import MutableMapping, Optional

from core.constants import LIBRARY_PATH_VARIABLES
from core.logger import logger
from core.messages import LogMessages
from interfaces.environment_configurator import EnvironmentConfigurator
from models.schemas import PlatformTarget

_ENV_LOCK = threading.Lock()


class NoopEnvironmentConfigurator(EnvironmentConfigurator):
    """Used where DLLs are resolved from the executable's directory (win32)."""

    def expose_library_dir(self, directory: Path) -> bool:
        return False


class LibraryPathConfigurator(EnvironmentConfigurator):
    """
    Prepends directories to a linker search path variable.

    Reads and writes of the variable and the profile are serialized by a
    module-wide lock shared by every instance.
    """

    def __init__(
        self,
        variable: str = "LD_LIBRARY_PATH",
        shell_profile: Optional[Path] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ):
        self.variable = variable
        self.shell_profile = Path(shell_profile).expanduser() if shell_profile else None
        self._environ = os.environ if environ is None else environ
        self._export_pattern = re.compile(
            rf'^export\s+{re.escape(variable)}="([^"]*)"[ \t]*$', re.MULTILINE
        )

    def expose_library_dir(self, directory: Path) -> bool:
        directory = str(Path(directory).resolve())
        with _ENV_LOCK:
            changed = self._update_environ(directory)
            if self.shell_profile is not None:
                changed = self._update_profile(directory) or changed
        return changed

    def _update_environ(self, directory: str) -> bool:
        current = self._environ.get(self.variable, "")
        entries = [entry for entry in current.split(os.pathsep) if entry]

        if directory in entries:
            logger.debug(
                LogMessages.LIBRARY_PATH_PRESENT.format(
                    variable=self.variable, path=directory
                )
            )
            return False

        value = os.pathsep.join([directory, *entries])
        self._environ[self.variable] = value
        logger.info(
            LogMessages.LIBRARY_PATH_UPDATED.format(variable=self.variable, value=value)
        )
        return True

    def _update_profile(self, directory: str) -> bool:
        """Rewrite or append the export line; failures only log a warning."""
        profile = self.shell_profile
        try:
            content = profile.read_text(encoding="utf-8") if profile.exists() else ""
            match = self._export_pattern.search(content)

            if match:
                entries = [e for e in match.group(1).split(os.pathsep) if e]
                if directory in entries:
                    return False
                value = os.pathsep.join([directory, *entries])
                line = f'export {self.variable}="{value}"'
                content = content[: match.start()] + line + content[match.end() :]
            else:
                line = f'export {self.variable}="{directory}:${self.variable}"'
                if content and not content.endswith("\n"):
                    content += "\n"
                content += line + "\n"

            profile.parent.mkdir(parents=True, exist_ok=True)
            profile.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.warning(
                LogMessages.PROFILE_UPDATE_FAILED.format(
                    variable=self.variable, profile=profile, error=e
                )
            )
            return False

        logger.info(
            LogMessages.PROFILE_UPDATED.format(variable=self.variable, profile=profile)
        )
        return True


def get_environment_configurator(target: PlatformTarget) -> EnvironmentConfigurator:
    """
    Configurator appropriate for ``target``.

    Reads UPDATE_SHELL_PROFILE / SHELL_PROFILE_PATH from settings.
    """
    variable = LIBRARY_PATH_VARIABLES.get(target.platform)
    if not target.is_posix or variable is None:
        return NoopEnvironmentConfigurator()

    from core.config import get_settings

    settings = get_settings()
    profile = Path(settings.shell_profile_path) if settings.update_shell_profile else None
    return LibraryPathConfigurator(variable=variable, shell_profile=profile)
