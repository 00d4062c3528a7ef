"""
Async subprocess helper shared by the converter and engine wrappers.

Runs a command to completion, capturing stdout/stderr as text, with an
optional wall-clock deadline.
"""

import asyncio
import contextlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from core.errors import SubprocessError, SubprocessTimeoutError
from core.logger import logger
from core.messages import ErrorMessages


@dataclass(frozen=True)
class ProcessResult:
    """Completed child process."""

    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# Signature shared by run_process and test doubles
ProcessRunner = Callable[..., Awaitable[ProcessResult]]


async def run_process(
    command: Sequence[str],
    timeout: Optional[float] = None,
    env: Optional[Dict[str, str]] = None,
) -> ProcessResult:
    """
    Spawn ``command`` and wait for it to exit.

    Args:
        command: Program and arguments (no shell)
        timeout: Seconds before the child is killed; None waits indefinitely
        env: Environment for the child (defaults to os.environ at call time)

    Returns:
        ProcessResult, regardless of exit code

    Raises:
        SubprocessError: If the program cannot be started
        SubprocessTimeoutError: If the deadline expires
    """
    command = [str(part) for part in command]
    program = Path(command[0]).name

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env if env is not None else dict(os.environ),
        )
    except OSError as e:
        raise SubprocessError(
            ErrorMessages.PROCESS_START_FAILED.format(program=program, error=e)
        ) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        # The child may exit on its own before the kill lands
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        _, stderr = await process.communicate()
        stderr_text = stderr.decode("utf-8", errors="replace") if stderr else ""
        logger.error(f"{program} killed after {timeout}s deadline")
        raise SubprocessTimeoutError(
            ErrorMessages.PROCESS_TIMEOUT.format(program=program, timeout=timeout),
            returncode=process.returncode,
            stderr=stderr_text,
        )

    result = ProcessResult(
        command=command,
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    logger.debug(f"{program} exited with code {result.returncode}")
    return result
