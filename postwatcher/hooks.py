"""Post-batch verification hook for PostWatcher."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class Verified:
    """The verification command exited with status 0."""

    pass


@dataclass
class VerificationFailed:
    """The verification command failed or could not be started."""

    code: Optional[int]
    reason: str = ""


VerificationResult = Union[Verified, VerificationFailed]


async def run_verify_hook(command: str, cwd: Path) -> VerificationResult:
    """Run the external verification command and wait for it.

    The command runs through the shell and inherits this process's standard
    streams. A failing command is reported, never raised; the caller decides
    what to do with it.

    Args:
        command: Shell command line
        cwd: Working directory for the command

    Returns:
        Verified or VerificationFailed
    """
    logger.info("Triggering verification: %s", command)
    try:
        process = await asyncio.create_subprocess_shell(command, cwd=str(cwd))
    except OSError as e:
        return VerificationFailed(code=None, reason=str(e))

    code = await process.wait()
    if code == 0:
        return Verified()
    return VerificationFailed(code=code, reason=f"exited with code {code}")
