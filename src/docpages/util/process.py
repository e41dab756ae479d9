"""
Run external build tools (cargo, wasm-pack) and turn failures into exceptions.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import BuildStepError, ToolNotFoundError
from .text import format_command

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """
    Outcome of a single tool invocation.

    Attributes:
        argv: The command line that was run.
        cwd: Working directory of the process.
        returncode: Exit status (0 for dry runs).
        duration: Wall-clock seconds spent.
        dry_run: True when the command was only logged.
    """
    argv: List[str]
    cwd: Path
    returncode: int
    duration: float = 0.0
    dry_run: bool = False


def resolve_executable(name: str, *, step: Optional[str] = None) -> str:
    """
    Return the absolute path of an executable, searching PATH for bare names.

    Raises:
        ToolNotFoundError: If the executable cannot be found.
    """
    found = shutil.which(name)
    if found is None:
        raise ToolNotFoundError(name, step)
    return found


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path,
    step: str,
    timeout: Optional[int] = None,
    dry_run: bool = False,
) -> CommandResult:
    """
    Run a tool to completion, letting its output stream to the terminal.

    Raises:
        ToolNotFoundError: If argv[0] is not on PATH.
        BuildStepError: On a non-zero exit status or when the timeout expires.
    """
    command = list(argv)
    if dry_run:
        logger.info("Dry-run: would run `%s` in %s", format_command(command), cwd)
        return CommandResult(argv=command, cwd=cwd, returncode=0, dry_run=True)

    executable = resolve_executable(command[0], step=step)
    logger.info("Running `%s` in %s", format_command(command), cwd)
    started = time.monotonic()
    try:
        completed = subprocess.run([executable, *command[1:]], cwd=cwd, check=False, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise BuildStepError(step, f"`{format_command(command)}` timed out after {timeout}s", command=command) from exc
    duration = time.monotonic() - started

    if completed.returncode != 0:
        raise BuildStepError(
            step,
            f"`{format_command(command)}` exited with status {completed.returncode}",
            command=command,
            returncode=completed.returncode,
        )
    logger.debug("`%s` finished in %.1fs", command[0], duration)
    return CommandResult(argv=command, cwd=cwd, returncode=completed.returncode, duration=duration)
