"""
Exceptions raised while building the documentation site.
"""

from __future__ import annotations

from typing import Optional, Sequence


class BuildError(RuntimeError):
    """Base class for failures that abort a build."""


class ToolNotFoundError(BuildError):
    """Raised when an external tool cannot be located on PATH."""

    def __init__(self, tool: str, step: Optional[str] = None) -> None:
        self.tool = tool
        self.step = step
        where = f" (needed by step '{step}')" if step else ""
        super().__init__(f"Required tool '{tool}' was not found on PATH{where}")


class BuildStepError(BuildError):
    """
    Raised when a build step fails.

    Attributes:
        step: Name of the failing step.
        command: The argv that was executed, if the failure came from a tool.
        returncode: Exit status of the tool, or None for non-process failures.
    """

    def __init__(
        self,
        step: str,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ) -> None:
        self.step = step
        self.command = list(command) if command else None
        self.returncode = returncode
        super().__init__(f"Step '{step}' failed: {message}")
