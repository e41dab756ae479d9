"""
Shared utility helpers for filesystem, processes, and strings.
"""

from .filesystem import (
    UnsafePathError,
    copy_files,
    ensure_directory,
    is_within,
    replace_directory,
    reset_directory,
    safe_rmtree,
    safe_unlink,
    write_text_file,
)
from .process import CommandResult, resolve_executable, run_command
from .text import format_command, slugify

__all__ = [
    "UnsafePathError",
    "copy_files",
    "ensure_directory",
    "is_within",
    "replace_directory",
    "reset_directory",
    "safe_rmtree",
    "safe_unlink",
    "write_text_file",
    "CommandResult",
    "resolve_executable",
    "run_command",
    "format_command",
    "slugify",
]
