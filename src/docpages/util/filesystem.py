"""
Filesystem helpers shared across build steps.

Every recursive deletion goes through `safe_rmtree`, which refuses to touch
anything that is not strictly inside the project root.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, List

from filelock import FileLock

logger = logging.getLogger(__name__)


class UnsafePathError(RuntimeError):
    """Raised when a destructive operation targets a path outside its base directory."""


def ensure_directory(path: Path | str) -> Path:
    """
    Ensure a directory exists, returning the resolved Path.
    """
    resolved = Path(path).expanduser().resolve()
    resolved.mkdir(parents=True, exist_ok=True)
    return resolved


def _ensure_parent(target: Path) -> None:
    """Ensure the parent directory for target exists."""
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)


def is_within(path: Path | str, base: Path | str) -> bool:
    """Return True if path is strictly below base (base itself does not count)."""
    target = Path(path).expanduser().resolve()
    root = Path(base).expanduser().resolve()
    if target == root:
        return False
    try:
        target.relative_to(root)
    except ValueError:
        return False
    return True


def _guard(path: Path, base_dir: Path | str, action: str) -> Path:
    target = Path(path).expanduser().resolve()
    if not is_within(target, base_dir):
        raise UnsafePathError(f"Refusing to {action} {target} (not inside {Path(base_dir).resolve()})")
    return target


def safe_rmtree(path: Path | str, *, base_dir: Path | str, dry_run: bool = False) -> bool:
    """
    Recursively delete a directory (or file) inside base_dir.

    Returns True when something was (or, in a dry run, would be) removed.

    Raises:
        UnsafePathError: If path is base_dir itself or lies outside it.
    """
    target = _guard(Path(path), base_dir, "delete")
    if not target.exists():
        return False
    if dry_run:
        logger.info("Dry-run: would delete %s", target)
        return True
    if target.is_dir():
        shutil.rmtree(target)
    else:
        target.unlink()
    logger.debug("Deleted %s", target)
    return True


def safe_unlink(path: Path | str, *, base_dir: Path | str, dry_run: bool = False) -> bool:
    """Safely delete a file within base_dir, optionally dry-running."""
    target = Path(path).expanduser().resolve()
    if not is_within(target, base_dir):
        logger.warning("Refusing to delete %s (outside %s)", target, Path(base_dir).resolve())
        return False
    if dry_run:
        logger.info("Dry-run: would delete %s", target)
        return True
    try:
        target.unlink()
        return True
    except FileNotFoundError:
        return False


def replace_directory(source: Path | str, destination: Path | str, *, base_dir: Path | str) -> Path:
    """
    Remove destination and move source into its place.

    Both paths must live inside base_dir. `os.replace` is tried first; a
    cross-device move falls back to `shutil.move`.
    """
    src = _guard(Path(source), base_dir, "move")
    dest = _guard(Path(destination), base_dir, "replace")
    if not src.is_dir():
        raise FileNotFoundError(f"Source directory does not exist: {src}")
    safe_rmtree(dest, base_dir=base_dir)
    _ensure_parent(dest)
    try:
        os.replace(src, dest)
    except OSError:
        shutil.move(str(src), str(dest))
    logger.debug("Moved %s -> %s", src, dest)
    return dest


def reset_directory(path: Path | str, *, base_dir: Path | str) -> Path:
    """Wipe a directory inside base_dir and recreate it empty."""
    target = _guard(Path(path), base_dir, "reset")
    safe_rmtree(target, base_dir=base_dir)
    return ensure_directory(target)


def copy_files(names: Iterable[str], source_dir: Path | str, dest_dir: Path | str) -> List[Path]:
    """
    Copy named files from source_dir into dest_dir, keeping relative paths.

    Raises:
        FileNotFoundError: Naming the first file that does not exist.
    """
    source_root = Path(source_dir)
    dest_root = Path(dest_dir)
    copied: List[Path] = []
    for name in names:
        src = source_root / name
        if not src.is_file():
            raise FileNotFoundError(f"Static file not found: {src}")
        dst = dest_root / name
        _ensure_parent(dst)
        shutil.copy2(src, dst)
        copied.append(dst)
    return copied


@contextmanager
def file_lock(path: Path | str):
    """Context manager for a filesystem lock file alongside the target."""
    target = Path(path).expanduser().resolve()
    lock_path = target.with_suffix(f"{target.suffix}.lock")
    _ensure_parent(lock_path)
    lock = FileLock(str(lock_path))
    try:
        with lock:
            yield
    finally:
        try:
            lock_path.unlink()
        except FileNotFoundError:
            pass


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    """Write text atomically by staging a temp file and renaming."""
    _ensure_parent(target)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8", *, lock: bool = True) -> Path:
    """
    Write text to a file, creating parent directories as needed.
    """
    target = Path(path).expanduser().resolve()
    if lock:
        with file_lock(target):
            _atomic_write_text(target, content, encoding=encoding)
    else:
        _atomic_write_text(target, content, encoding=encoding)
    return target
