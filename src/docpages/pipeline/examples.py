"""
Package web-assembly example crates into the published docs tree.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..config import BuildConfig, ExampleConfig, ToolSettings
from ..errors import BuildStepError
from ..util import copy_files, process, reset_directory, run_command, safe_unlink, slugify

logger = logging.getLogger(__name__)

GENERATED_GITIGNORE = ".gitignore"


def example_step_name(example: ExampleConfig) -> str:
    return f"example:{slugify(example.name)}"


def pack_command(example: ExampleConfig, out_dir: Path, settings: ToolSettings) -> List[str]:
    """
    Build the wasm-pack argv. `out_dir` is passed absolute because wasm-pack
    resolves relative output paths against the crate directory.
    """
    argv = [settings.wasm_pack, "build", "--target", example.target, "--out-dir", str(out_dir)]
    if example.release is True:
        argv.append("--release")
    elif example.release is False:
        argv.append("--dev")
    argv.extend(example.pack_args)
    return argv


def build_web_example(
    config: BuildConfig,
    example: ExampleConfig,
    settings: ToolSettings,
    *,
    dry_run: bool = False,
) -> Path:
    """
    Wipe the example's output directory, copy its static files, and package it.

    wasm-pack and the static files are checked before the previous output is removed.

    Returns:
        The output directory inside the docs tree.

    Raises:
        ToolNotFoundError: If wasm-pack is not on PATH.
        BuildStepError: If the crate or a static file is missing, or wasm-pack fails.
    """
    step = example_step_name(example)
    crate_dir = config.example_path(example)
    out_dir = config.example_out_path(example)

    if not crate_dir.is_dir():
        raise BuildStepError(step, f"example crate directory not found: {crate_dir}")

    if dry_run:
        logger.info("Dry-run: would reset %s and copy %s", out_dir, ", ".join(example.static_files) or "no files")
    else:
        process.resolve_executable(settings.wasm_pack, step=step)
        missing = [name for name in example.static_files if not (crate_dir / name).is_file()]
        if missing:
            raise BuildStepError(step, f"static file(s) not found in {crate_dir}: {', '.join(missing)}")
        reset_directory(out_dir, base_dir=config.root_path)
        try:
            copied = copy_files(example.static_files, crate_dir, out_dir)
        except FileNotFoundError as exc:
            raise BuildStepError(step, str(exc)) from exc
        logger.info("Copied %d static file(s) for '%s' into %s", len(copied), example.name, out_dir)

    run_command(
        pack_command(example, out_dir, settings),
        cwd=crate_dir,
        step=step,
        timeout=config.timeout_seconds,
        dry_run=dry_run,
    )

    if not example.keep_gitignore:
        # wasm-pack writes a catch-all "*" .gitignore into the output directory.
        safe_unlink(out_dir / GENERATED_GITIGNORE, base_dir=config.root_path, dry_run=dry_run)
    return out_dir
