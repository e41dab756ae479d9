"""
API documentation steps: run `cargo doc` and publish its output as the site root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from ..config import BuildConfig, ToolSettings
from ..errors import BuildStepError
from ..util import replace_directory, run_command

logger = logging.getLogger(__name__)

GENERATE_STEP = "api-docs"
PUBLISH_STEP = "publish-docs"


def doc_command(config: BuildConfig, settings: ToolSettings) -> List[str]:
    argv = [settings.cargo, "doc"]
    if config.no_deps:
        argv.append("--no-deps")
    argv.extend(config.doc_args)
    return argv


def generate_api_docs(config: BuildConfig, settings: ToolSettings, *, dry_run: bool = False) -> Path:
    """
    Run the doc generator from the project root and check that it produced output.

    Raises:
        BuildStepError: If the tool fails or leaves no output directory behind.
    """
    output = config.doc_output_path
    run_command(
        doc_command(config, settings),
        cwd=config.root_path,
        step=GENERATE_STEP,
        timeout=config.timeout_seconds,
        dry_run=dry_run,
    )
    if not dry_run and not output.is_dir():
        raise BuildStepError(GENERATE_STEP, f"expected generator output at {output}, found nothing")
    return output


def publish_api_docs(config: BuildConfig, *, dry_run: bool = False) -> Path:
    """Replace the published docs directory with the freshly generated output."""
    source = config.doc_output_path
    destination = config.docs_path
    if dry_run:
        logger.info("Dry-run: would replace %s with %s", destination, source)
        return destination
    try:
        replace_directory(source, destination, base_dir=config.root_path)
    except FileNotFoundError as exc:
        raise BuildStepError(PUBLISH_STEP, str(exc)) from exc
    logger.info("Published API docs to %s", destination)
    return destination
