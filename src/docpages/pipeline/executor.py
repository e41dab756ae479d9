"""
Pipeline executor: plan the build steps and run them strictly in order.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from ..config import BuildConfig, ToolSettings, get_settings
from ..errors import BuildError, BuildStepError, ToolNotFoundError
from ..util import UnsafePathError, format_command, process
from ..web import write_nojekyll, write_redirect
from .examples import build_web_example, example_step_name, pack_command
from .rustdoc import GENERATE_STEP, PUBLISH_STEP, doc_command, generate_api_docs, publish_api_docs

logger = logging.getLogger(__name__)

REDIRECT_STEP = "redirect"
NOJEKYLL_STEP = "nojekyll"


@dataclass
class BuildStep:
    """
    One unit of work in a build.

    Attributes:
        name: Stable identifier (`api-docs`, `example:acid-web`, ...).
        description: Human readable summary, usually the command line.
        action: Callable receiving `dry_run`.
        tools: Executables the step runs; checked before the build starts.
    """
    name: str
    description: str
    action: Callable[[bool], object]
    tools: List[str] = field(default_factory=list)


@dataclass
class StepOutcome:
    name: str
    status: str
    duration: float = 0.0
    detail: str = ""


@dataclass
class BuildReport:
    """
    Result of running (or dry-running) a build.

    Attributes:
        config_hash: Hash of the configuration that drove the build.
        dry_run: True if nothing was executed.
        outcomes: One entry per planned step, in order.
        error: The exception that stopped the build, if any.
    """
    config_hash: str
    dry_run: bool = False
    outcomes: List[StepOutcome] = field(default_factory=list)
    error: Optional[BuildError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error

    def summary_rows(self) -> Iterable[tuple[str, str, str]]:
        for outcome in self.outcomes:
            duration = f"{outcome.duration:.1f}s" if outcome.status == "ok" else ""
            yield (outcome.name, outcome.status, outcome.detail or duration)


def plan_build(
    config: BuildConfig,
    settings: Optional[ToolSettings] = None,
    *,
    docs: bool = True,
    examples: bool = True,
    only: Optional[Sequence[str]] = None,
) -> List[BuildStep]:
    """
    Return the ordered steps for a build.

    Args:
        config: Build configuration.
        settings: Tool locations (defaults to environment settings).
        docs: Include doc generation, publishing, and the redirect page.
        examples: Include web-assembly example packaging.
        only: Restrict examples to these names.

    Raises:
        ConfigError: If `only` names an unknown example.
    """
    settings = settings or get_settings()
    steps: List[BuildStep] = []

    if docs:
        steps.append(
            BuildStep(
                GENERATE_STEP,
                format_command(doc_command(config, settings)),
                lambda dry_run: generate_api_docs(config, settings, dry_run=dry_run),
                tools=[settings.cargo],
            )
        )
        steps.append(
            BuildStep(
                PUBLISH_STEP,
                f"{config.doc_output} -> {config.docs_dir}",
                lambda dry_run: publish_api_docs(config, dry_run=dry_run),
            )
        )
        steps.append(
            BuildStep(
                REDIRECT_STEP,
                f"{config.docs_dir}/index.html -> {config.redirect_target}",
                lambda dry_run: _redirect_action(config, dry_run),
            )
        )
        if config.nojekyll:
            steps.append(
                BuildStep(
                    NOJEKYLL_STEP,
                    f"{config.docs_dir}/.nojekyll",
                    lambda dry_run: None if dry_run else write_nojekyll(config.docs_path),
                )
            )

    if examples:
        selected = [config.find_example(name) for name in only] if only else list(config.examples)
        for example in selected:
            out_dir = config.example_out_path(example)
            steps.append(
                BuildStep(
                    example_step_name(example),
                    format_command(pack_command(example, out_dir, settings)),
                    _example_action(config, example, settings),
                    tools=[settings.wasm_pack],
                )
            )
    return steps


def _redirect_action(config: BuildConfig, dry_run: bool):
    if dry_run:
        logger.info("Dry-run: would write redirect to %s", config.redirect_target)
        return None
    return write_redirect(config.docs_path, config.redirect_target)


def _example_action(config, example, settings):
    return lambda dry_run: build_web_example(config, example, settings, dry_run=dry_run)


def _find_missing_tool(steps: Sequence[BuildStep]) -> Optional[ToolNotFoundError]:
    for step in steps:
        for tool in step.tools:
            try:
                process.resolve_executable(tool, step=step.name)
            except ToolNotFoundError as exc:
                return exc
    return None


def execute_build(
    config: BuildConfig,
    steps: Optional[Sequence[BuildStep]] = None,
    *,
    dry_run: bool = False,
) -> BuildReport:
    """
    Run steps in order, stopping at the first failure.

    Every tool a step needs is located before the first step runs, so a
    missing tool leaves the published tree untouched. Steps after a failure
    are recorded as skipped and the error is kept on the report; call
    `report.raise_for_failure()` to propagate it.
    """
    if steps is None:
        steps = plan_build(config)
    report = BuildReport(config_hash=config.hash, dry_run=dry_run)
    logger.info("Starting build of %d step(s)%s", len(steps), " (dry run)" if dry_run else "")

    missing_tool = None if dry_run else _find_missing_tool(steps)
    if missing_tool is not None:
        logger.error("%s", missing_tool)
        report.error = missing_tool

    for step in steps:
        if report.error is not None:
            if missing_tool is not None and missing_tool.step == step.name:
                report.outcomes.append(StepOutcome(step.name, "failed", detail=str(report.error)))
            else:
                report.outcomes.append(StepOutcome(step.name, "skipped"))
            continue
        logger.info("Step '%s': %s", step.name, step.description)
        started = time.monotonic()
        try:
            step.action(dry_run)
        except UnsafePathError as exc:
            report.error = BuildStepError(step.name, str(exc))
        except BuildError as exc:
            report.error = exc
        except OSError as exc:
            report.error = BuildStepError(step.name, str(exc))
        if report.error is not None:
            logger.error("%s", report.error)
            report.outcomes.append(StepOutcome(step.name, "failed", time.monotonic() - started, str(report.error)))
            continue
        status = "planned" if dry_run else "ok"
        report.outcomes.append(StepOutcome(step.name, status, time.monotonic() - started))

    if report.error is None:
        logger.info("Build finished: %d step(s)", len(report.outcomes))
    return report
