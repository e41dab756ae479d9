"""
Command line interface for the docpages site builder.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import BuildConfig, ConfigError, default_config, get_settings, load_config
from .config.models import DEFAULT_CONFIG_FILENAME, render_config_toml
from .pipeline import BuildReport, BuildStep, execute_build, plan_build
from .util import UnsafePathError, safe_rmtree
from .web import RedirectReport, write_redirect

console = Console()
app = typer.Typer(help="Build the API documentation site and its web-assembly examples.")
logger = logging.getLogger(__name__)

LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def _configure_logging(level_name: str) -> None:
    env_override = get_settings().log_level
    level_str = (env_override or level_name or "info").upper()
    if level_str not in {lvl.upper() for lvl in LOG_LEVELS}:
        level_str = "INFO"
    logging.basicConfig(
        level=getattr(logging, level_str, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.debug("Logging configured at %s", level_str)


def _resolve_config_path(value: Optional[Path]) -> Optional[Path]:
    """Ensure an explicit config path exists and return it absolute."""
    if value is None:
        return None
    resolved = value.expanduser().resolve()
    if not resolved.exists():
        raise typer.BadParameter(f"No config file found at {resolved}")
    if not resolved.is_file():
        raise typer.BadParameter(f"Config path must be a file, got directory: {resolved}")
    return resolved


def _load_config_or_exit(path: Optional[Path]) -> BuildConfig:
    """
    Load the config from --config, then $DOCPAGES_CONFIG, then ./docpages.toml;
    fall back to the built-in defaults rooted at the current directory.
    """
    candidate = path or get_settings().config_path
    if candidate is None:
        local = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if local.is_file():
            candidate = local
    if candidate is None:
        logger.info("No %s found; using built-in defaults", DEFAULT_CONFIG_FILENAME)
        return default_config(Path.cwd())
    try:
        return load_config(candidate)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _plan_or_exit(config: BuildConfig, **kwargs) -> List[BuildStep]:
    try:
        return plan_build(config, **kwargs)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _print_plan(config: BuildConfig, steps: List[BuildStep]) -> None:
    table = Table(title="Build Plan")
    table.add_column("#", justify="right")
    table.add_column("Step", no_wrap=True)
    table.add_column("Action", overflow="fold")
    for index, step in enumerate(steps, start=1):
        table.add_row(str(index), step.name, step.description)
    console.print(table)
    console.print(f"Project root: {config.root_path}")


def _print_build_report(report: BuildReport) -> None:
    title = "Build Summary (dry run)" if report.dry_run else "Build Summary"
    table = Table(title=title)
    table.add_column("Step", no_wrap=True)
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")
    styles = {"ok": "green", "planned": "blue", "failed": "bold red", "skipped": "yellow"}
    for name, status, detail in report.summary_rows():
        table.add_row(name, f"[{styles.get(status, 'white')}]{status}[/]", detail)
    console.print(table)


def _print_redirect_report(report: RedirectReport) -> None:
    table = Table(title="Redirect")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in report.summary_rows():
        table.add_row(key, value)
    console.print(table)


@app.callback(invoke_without_command=True)
def _root_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show docpages version and exit.",
        is_flag=True,
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        help="Logging level (critical, error, warning, info, debug).",
        show_default=True,
        case_sensitive=False,
    ),
) -> None:
    """
    Default command when no subcommand is selected.
    """
    _configure_logging(log_level)

    if version:
        console.print(f"[bold green]docpages[/] {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(
            "[bold yellow]docpages[/] is ready. Run [cyan]docpages build[/] from the project root, "
            "or [cyan]docpages init[/] to write a starter config.",
        )


@app.command()
def build(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to the build config (defaults to ./{DEFAULT_CONFIG_FILENAME}).",
        callback=_resolve_config_path,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would run without touching the filesystem or invoking tools.",
    ),
    skip_docs: bool = typer.Option(
        False,
        "--skip-docs",
        help="Do not regenerate the API docs or the redirect page.",
    ),
    skip_examples: bool = typer.Option(
        False,
        "--skip-examples",
        help="Do not package the web-assembly examples.",
    ),
    example: List[str] = typer.Option(
        None,
        "--example",
        "-e",
        help="Only package these examples (multiple allowed).",
    ),
) -> None:
    """
    Generate the API docs, publish them, write the redirect page, and package the examples.
    """
    build_config = _load_config_or_exit(config)
    logger.info("Building docs for crate '%s' in %s", build_config.crate, build_config.root_path)
    steps = _plan_or_exit(
        build_config,
        docs=not skip_docs,
        examples=not skip_examples,
        only=example or None,
    )
    if not steps:
        console.print("[yellow]Nothing to build.[/]")
        return

    report = execute_build(build_config, steps, dry_run=dry_run)
    _print_build_report(report)

    if not report.succeeded:
        console.print(f"[bold red]Build failed:[/] {report.error}")
        raise typer.Exit(code=1)
    if dry_run:
        console.print("[bold blue]Dry run complete.[/] No filesystem changes made.")
    else:
        console.print(f"[bold green]Docs ready in[/] {build_config.docs_path}")


@app.command()
def plan(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the build config.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    List the build steps and the commands they would run.
    """
    build_config = _load_config_or_exit(config)
    _print_plan(build_config, _plan_or_exit(build_config))


@app.command()
def redirect(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the build config.",
        callback=_resolve_config_path,
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Relative URL to redirect to (defaults to the configured redirect).",
    ),
) -> None:
    """
    Rewrite only the docs root index.html redirect page.
    """
    build_config = _load_config_or_exit(config)
    try:
        report = write_redirect(build_config.docs_path, target or build_config.redirect_target)
    except OSError as exc:
        console.print(f"[bold red]Could not write redirect:[/] {exc}")
        raise typer.Exit(code=1) from exc
    _print_redirect_report(report)


@app.command()
def clean(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the build config.",
        callback=_resolve_config_path,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would be removed without deleting anything.",
    ),
) -> None:
    """
    Remove the published docs directory.
    """
    build_config = _load_config_or_exit(config)
    try:
        removed = safe_rmtree(build_config.docs_path, base_dir=build_config.root_path, dry_run=dry_run)
    except (UnsafePathError, OSError) as exc:
        console.print(f"[bold red]Could not clean:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if removed:
        verb = "Would remove" if dry_run else "Removed"
        console.print(f"[green]{verb}[/] {build_config.docs_path}")
    else:
        console.print(f"[yellow]Nothing to remove at[/] {build_config.docs_path}")


@app.command("config-hash")
def config_hash(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the build config.",
        callback=_resolve_config_path,
    ),
) -> None:
    """
    Output the deterministic hash of the build config for change detection.
    """
    build_config = _load_config_or_exit(config)
    console.print(f"[bold green]{build_config.hash}[/]")


@app.command()
def init(
    directory: Path = typer.Option(
        Path("."),
        "--directory",
        "-d",
        help="Project root to write the config into.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing config file.",
    ),
) -> None:
    """
    Write a starter config that reproduces the default build.
    """
    root = directory.expanduser().resolve()
    target = root / DEFAULT_CONFIG_FILENAME
    if target.exists() and not force:
        console.print(f"[bold yellow]{target} already exists;[/] use --force to overwrite.")
        raise typer.Exit(code=1)
    root.mkdir(parents=True, exist_ok=True)
    target.write_text(render_config_toml(default_config(root)), encoding="utf-8")
    console.print(f"[bold green]Wrote[/] {target}")


def main() -> None:
    """
    Entry-point used by the console script defined in pyproject.toml.
    """
    app()
