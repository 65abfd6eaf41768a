"""Shared utilities for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.markup import escape

from cuda_doctor.utils.errors import DoctorError

if TYPE_CHECKING:
    from cuda_doctor.core.doctor import Doctor

# Shared console instance
console = Console()

FORMATS = ("terminal", "json")


def create_doctor(platform: str | None = None) -> "Doctor":
    """Build a Doctor from the loaded configuration.

    Args:
        platform: Platform tag overriding the configured one

    Returns:
        Doctor instance

    Raises:
        typer.Exit: If the configuration or platform tag is invalid
    """
    from cuda_doctor.core.doctor import Doctor
    from cuda_doctor.extractors.strategies import select_strategy
    from cuda_doctor.utils.config import get_config

    try:
        config = get_config()
        strategy = select_strategy(platform or config.detection.platform)
        return Doctor(config=config, strategy=strategy)
    except DoctorError as e:
        exit_with_error(e)


def resolve_format(format: str | None) -> str:
    """Pick the output format from the option or the configuration."""
    from cuda_doctor.utils.config import get_config

    if format is None:
        format = get_config().output.default_format
    if format not in FORMATS:
        console.print(f"[red]Error:[/red] Unknown format '{format}' (expected one of: {', '.join(FORMATS)})")
        raise typer.Exit(2)
    return format


def render(
    data: Any,
    format: str,
    platform: str = "linux",
    verbose: bool | None = None,
    output: Path | None = None,
) -> None:
    """Render a report to stdout, or to a file, in the requested format.

    Args:
        data: Report to render
        format: "terminal" or "json"
        platform: Platform tag for remediation hints
        verbose: Verbose terminal output; defaults to the configuration
        output: File to write the report to instead of stdout
    """
    from cuda_doctor.renderers import JSONRenderer, OutputFormat, RenderContext, TerminalRenderer, get_renderer
    from cuda_doctor.utils.config import get_config

    settings = get_config().output
    context = RenderContext(
        format=OutputFormat(format),
        output_path=output,
        verbose=settings.verbose if verbose is None else verbose,
        # Report files are plain text
        color=settings.color and output is None,
        platform=platform,
    )
    if output is not None:
        try:
            path = get_renderer(context.format).render_to_file(data, context)
        except OSError as e:
            console.print(f"[red]Error:[/red] Cannot write {escape(str(output))}: {escape(e.strerror or str(e))}")
            raise typer.Exit(1)
        console.print(f"Report written to {escape(str(path))}")
    elif context.format == OutputFormat.JSON:
        typer.echo(JSONRenderer().render(data, context))
    else:
        TerminalRenderer(console).render(data, context)


def exit_with_error(error: DoctorError, code: int = 1) -> None:
    """Print a DoctorError and exit.

    Raises:
        typer.Exit: Always
    """
    console.print(f"[red]Error:[/red] {escape(error.message)}")
    raise typer.Exit(code)
