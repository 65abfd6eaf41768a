"""CLI command for the update check."""

from pathlib import Path
from typing import Optional

import typer

from cuda_doctor.cli.utils import create_doctor, exit_with_error, render, resolve_format
from cuda_doctor.utils.errors import DoctorError


def updates_cmd(
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    platform: Optional[str] = typer.Option(
        None,
        "--platform",
        "-p",
        help="Probe set to use (linux, windows, macos); detected by default",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to this file instead of the terminal",
    ),
) -> None:
    """
    Compare installed versions with the latest known releases.

    Example:
        cuda-doctor updates
    """
    format = resolve_format(format)
    doctor = create_doctor(platform)

    try:
        report = doctor.check_updates()
    except DoctorError as e:
        exit_with_error(e)

    render(report, format, platform=doctor.strategy.tag, output=output)
