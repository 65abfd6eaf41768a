"""CLI command for configuration validation."""

from pathlib import Path
from typing import Optional

import typer

from cuda_doctor.cli.utils import create_doctor, exit_with_error, render, resolve_format
from cuda_doctor.utils.errors import DoctorError


def validate_cmd(
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
    Validate the CUDA installation and host configuration.

    Checks CUDA environment variables, library registration and device
    files, and the driver / toolkit / cuDNN versions against each other.
    Exits with code 1 if any check fails.

    Example:
        cuda-doctor validate
    """
    format = resolve_format(format)
    doctor = create_doctor(platform)

    try:
        report = doctor.validate()
    except DoctorError as e:
        exit_with_error(e)

    render(report, format, platform=doctor.strategy.tag, output=output)

    if not report.passed:
        raise typer.Exit(1)
