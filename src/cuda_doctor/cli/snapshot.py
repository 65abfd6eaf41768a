"""CLI commands for exporting and importing environment snapshots."""

from pathlib import Path
from typing import Optional

import typer

from cuda_doctor.cli.utils import console, create_doctor, exit_with_error, render, resolve_format
from cuda_doctor.utils.errors import DoctorError


def export_cmd(
    file: Path = typer.Argument(..., help="Snapshot file to write (.json, .yaml or .yml)"),
    platform: Optional[str] = typer.Option(
        None,
        "--platform",
        "-p",
        help="Probe set to use (linux, windows, macos); detected by default",
    ),
) -> None:
    """
    Capture the environment and save it to a file.

    The format follows the file suffix: JSON by default, YAML for
    .yaml and .yml.

    Example:
        cuda-doctor export my-env.json
    """
    doctor = create_doctor(platform)

    try:
        path = doctor.export(file)
    except DoctorError as e:
        exit_with_error(e)

    console.print(f"Snapshot written to {path}")


def import_cmd(
    file: Path = typer.Argument(..., help="Snapshot file to compare against"),
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
) -> None:
    """
    Compare the current environment with a saved snapshot.

    Example:
        cuda-doctor import colleague-env.json
    """
    format = resolve_format(format)
    doctor = create_doctor(platform)

    try:
        result = doctor.compare_with(file)
    except DoctorError as e:
        exit_with_error(e)

    render(result, format, platform=doctor.strategy.tag)
