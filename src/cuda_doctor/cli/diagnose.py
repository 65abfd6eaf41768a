"""CLI command for the default diagnostics."""

from pathlib import Path
from typing import Optional

import typer

from cuda_doctor.cli.utils import console, create_doctor, exit_with_error, render, resolve_format
from cuda_doctor.utils.errors import DoctorError


def diagnose_cmd(
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
    Detect the GPU stack and check that its parts work together.

    Reports the GPU, driver, CUDA toolkit, cuDNN and frameworks found,
    the compatibility tier of each, and the cross-checks between them.
    Exits with code 1 if anything is incompatible.

    Example:
        cuda-doctor diagnose --format json
    """
    format = resolve_format(format)
    doctor = create_doctor(platform)

    try:
        if format == "terminal":
            with console.status("Inspecting the CUDA stack..."):
                report = doctor.diagnose()
        else:
            report = doctor.diagnose()
    except DoctorError as e:
        exit_with_error(e)

    render(report, format, platform=doctor.strategy.tag, output=output)

    if not report.compatibility.compatible:
        raise typer.Exit(1)
