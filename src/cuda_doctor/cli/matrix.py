"""CLI command for showing the compatibility matrix."""

from typing import Optional

import typer

from cuda_doctor.cli.utils import exit_with_error, render, resolve_format
from cuda_doctor.utils.errors import DoctorError


def matrix_cmd(
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    component: Optional[str] = typer.Option(
        None,
        "--component",
        "-c",
        help="Only show rules for one component (e.g. cuda_toolkit, framework:pytorch)",
    ),
) -> None:
    """
    Show the version compatibility matrix.

    Lists every rule with its tier, and the recommended stacks.

    Example:
        cuda-doctor matrix --component framework:pytorch
    """
    from cuda_doctor.knowledge.compat_matrix import get_recommended_stacks, get_rule_table
    from cuda_doctor.models.report import CompatibilityMatrix

    format = resolve_format(format)
    try:
        rules = list(get_rule_table())
    except DoctorError as e:
        exit_with_error(e)

    if component:
        rules = [r for r in rules if r.subject_key == component]

    render(CompatibilityMatrix(rules=rules, stacks=get_recommended_stacks()), format)
