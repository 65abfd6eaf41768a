"""Main CLI entry point for cuda-doctor."""

import typer
from rich.console import Console

from cuda_doctor.cli import diagnose, matrix, snapshot, updates, validate

app = typer.Typer(
    name="cuda-doctor",
    help="Diagnose GPU, driver, CUDA, cuDNN and framework compatibility.",
    invoke_without_command=True,
    rich_markup_mode="rich",
)

console = Console()

# Register subcommands
app.command(name="diagnose")(diagnose.diagnose_cmd)
app.command(name="matrix")(matrix.matrix_cmd)
app.command(name="updates")(updates.updates_cmd)
app.command(name="validate")(validate.validate_cmd)
app.command(name="export")(snapshot.export_cmd)
app.command(name="import")(snapshot.import_cmd)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
) -> None:
    """
    cuda-doctor: Diagnose the local GPU / CUDA / deep-learning stack.

    Runs the full diagnosis when no command is given.

    - [bold]diagnose[/bold]: Detect components and check compatibility
    - [bold]matrix[/bold]: Show the compatibility matrix
    - [bold]updates[/bold]: Check for newer releases
    - [bold]validate[/bold]: Validate the installation and host configuration
    - [bold]export[/bold]: Save an environment snapshot
    - [bold]import[/bold]: Compare with a saved snapshot
    """
    from cuda_doctor.utils.logging import configure_logging

    if verbose:
        configure_logging(level="DEBUG", structured=True)
    elif quiet:
        configure_logging(level="WARNING")
    else:
        configure_logging(level="INFO")

    if ctx.invoked_subcommand is None:
        ctx.invoke(diagnose.diagnose_cmd, format=None, platform=None, output=None)


@app.command()
def version() -> None:
    """Show the cuda-doctor version."""
    from cuda_doctor import __version__

    console.print(f"cuda-doctor version {__version__}")


if __name__ == "__main__":
    app()
