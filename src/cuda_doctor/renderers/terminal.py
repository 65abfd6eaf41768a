"""Terminal renderer for cuda-doctor output."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cuda_doctor.knowledge.remediation import get_remediation
from cuda_doctor.renderers.base import BaseRenderer, OutputFormat, RenderContext, output_file

TIER_STYLES = {
    "recommended": "bold green",
    "supported": "green",
    "unknown": "dim",
    "deprecated": "yellow",
    "incompatible": "bold red",
}

CHECK_STYLES = {
    "ok": "green",
    "warn": "yellow",
    "fail": "red",
    "skipped": "dim",
}

DIFF_STYLES = {
    "match": "green",
    "differ": "yellow",
    "missing_in_current": "red",
    "missing_in_other": "red",
}


def _styled(value: str, styles: dict[str, str]) -> str:
    style = styles.get(value, "white")
    return f"[{style}]{value.upper()}[/{style}]"


class TerminalRenderer(BaseRenderer):
    """Renderer for rich terminal output.

    Uses the Rich library to render colorful, formatted output
    to the terminal.

    Example:
        renderer = TerminalRenderer()
        renderer.render(report, context)
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the terminal renderer.

        Args:
            console: Rich console to use. Creates a new one if None.
        """
        self._console = console or Console()

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.TERMINAL

    def render(self, data: Any, context: RenderContext) -> str:
        """Render data to the terminal.

        Note: This method prints to the console and returns an empty string.
        For capturing output, use Console.capture().

        Args:
            data: The data to render
            context: Rendering context

        Returns:
            Empty string (output is printed to console)
        """
        class_name = data.__class__.__name__

        if class_name == "DiagnosticReport":
            self._render_diagnostic_report(data, context)
        elif class_name == "CompatibilityMatrix":
            self._render_matrix(data, context)
        elif class_name == "UpdateReport":
            self._render_update_report(data, context)
        elif class_name == "ValidationReport":
            self._render_validation_report(data, context)
        elif class_name == "ComparisonResult":
            self._render_comparison(data, context)
        elif class_name == "EnvironmentSnapshot":
            self._render_snapshot(data, context)
        else:
            self._render_generic(data, context)

        return ""

    def render_to_file(self, data: Any, context: RenderContext) -> Path:
        """Write the terminal view of a report to a file.

        Output is recorded on a separate console; ANSI styles are kept
        only when the context asks for color.
        """
        path = output_file(context)
        recorder = Console(record=True, file=io.StringIO(), width=self._console.width)
        original = self._console
        self._console = recorder
        try:
            self.render(data, context)
        finally:
            self._console = original
        path.write_text(recorder.export_text(styles=context.color), encoding="utf-8")
        return path

    def _render_diagnostic_report(self, report: Any, context: RenderContext) -> None:
        """Render the default diagnostics."""
        compatibility = report.compatibility
        if compatibility.compatible:
            status = "[bold green]COMPATIBLE[/bold green]"
        else:
            status = "[bold red]INCOMPATIBLE[/bold red]"

        self._render_snapshot(report.snapshot, context)

        # Findings
        if compatibility.findings:
            self._console.print()
            table = Table(title="Compatibility")
            table.add_column("Component", style="bold")
            table.add_column("Version")
            table.add_column("Tier")
            table.add_column("Note")
            for finding in compatibility.findings:
                table.add_row(
                    finding.key,
                    finding.version or "[dim]-[/dim]",
                    _styled(finding.tier.value, TIER_STYLES),
                    finding.rule.note if finding.rule is not None else finding.message,
                )
            self._console.print(table)

        # Cross-checks
        if compatibility.cross_checks:
            self._console.print()
            table = Table(title="Cross-checks")
            table.add_column("Check", style="bold")
            table.add_column("Requirement")
            table.add_column("Found")
            table.add_column("Tier")
            for check in compatibility.cross_checks:
                table.add_row(
                    check.name,
                    f"{check.subject_key} needs {check.dependency_key} {check.required}",
                    check.actual or "[dim]not detected[/dim]",
                    _styled(check.tier.value, TIER_STYLES),
                )
            self._console.print(table)

        self._console.print()
        self._console.print(f"[bold]Overall:[/bold] {status}")

        # Remediation for missing components
        for key in report.missing:
            hint = get_remediation(key, context.platform)
            if hint is None:
                continue
            self._console.print()
            self._console.print(f"[bold yellow]{hint['title']}[/bold yellow]")
            for step in hint["steps"]:
                self._console.print(f"  - {step}")
            self._console.print(f"  [dim]{hint['url']}[/dim]")

        if report.errors and context.verbose:
            self._console.print()
            self._console.print("[bold]Probe errors[/bold]")
            for error in report.errors:
                self._console.print(f"  [dim]{error}[/dim]")

    def _render_snapshot(self, snapshot: Any, context: RenderContext) -> None:
        """Render the captured facts and system descriptors."""
        system = snapshot.system
        lines = [f"[bold]OS:[/bold] {snapshot.os_name} ({snapshot.arch})"]
        if snapshot.hostname:
            lines.append(f"[bold]Host:[/bold] {snapshot.hostname}")
        if system.python_version:
            lines.append(f"[bold]Python:[/bold] {system.python_version}")
        if system.total_memory_gb is not None:
            lines.append(f"[bold]Memory:[/bold] {system.total_memory_gb:.1f} GB")
        if context.verbose:
            if system.cpu:
                lines.append(f"[bold]CPU:[/bold] {system.cpu}")
            if system.virtual_env:
                lines.append(f"[bold]Virtualenv:[/bold] {system.virtual_env}")
            if system.conda_env:
                lines.append(f"[bold]Conda env:[/bold] {system.conda_env}")
        lines.append(f"[bold]Captured:[/bold] {snapshot.captured_at.isoformat()}")

        self._console.print()
        self._console.print(Panel("\n".join(lines), title="CUDA Environment"))

        self._console.print()
        table = Table(title="Components")
        table.add_column("Component", style="bold")
        table.add_column("Status")
        table.add_column("Version")
        table.add_column("Source", style="dim")
        for fact in snapshot.facts:
            name = fact.display_name
            if fact.name and fact.name != name:
                name = f"{name} ({fact.name})"
            table.add_row(
                name,
                "[green]found[/green]" if fact.presence else "[red]missing[/red]",
                fact.version_text or "[dim]-[/dim]",
                fact.method or "",
            )
        self._console.print(table)

    def _render_matrix(self, matrix: Any, context: RenderContext) -> None:
        """Render the rule table and recommended stacks."""
        self._console.print()
        table = Table(title="Compatibility Matrix")
        table.add_column("Rule", style="bold")
        table.add_column("Tier")
        table.add_column("Note", style="dim")
        for rule in matrix.rules:
            table.add_row(rule.describe(), _styled(rule.tier.value, TIER_STYLES), rule.note)
        self._console.print(table)

        if matrix.stacks:
            self._console.print()
            components = sorted({c for stack in matrix.stacks.values() for c in stack})
            table = Table(title="Recommended Stacks")
            table.add_column("Stack", style="bold")
            for component in components:
                table.add_column(component)
            for name, stack in matrix.stacks.items():
                table.add_row(name, *(stack.get(c, "-") for c in components))
            self._console.print(table)

    def _render_update_report(self, report: Any, context: RenderContext) -> None:
        """Render the update check."""
        self._console.print()
        table = Table(title="Updates")
        table.add_column("Component", style="bold")
        table.add_column("Installed")
        table.add_column("Latest")
        table.add_column("Status")
        for advice in report.advice:
            if advice.update_available is None:
                status = "[dim]not installed[/dim]" if advice.current is None else "[dim]unknown[/dim]"
            elif advice.update_available:
                status = "[yellow]update available[/yellow]"
            else:
                status = "[green]up to date[/green]"
            table.add_row(
                advice.component,
                advice.current or "[dim]-[/dim]",
                advice.latest or "[dim]-[/dim]",
                status,
            )
        self._console.print(table)

        outdated = report.outdated
        if outdated:
            self._console.print()
            self._console.print("[bold]Where to update[/bold]")
            for advice in outdated:
                if advice.source:
                    self._console.print(f"  - {advice.component}: {advice.source}")

    def _render_validation_report(self, report: Any, context: RenderContext) -> None:
        """Render the configuration validation."""
        status = "[bold green]PASSED[/bold green]" if report.passed else "[bold red]FAILED[/bold red]"

        for group in ("environment", "libraries", "devices"):
            checks = report.checks_in(group)
            if not checks:
                continue
            self._console.print()
            table = Table(title=group.capitalize())
            table.add_column("Check", style="bold")
            table.add_column("Status")
            table.add_column("Detail")
            for check in checks:
                table.add_row(check.name, _styled(check.status.value, CHECK_STYLES), check.detail)
            self._console.print(table)

        findings = report.compatibility.findings
        if findings:
            self._console.print()
            table = Table(title="Installation")
            table.add_column("Component", style="bold")
            table.add_column("Version")
            table.add_column("Tier")
            for finding in findings:
                table.add_row(finding.key, finding.version or "-", _styled(finding.tier.value, TIER_STYLES))
            self._console.print(table)

        for check in report.compatibility.failed_checks:
            self._console.print(f"  [red]![/red] {check.message}")

        self._console.print()
        self._console.print(f"[bold]Validation:[/bold] {status}")

    def _render_comparison(self, result: Any, context: RenderContext) -> None:
        """Render a snapshot comparison."""
        self._console.print()
        table = Table(title="Environment Comparison")
        table.add_column("Field", style="bold")
        table.add_column("Current")
        table.add_column("Other")
        table.add_column("Status")
        for entry in result.entries:
            if entry.status.value == "match" and not context.verbose and entry.scope.value == "component":
                continue
            table.add_row(
                entry.name,
                entry.current or "[dim]-[/dim]",
                entry.other or "[dim]-[/dim]",
                _styled(entry.status.value, DIFF_STYLES),
            )
        self._console.print(table)

        self._console.print()
        if result.is_identical:
            self._console.print("[bold green]Environments match[/bold green]")
        else:
            differences = sum(1 for e in result.entries if e.status.value != "match")
            self._console.print(f"[bold yellow]{differences} difference(s)[/bold yellow]")
            if result.has_system_mismatch:
                self._console.print("  [yellow]![/yellow] OS or architecture differs")

    def _render_generic(self, data: Any, context: RenderContext) -> None:
        """Render generic data."""
        import json

        from pydantic import BaseModel

        if isinstance(data, BaseModel):
            dict_data = data.model_dump(mode="json")
        elif isinstance(data, dict):
            dict_data = data
        else:
            self._console.print(str(data))
            return

        json_str = json.dumps(dict_data, indent=2, default=str)
        self._console.print(json_str)
