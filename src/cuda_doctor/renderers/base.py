"""Renderer protocol and the options shared by all renderers."""

from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    """Report formats a command can produce."""

    JSON = "json"
    TERMINAL = "terminal"


class RenderContext(BaseModel):
    """Options for one render call."""

    model_config = {"frozen": True}

    format: OutputFormat = Field(default=OutputFormat.TERMINAL, description="Output format")
    output_path: Path | None = Field(default=None, description="File the report is written to, if any")
    verbose: bool = Field(default=False, description="Show probe details and errors")
    color: bool = Field(default=True, description="Keep colors in terminal output")
    platform: str = Field(default="linux", description="Platform tag used to pick remediation steps")
    indent: int = Field(default=2, description="JSON indentation; 0 for a single line")


@runtime_checkable
class Renderer(Protocol):
    """Protocol for report renderers.

    A renderer accepts any report model (diagnostics, updates, validation,
    comparison, matrix, snapshot) and either returns it as text or writes
    it to ``context.output_path``.
    """

    @property
    def format(self) -> OutputFormat:
        ...

    def render(self, data: Any, context: RenderContext) -> str:
        ...

    def render_to_file(self, data: Any, context: RenderContext) -> Path:
        ...


class BaseRenderer:
    """Shared file output for renderers that return their text."""

    def render(self, data: Any, context: RenderContext) -> str:
        raise NotImplementedError

    def render_to_file(self, data: Any, context: RenderContext) -> Path:
        """Write the rendered report to ``context.output_path``.

        Returns:
            Path written

        Raises:
            ValueError: If the context has no output path
        """
        path = output_file(context)
        path.write_text(self.render(data, context), encoding="utf-8")
        return path


def output_file(context: RenderContext) -> Path:
    """Destination of a file render, with its directory created."""
    if context.output_path is None:
        raise ValueError("output_path must be set in context for file rendering")
    context.output_path.parent.mkdir(parents=True, exist_ok=True)
    return context.output_path
