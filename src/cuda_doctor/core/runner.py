"""Command runner boundary.

The runner is the only place that spawns processes or reads files on behalf
of the extractors. Everything above it works on captured text.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field

from cuda_doctor.utils.errors import CommandNotFoundError, CommandTimeoutError
from cuda_doctor.utils.logging import get_logger

logger = get_logger("runner")

DEFAULT_TIMEOUT = 10.0


class CommandOutput(BaseModel):
    """Captured result of one command or file read."""

    model_config = {"frozen": True}

    target: str = Field(description="Command line or file path")
    exit_code: int = Field(default=0, description="Process exit code (0 for file reads)")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def text(self) -> str:
        """Text to scan: stdout, or stderr for tools that report there on success."""
        if self.stdout.strip():
            return self.stdout
        if self.ok:
            return self.stderr
        return ""


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for executing probes.

    Implementations raise ``CommandNotFoundError`` when a command cannot be
    spawned or a file cannot be opened, and ``CommandTimeoutError`` when a
    command exceeds its timeout. A non-zero exit is not an error here.
    """

    def run(self, argv: Sequence[str], timeout: float = DEFAULT_TIMEOUT) -> CommandOutput:
        """Run a command and capture its output."""
        ...

    def read(self, path: str) -> CommandOutput:
        """Read a text file as if it were command output."""
        ...


class SubprocessRunner:
    """Runs probes on the local machine with ``subprocess``.

    Example:
        runner = SubprocessRunner()
        output = runner.run(["nvcc", "--version"], timeout=5)
        print(output.stdout)
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    def run(self, argv: Sequence[str], timeout: float | None = None) -> CommandOutput:
        target = " ".join(argv)
        timeout = timeout or self._timeout
        logger.debug(f"Running command: {target}")
        try:
            proc = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
                errors="replace",
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(target, timeout) from e
        except OSError as e:
            raise CommandNotFoundError(target, e.strerror or str(e)) from e

        logger.debug(f"Command exited with {proc.returncode}: {target}")
        return CommandOutput(
            target=target,
            exit_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

    def read(self, path: str) -> CommandOutput:
        logger.debug(f"Reading file: {path}")
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise CommandNotFoundError(path, e.strerror or str(e)) from e
        return CommandOutput(target=path, stdout=content)
