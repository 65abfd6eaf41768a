"""Base extractor protocol and types."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, Field, model_validator

from cuda_doctor.core.runner import DEFAULT_TIMEOUT, CommandOutput, CommandRunner
from cuda_doctor.core.version import VersionString, try_parse
from cuda_doctor.extractors.markers import EMPTY_VALUES, TextPattern
from cuda_doctor.models.common import DiagnosticError
from cuda_doctor.models.facts import Category, ComponentFact, fact_key
from cuda_doctor.utils.errors import CommandNotFoundError, CommandTimeoutError, DetectionFailure
from cuda_doctor.utils.logging import get_logger

logger = get_logger("extractors")

_VERSION_TOKEN = re.compile(r"^[vV]?\d")
_TOKEN_PUNCTUATION = ",;:()[]{}'\""
_RAW_LIMIT = 200


class Probe(BaseModel):
    """One fallback source for a category: a command to run or a file to read."""

    model_config = {"frozen": True}

    label: str = Field(description="Short name recorded as the fact's method")
    argv: tuple[str, ...] | None = Field(default=None, description="Command to run")
    path: str | None = Field(default=None, description="File to read instead of running a command")
    pattern: TextPattern = Field(description="How to read the output")

    @model_validator(mode="after")
    def _one_source(self) -> "Probe":
        if (self.argv is None) == (self.path is None):
            raise ValueError("a probe needs exactly one of argv or path")
        return self

    @property
    def target(self) -> str:
        return self.path if self.path is not None else " ".join(self.argv or ())


class ProbeCapture(BaseModel):
    """Output of one executed probe, or the error that prevented it."""

    model_config = {"frozen": True}

    probe: Probe
    output: CommandOutput | None = None
    error: DiagnosticError | None = None


class TextMatch(BaseModel):
    """A component located in probe output."""

    model_config = {"frozen": True}

    version: VersionString | None = None
    raw: str = ""
    name: str | None = None
    index: int | None = None
    details: dict[str, str] = Field(default_factory=dict)


class ExtractorResult(BaseModel):
    """Result from an extractor."""

    model_config = {"frozen": True}

    extractor_name: str = Field(description="Name of the extractor that produced this result")
    facts: list[ComponentFact] = Field(default_factory=list, description="Extracted facts")
    attempts: list[str] = Field(default_factory=list, description="Probe labels tried, in order")
    errors: list[DiagnosticError] = Field(default_factory=list, description="Errors during extraction")

    @property
    def success(self) -> bool:
        return any(fact.presence for fact in self.facts)

    @classmethod
    def ok(
        cls,
        name: str,
        facts: list[ComponentFact],
        attempts: list[str],
        errors: list[DiagnosticError] | None = None,
    ) -> "ExtractorResult":
        """Create a successful result; errors are from probes tried before the match."""
        return cls(extractor_name=name, facts=facts, attempts=attempts, errors=errors or [])

    @classmethod
    def fail(
        cls,
        name: str,
        fact: ComponentFact,
        attempts: list[str],
        errors: list[DiagnosticError],
    ) -> "ExtractorResult":
        """Create a failed result carrying the absent fact."""
        return cls(extractor_name=name, facts=[fact], attempts=attempts, errors=errors)


@runtime_checkable
class Extractor(Protocol):
    """Protocol for fact extractors.

    Extractors turn captured probe output into ``ComponentFact``s for one
    category. They never start processes themselves: the caller asks the
    platform strategy for the probes behind ``capability``, runs them
    lazily and hands the captures over. An extractor stops consuming as
    soon as one probe yields a match, so later probes are never executed.

    To implement a custom extractor:
    1. Create a class that implements this protocol
    2. Register it with ExtractorRegistry

    Example:
        class JaxExtractor(FallbackExtractor):
            category = Category.FRAMEWORK

            def __init__(self) -> None:
                super().__init__(name="jax")
    """

    @property
    def name(self) -> str:
        """Unique name for this extractor (the key of the facts it produces)."""
        ...

    @property
    def description(self) -> str:
        """Human-readable description of what this extractor does."""
        ...

    @property
    def capability(self) -> str:
        """Capability tag used to ask a platform strategy for probes."""
        ...

    def extract(self, captures: Iterable[ProbeCapture]) -> ExtractorResult:
        """Extract facts from probe captures.

        Args:
            captures: Probe outputs in fallback order, possibly lazy

        Returns:
            ExtractorResult with facts; an absent fact when nothing matched
        """
        ...


def capture_probes(
    runner: CommandRunner,
    probes: Sequence[Probe],
    timeout: float = DEFAULT_TIMEOUT,
) -> Iterator[ProbeCapture]:
    """Run probes one at a time, yielding each capture as it completes.

    Runner failures are turned into captures carrying the error so the
    consumer can fall through to the next probe.
    """
    for probe in probes:
        logger.debug(f"Probe {probe.label}: {probe.target}")
        try:
            if probe.path is not None:
                output = runner.read(probe.path)
            else:
                output = runner.run(probe.argv or (), timeout=timeout)
        except (CommandNotFoundError, CommandTimeoutError) as e:
            logger.debug(f"Probe {probe.label} failed: {e.message}")
            yield ProbeCapture(probe=probe, error=e.to_diagnostic_error())
            continue
        yield ProbeCapture(probe=probe, output=output)


def scan(text: str, pattern: TextPattern) -> list[TextMatch]:
    """Find every match of a pattern in probe output.

    Args:
        text: Captured output
        pattern: Marker table entry describing the layout

    Returns:
        Matches in document order, one per device for device-aware patterns
    """
    if pattern.columns is not None:
        return _scan_records(text, pattern)

    matches = []
    for segment in _segments(text, pattern.device_boundary):
        match = _scan_segment(segment, pattern)
        if match is not None:
            matches.append(match)
    return matches


def decode_version(token: str, encoding: str = "dotted") -> VersionString | None:
    """Read one token as a version in the given encoding.

    ``cudnn_int`` is the integer form returned by the cuDNN runtime:
    ``8902`` is 8.9.2 and, from cuDNN 9 on, ``90100`` is 9.1.0.
    """
    if encoding == "cudnn_int" and token.isdigit():
        value = int(token)
        if value >= 10000:
            major, rest = divmod(value, 10000)
        else:
            major, rest = divmod(value, 1000)
        minor, patch = divmod(rest, 100)
        return try_parse(f"{major}.{minor}.{patch}")
    return try_parse(token)


def _compile(expression: str, ignore_case: bool = False) -> re.Pattern[str]:
    flags = re.MULTILINE
    if ignore_case:
        flags |= re.IGNORECASE
    return re.compile(expression, flags)


def _segments(text: str, boundary: str | None) -> list[str]:
    if boundary is None:
        return [text]
    starts = [m.start() for m in _compile(boundary).finditer(text)]
    # A zero-width boundary can match twice at the same offset.
    starts = sorted(set(starts))
    return [text[start:end] for start, end in zip(starts, starts[1:] + [len(text)])]


def _scan_segment(segment: str, pattern: TextPattern) -> TextMatch | None:
    if pattern.marker is not None:
        found = _compile(pattern.marker, pattern.ignore_case).search(segment)
        if found is None:
            return None
        position = found.start()
        after_marker = found.end()
    else:
        position = after_marker = 0

    version = None
    raw = _line_at(segment, position)
    if pattern.defines:
        version, raw = _read_defines(segment, pattern.defines)
    elif pattern.scan_version:
        start = after_marker
        if pattern.version_after is not None:
            anchor = _compile(pattern.version_after).search(segment, after_marker)
            if anchor is None:
                start = -1
            else:
                start = anchor.end()
                raw = _line_at(segment, anchor.start())
        if start >= 0:
            version = _first_version(segment[start:], pattern.encoding)

    if version is None and pattern.require_version:
        return None
    return TextMatch(version=version, raw=raw[:_RAW_LIMIT], name=_read_name(segment, pattern))


def _first_version(text: str, encoding: str) -> VersionString | None:
    for token in text.split():
        cleaned = token.strip(_TOKEN_PUNCTUATION)
        if not cleaned:
            continue
        if cleaned in EMPTY_VALUES:
            break
        if _VERSION_TOKEN.match(cleaned):
            return decode_version(cleaned, encoding)
    return None


def _read_defines(segment: str, names: tuple[str, ...]) -> tuple[VersionString | None, str]:
    values = []
    lines = []
    for name in names:
        found = re.search(rf"^\s*#define\s+{re.escape(name)}\s+(\d+)", segment, re.MULTILINE)
        if found is None:
            return None, ""
        values.append(found.group(1))
        lines.append(found.group(0).strip())
    return try_parse(".".join(values)), "; ".join(lines)


def _read_name(segment: str, pattern: TextPattern) -> str | None:
    if pattern.name_after is None:
        return None
    start = segment.find(pattern.name_after)
    if start < 0:
        return None
    rest = segment[start + len(pattern.name_after):].splitlines()
    name = rest[0] if rest else ""
    if pattern.name_until and pattern.name_until in name:
        name = name[: name.index(pattern.name_until)]
    return name.strip() or None


def _scan_records(text: str, pattern: TextPattern) -> list[TextMatch]:
    columns = pattern.columns or ()
    matches = []
    for line in text.splitlines():
        if not line.strip():
            continue
        if pattern.marker is not None and not _compile(pattern.marker, pattern.ignore_case).search(line):
            continue
        fields = [f.strip() for f in line.split(pattern.separator)]
        if len(fields) != len(columns):
            continue
        record = dict(zip(columns, fields))

        version = None
        value = record.pop("version", None)
        if value is not None and value not in EMPTY_VALUES and _VERSION_TOKEN.match(value):
            version = decode_version(value, pattern.encoding)
        if version is None and pattern.require_version:
            continue

        index_text = record.pop("index", None)
        index = int(index_text) if index_text and index_text.isdigit() else None
        name = record.pop("name", None)
        details = {k: v for k, v in record.items() if v not in EMPTY_VALUES}
        matches.append(
            TextMatch(version=version, raw=line.strip()[:_RAW_LIMIT], name=name, index=index, details=details)
        )
    return matches


def _line_at(text: str, position: int) -> str:
    start = text.rfind("\n", 0, position) + 1
    end = text.find("\n", position)
    if end < 0:
        end = len(text)
    return text[start:end].strip()


class FallbackExtractor:
    """Generic fallback-chain extractor for a single category.

    Probe captures are consumed in order; the first one whose output
    matches its pattern decides the facts. If none matches, the result
    carries an absent fact and a ``DetectionFailure`` error.
    """

    category: Category = Category.DRIVER

    def __init__(self, name: str | None = None) -> None:
        self._component = name

    @property
    def name(self) -> str:
        return fact_key(self.category, self._component)

    @property
    def description(self) -> str:
        return f"Detects the installed {self._component or self.category.label}"

    @property
    def capability(self) -> str:
        return f"detect-{self.category.value.replace('_', '-')}"

    def extract(self, captures: Iterable[ProbeCapture]) -> ExtractorResult:
        attempts: list[str] = []
        errors: list[DiagnosticError] = []
        for capture in captures:
            probe = capture.probe
            attempts.append(probe.label)
            if capture.error is not None or capture.output is None:
                if capture.error is not None:
                    errors.append(capture.error)
                continue

            matches = scan(capture.output.text, probe.pattern)
            if not matches:
                logger.debug(f"{self.name}: no match in output of {probe.label}, falling through")
                continue

            facts = self.build_facts(matches, probe)
            logger.debug(f"{self.name}: detected via {probe.label}")
            return ExtractorResult.ok(self.name, facts, attempts, errors)

        failure = DetectionFailure(self.name, attempts)
        logger.debug(failure.message)
        errors.append(failure.to_diagnostic_error())
        return ExtractorResult.fail(self.name, self.absent_fact(), attempts, errors)

    def build_facts(self, matches: list[TextMatch], probe: Probe) -> list[ComponentFact]:
        """Turn matches into facts; single-instance categories keep the first."""
        first = matches[0]
        return [
            ComponentFact.detected(
                self.category,
                first.version,
                raw=first.raw,
                method=probe.label,
                name=self._component,
                details=first.details,
            )
        ]

    def absent_fact(self) -> ComponentFact:
        return ComponentFact.absent(self.category, name=self._component)
