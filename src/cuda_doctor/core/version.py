"""Version string parsing and ordering.

Versions reported by vendor tools come in many shapes: ``535.86.05``,
``V12.2.140``, ``2.1.0+cu118``, ``8.9``. They are normalized into a
``VersionString``: a tuple of integer components plus an opaque trailing
qualifier that never takes part in ordering.
"""

from __future__ import annotations

import re
import sys
from enum import IntEnum

from cuda_doctor.models.version import VersionString
from cuda_doctor.utils.errors import ParseError

__all__ = [
    "Ordering",
    "VersionString",
    "compare",
    "covers",
    "in_range",
    "parse",
    "same_version",
    "span",
    "try_parse",
]

_FIRST_DIGIT = re.compile(r"\d")
_NUMERIC_HEAD = re.compile(r"(\d+(?:\.\d+)*)(.*)", re.DOTALL)
_SPAN_LENGTH = 6
_UNBOUNDED = sys.maxsize


class Ordering(IntEnum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def parse(raw: str) -> VersionString:
    """Parse free-form version text.

    Everything before the first digit is dropped, dot-separated numbers are
    read as components and whatever follows them is kept as the qualifier.

    Args:
        raw: Version text, e.g. "V12.2.140" or "2.1.0+cu118"

    Returns:
        Parsed VersionString

    Raises:
        ParseError: If the text contains no digit at all
    """
    text = raw.strip()
    first = _FIRST_DIGIT.search(text)
    if first is None:
        raise ParseError(raw)

    text = text[first.start():]
    match = _NUMERIC_HEAD.match(text)
    # A digit is guaranteed at position 0, so the pattern always matches.
    assert match is not None
    numbers, qualifier = match.groups()
    return VersionString(
        components=tuple(int(n) for n in numbers.split(".")),
        qualifier=qualifier,
        text=text,
    )


def try_parse(raw: str | None) -> VersionString | None:
    """Parse version text, returning None instead of raising."""
    if raw is None:
        return None
    try:
        return parse(raw)
    except ParseError:
        return None


def compare(a: VersionString, b: VersionString) -> Ordering:
    """Compare two versions component by component.

    The shorter operand is padded with zeros, so "12.2" equals "12.2.0".
    Qualifiers are ignored.
    """
    length = max(len(a.components), len(b.components))
    left = a.components + (0,) * (length - len(a.components))
    right = b.components + (0,) * (length - len(b.components))
    if left < right:
        return Ordering.LESS
    if left > right:
        return Ordering.GREATER
    return Ordering.EQUAL


def in_range(
    version: VersionString,
    minimum: VersionString,
    maximum: VersionString | None = None,
) -> bool:
    """Check ``minimum <= version <= maximum``; both bounds inclusive."""
    if compare(version, minimum) == Ordering.LESS:
        return False
    if maximum is not None and compare(version, maximum) == Ordering.GREATER:
        return False
    return True


def covers(minimum: VersionString, maximum: VersionString | None, version: VersionString) -> bool:
    """Check a version against a range whose maximum is inclusive at its precision.

    ``covers(12.0, 12.2, 12.2.140)`` is true: the version is cut to the
    number of components the maximum is written with before comparing.
    """
    if compare(version, minimum) == Ordering.LESS:
        return False
    if maximum is None:
        return True
    return compare(version.truncate(len(maximum.components)), maximum) != Ordering.GREATER


def span(minimum: VersionString, maximum: VersionString | None) -> tuple:
    """Sort key for the width of a range; smaller keys are narrower.

    Bounded ranges sort before unbounded ones. Bounded ranges are ordered by
    the component-wise distance between their bounds, with components the
    maximum leaves out counted as unbounded (``12`` spans all of 12.x).
    Unbounded ranges are ordered by how high their lower bound sits.
    """
    length = max(_SPAN_LENGTH, len(minimum.components), len(maximum.components) if maximum else 0)
    low = _pad(minimum.components, length, 0)
    if maximum is None:
        return (1, tuple(-c for c in low))
    high = _pad(maximum.components, length, _UNBOUNDED)
    return (0, tuple(h - lo for h, lo in zip(high, low)))


def _pad(components: tuple[int, ...], length: int, fill: int) -> tuple[int, ...]:
    return components + (fill,) * (length - len(components))


def same_version(a: VersionString | None, b: VersionString | None) -> bool:
    """Equal in ordering and with the same qualifier; two missing versions match."""
    if a is None or b is None:
        return a is None and b is None
    return compare(a, b) == Ordering.EQUAL and a.qualifier == b.qualifier
