"""Snapshot comparison."""

from __future__ import annotations

from cuda_doctor.core.version import same_version
from cuda_doctor.models.diff import ComparisonResult, DiffScope, DiffStatus, FieldDiff
from cuda_doctor.models.facts import ComponentFact
from cuda_doctor.models.snapshot import EnvironmentSnapshot

PRESENT_WITHOUT_VERSION = "present"


def compare_snapshots(current: EnvironmentSnapshot, other: EnvironmentSnapshot) -> ComparisonResult:
    """Compare two snapshots field by field.

    OS and architecture come first as system entries, followed by every
    fact key of either snapshot: the current snapshot's keys in order, then
    keys only the other snapshot has. A side counts as having a key when it
    holds a present fact for it. Both sides present compare on version and
    qualifier; neither side present is a match.

    The result depends only on the two snapshots, so swapping them swaps
    the operands of every entry and the two missing statuses.

    Args:
        current: Snapshot of this machine (or the left-hand side)
        other: Snapshot to compare against

    Returns:
        ComparisonResult with one entry per compared field
    """
    entries = [
        _system_entry("os", current.os_name, other.os_name),
        _system_entry("arch", current.arch, other.arch),
    ]

    current_keys = current.keys
    seen = set(current_keys)
    keys = current_keys + [key for key in other.keys if key not in seen]
    for key in keys:
        entries.append(_component_entry(key, current.fact(key), other.fact(key)))

    return ComparisonResult(entries=entries)


def _system_entry(name: str, current: str, other: str) -> FieldDiff:
    status = DiffStatus.MATCH if current == other else DiffStatus.DIFFER
    return FieldDiff(name=name, scope=DiffScope.SYSTEM, current=current, other=other, status=status)


def _component_entry(key: str, current: ComponentFact | None, other: ComponentFact | None) -> FieldDiff:
    has_current = current is not None and current.presence
    has_other = other is not None and other.presence

    if has_current and has_other:
        assert current is not None and other is not None
        matched = same_version(current.version, other.version)
        status = DiffStatus.MATCH if matched else DiffStatus.DIFFER
    elif has_current:
        status = DiffStatus.MISSING_IN_OTHER
    elif has_other:
        status = DiffStatus.MISSING_IN_CURRENT
    else:
        status = DiffStatus.MATCH

    return FieldDiff(
        name=key,
        scope=DiffScope.COMPONENT,
        current=_display(current) if has_current else None,
        other=_display(other) if has_other else None,
        status=status,
    )


def _display(fact: ComponentFact | None) -> str | None:
    if fact is None:
        return None
    return fact.version_text or PRESENT_WITHOUT_VERSION
