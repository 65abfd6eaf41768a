"""Snapshot comparison models."""

from enum import Enum

from pydantic import BaseModel, Field


class DiffStatus(str, Enum):
    """Outcome of comparing one field across two snapshots."""

    MATCH = "match"
    DIFFER = "differ"
    MISSING_IN_CURRENT = "missing_in_current"
    MISSING_IN_OTHER = "missing_in_other"


class DiffScope(str, Enum):
    """Whether a diff entry is a system attribute or a component fact."""

    SYSTEM = "system"
    COMPONENT = "component"


class FieldDiff(BaseModel):
    """A single compared field."""

    model_config = {"frozen": True}

    name: str = Field(description="Field or fact key")
    scope: DiffScope = Field(default=DiffScope.COMPONENT, description="Entry scope")
    current: str | None = Field(default=None, description="Value in the current snapshot")
    other: str | None = Field(default=None, description="Value in the other snapshot")
    status: DiffStatus = Field(description="Comparison outcome")


class ComparisonResult(BaseModel):
    """Complete comparison between two snapshots."""

    model_config = {"frozen": True}

    entries: list[FieldDiff] = Field(default_factory=list, description="All compared fields")

    def entry(self, name: str) -> FieldDiff | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @property
    def system_entries(self) -> list[FieldDiff]:
        return [e for e in self.entries if e.scope == DiffScope.SYSTEM]

    @property
    def component_entries(self) -> list[FieldDiff]:
        return [e for e in self.entries if e.scope == DiffScope.COMPONENT]

    @property
    def is_identical(self) -> bool:
        return all(e.status == DiffStatus.MATCH for e in self.entries)

    @property
    def has_system_mismatch(self) -> bool:
        return any(e.status != DiffStatus.MATCH for e in self.system_entries)
