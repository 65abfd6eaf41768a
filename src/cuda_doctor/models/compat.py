"""Compatibility rule and finding models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_serializer

from cuda_doctor.models.facts import Category, fact_key
from cuda_doctor.models.version import VersionField, VersionString


class Tier(str, Enum):
    """Compatibility classification."""

    RECOMMENDED = "recommended"
    SUPPORTED = "supported"
    DEPRECATED = "deprecated"
    INCOMPATIBLE = "incompatible"
    UNKNOWN = "unknown"

    @property
    def severity(self) -> int:
        """Higher is worse; unknown sits between supported and deprecated."""
        return _SEVERITY[self]


_SEVERITY = {
    Tier.RECOMMENDED: 0,
    Tier.SUPPORTED: 1,
    Tier.UNKNOWN: 2,
    Tier.DEPRECATED: 3,
    Tier.INCOMPATIBLE: 4,
}


CROSS_CHECK_NAMES = {
    Category.DRIVER: "driver-sufficiency",
    Category.CUDA_TOOLKIT: "cuda-toolkit-compatibility",
    Category.CUDNN: "cudnn-compatibility",
    Category.GPU: "compute-capability",
    Category.FRAMEWORK: "framework-compatibility",
}


class CompatibilityRule(BaseModel):
    """A valid subject range and what it requires of one dependency.

    Upper bounds are inclusive at the precision they are written in, so a
    ``subject_max`` of ``12.2`` covers ``12.2.140``.
    """

    model_config = {"frozen": True}

    subject: Category = Field(description="Category the rule classifies")
    subject_name: str | None = Field(default=None, description="Framework name, if any")
    subject_min: VersionField = Field(description="Lowest subject version covered")
    subject_max: VersionField | None = Field(default=None, description="Highest subject version covered")
    dependency: Category | None = Field(default=None, description="Category the subject depends on")
    dependency_name: str | None = Field(default=None, description="Dependency framework name, if any")
    required_min: VersionField | None = Field(default=None, description="Lowest acceptable dependency version")
    required_max: VersionField | None = Field(default=None, description="Highest acceptable dependency version")
    tier: Tier = Field(description="Tier of subject versions in range")
    note: str = Field(default="", description="Short human-readable explanation")

    @field_serializer("subject_min", "subject_max", "required_min", "required_max")
    def _serialize_version(self, version: VersionString | None) -> str | None:
        return str(version) if version is not None else None

    @property
    def subject_key(self) -> str:
        return fact_key(self.subject, self.subject_name)

    @property
    def dependency_key(self) -> str | None:
        if self.dependency is None:
            return None
        return fact_key(self.dependency, self.dependency_name)

    @property
    def subject_range(self) -> str:
        return _format_range(self.subject_min, self.subject_max)

    @property
    def required_range(self) -> str | None:
        if self.required_min is None:
            return None
        return _format_range(self.required_min, self.required_max)

    @property
    def is_catch_all(self) -> bool:
        """Fallback rule whose range starts at zero."""
        return all(c == 0 for c in self.subject_min.components) and self.subject_max is None

    def describe(self) -> str:
        subject = self.subject_name or self.subject.label
        text = f"{subject} {self.subject_range}"
        if self.dependency is not None and self.required_range:
            dependency = self.dependency_name or self.dependency.label
            text += f" -> {dependency} {self.required_range}"
        return text


def _format_range(minimum: VersionString, maximum: VersionString | None) -> str:
    if maximum is None:
        return f">= {minimum}"
    if str(minimum) == str(maximum):
        return str(minimum)
    return f"{minimum} - {maximum}"


class CompatibilityFinding(BaseModel):
    """Tier assigned to one detected fact."""

    model_config = {"frozen": True}

    key: str = Field(description="Key of the fact that was classified")
    version: str | None = Field(default=None, description="Version that was classified")
    tier: Tier = Field(description="Resulting tier")
    rule: CompatibilityRule | None = Field(default=None, description="Rule that decided the tier")
    message: str = Field(default="", description="Human-readable summary")


class CrossCheck(BaseModel):
    """Derived finding comparing a fact with a dependency it requires."""

    model_config = {"frozen": True}

    name: str = Field(description="Check name, e.g. 'driver-sufficiency'")
    subject_key: str = Field(description="Fact that imposes the requirement")
    dependency_key: str = Field(description="Fact the requirement applies to")
    rule: CompatibilityRule = Field(description="Rule holding the requirement")
    tier: Tier = Field(description="Tier of the check")
    satisfied: bool | None = Field(default=None, description="None when the dependency is unknown")
    required: str = Field(description="Required dependency range")
    actual: str | None = Field(default=None, description="Detected dependency version")
    message: str = Field(default="", description="Human-readable summary")


class CompatibilityReport(BaseModel):
    """Result of evaluating a set of facts against the rule table."""

    model_config = {"frozen": True}

    findings: list[CompatibilityFinding] = Field(default_factory=list)
    cross_checks: list[CrossCheck] = Field(default_factory=list)

    def finding_for(self, key: str) -> CompatibilityFinding | None:
        for finding in self.findings:
            if finding.key == key:
                return finding
        return None

    def checks_named(self, name: str) -> list[CrossCheck]:
        return [c for c in self.cross_checks if c.name == name]

    @property
    def failed_checks(self) -> list[CrossCheck]:
        return [c for c in self.cross_checks if c.satisfied is False]

    @property
    def worst_tier(self) -> Tier:
        tiers = [f.tier for f in self.findings] + [c.tier for c in self.cross_checks]
        if not tiers:
            return Tier.UNKNOWN
        return max(tiers, key=lambda t: t.severity)

    @property
    def compatible(self) -> bool:
        """No finding or cross-check is incompatible."""
        return self.worst_tier != Tier.INCOMPATIBLE
