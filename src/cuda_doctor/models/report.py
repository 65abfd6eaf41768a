"""Report models produced by the diagnostic modes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from cuda_doctor.models.common import DiagnosticError
from cuda_doctor.models.compat import CompatibilityReport, CompatibilityRule, Tier
from cuda_doctor.models.snapshot import EnvironmentSnapshot


class DiagnosticReport(BaseModel):
    """Default diagnostics: what was found and how it fits together."""

    model_config = {"frozen": True}

    snapshot: EnvironmentSnapshot
    compatibility: CompatibilityReport
    errors: list[DiagnosticError] = Field(default_factory=list, description="Probe and detection errors")

    @property
    def missing(self) -> list[str]:
        """Keys of facts that were not detected."""
        return [fact.key for fact in self.snapshot.facts if not fact.presence]


class UpdateAdvice(BaseModel):
    """Installed version of one component against the latest known release."""

    model_config = {"frozen": True}

    key: str = Field(description="Fact key")
    component: str = Field(description="Display name")
    current: str | None = Field(default=None, description="Installed version")
    latest: str | None = Field(default=None, description="Latest known version")
    tier: Tier = Field(default=Tier.UNKNOWN, description="Tier against the latest-version rules")
    update_available: bool | None = Field(default=None, description="None when not installed")
    source: str | None = Field(default=None, description="Where to get the update")


class UpdateReport(BaseModel):
    """Result of the update check."""

    model_config = {"frozen": True}

    advice: list[UpdateAdvice] = Field(default_factory=list)

    @property
    def outdated(self) -> list[UpdateAdvice]:
        return [a for a in self.advice if a.update_available]


class CheckStatus(str, Enum):
    """Outcome of one host validation check."""

    OK = "ok"
    WARN = "warn"
    FAIL = "fail"
    SKIPPED = "skipped"


class ValidationCheck(BaseModel):
    """A single configuration validation check."""

    model_config = {"frozen": True}

    group: str = Field(description="Check group, e.g. 'environment'")
    name: str = Field(description="What was checked")
    status: CheckStatus = Field(description="Check outcome")
    detail: str = Field(default="", description="Explanation")


class ValidationReport(BaseModel):
    """Result of the configuration validator."""

    model_config = {"frozen": True}

    checks: list[ValidationCheck] = Field(default_factory=list)
    compatibility: CompatibilityReport = Field(default_factory=CompatibilityReport)

    def checks_in(self, group: str) -> list[ValidationCheck]:
        return [c for c in self.checks if c.group == group]

    @property
    def passed(self) -> bool:
        return all(c.status != CheckStatus.FAIL for c in self.checks) and self.compatibility.compatible


class CompatibilityMatrix(BaseModel):
    """The rule table and the recommended stacks, for display."""

    model_config = {"frozen": True}

    rules: list[CompatibilityRule] = Field(default_factory=list)
    stacks: dict[str, dict[str, str]] = Field(default_factory=dict, description="Stack name -> component versions")
