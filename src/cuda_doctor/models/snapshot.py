"""Environment snapshot models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, model_validator

from cuda_doctor.models.facts import Category, ComponentFact

SCHEMA_VERSION = 1


class SystemDescriptor(BaseModel):
    """Host attributes collected alongside the facts."""

    model_config = {"frozen": True, "extra": "ignore"}

    os_version: str | None = Field(default=None, description="OS release/version string")
    kernel: str | None = Field(default=None, description="Kernel version")
    cpu: str | None = Field(default=None, description="CPU model")
    cpu_cores_physical: int | None = Field(default=None, description="Physical core count")
    cpu_cores_logical: int | None = Field(default=None, description="Logical core count")
    total_memory_gb: float | None = Field(default=None, description="Installed RAM in GB")
    python_version: str | None = Field(default=None, description="Interpreter version")
    virtual_env: str | None = Field(default=None, description="Active virtualenv path")
    conda_env: str | None = Field(default=None, description="Active conda environment")


class EnvironmentSnapshot(BaseModel):
    """A point-in-time capture of all facts plus system descriptors.

    Facts are keyed uniquely by ``ComponentFact.key``; construction fails if
    two facts share a key.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    schema_version: int = Field(default=SCHEMA_VERSION, description="Document schema version")
    captured_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Capture timestamp (UTC)",
    )
    os_name: str = Field(default="unknown", description="Operating system name")
    arch: str = Field(default="unknown", description="CPU architecture")
    hostname: str | None = Field(default=None, description="Host name")
    system: SystemDescriptor = Field(default_factory=SystemDescriptor)
    facts: list[ComponentFact] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_keys(self) -> "EnvironmentSnapshot":
        seen: set[str] = set()
        for fact in self.facts:
            if fact.key in seen:
                raise ValueError(f"duplicate fact key: {fact.key}")
            seen.add(fact.key)
        return self

    @property
    def keys(self) -> list[str]:
        return [fact.key for fact in self.facts]

    def fact(self, key: str) -> ComponentFact | None:
        """Get a fact by key."""
        for fact in self.facts:
            if fact.key == key:
                return fact
        return None

    def facts_in(self, category: Category) -> list[ComponentFact]:
        """Get all facts of a category, in capture order."""
        return [fact for fact in self.facts if fact.category == category]

    @property
    def present_facts(self) -> list[ComponentFact]:
        return [fact for fact in self.facts if fact.presence]

    @property
    def gpus(self) -> list[ComponentFact]:
        return [fact for fact in self.facts_in(Category.GPU) if fact.presence]
