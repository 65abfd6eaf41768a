"""Detected component facts."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from cuda_doctor.models.version import VersionString


class Category(str, Enum):
    """Kind of component a fact describes."""

    GPU = "gpu"
    DRIVER = "driver"
    CUDA_TOOLKIT = "cuda_toolkit"
    CUDNN = "cudnn"
    FRAMEWORK = "framework"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Category.GPU: "GPU",
    Category.DRIVER: "NVIDIA Driver",
    Category.CUDA_TOOLKIT: "CUDA Toolkit",
    Category.CUDNN: "cuDNN",
    Category.FRAMEWORK: "Framework",
}


def fact_key(category: Category, name: str | None = None, index: int | None = None) -> str:
    """Build the unique snapshot key for a fact."""
    if category == Category.GPU and index is not None:
        return f"{category.value}:{index}"
    if category == Category.FRAMEWORK and name:
        return f"{category.value}:{name}"
    return category.value


class ComponentFact(BaseModel):
    """A detected attribute with presence and an optional version.

    For GPUs ``name`` is the device name, ``index`` the device index and the
    version is the compute capability when the probe reports one. For
    frameworks ``name`` is the framework ("pytorch", "tensorflow").
    """

    model_config = {"frozen": True, "extra": "ignore"}

    category: Category = Field(description="Component category")
    name: str | None = Field(default=None, description="Framework or device name")
    index: int | None = Field(default=None, description="Device index for GPU facts")
    presence: bool = Field(default=False, description="Whether the component was found")
    version: VersionString | None = Field(default=None, description="Detected version")
    raw: str = Field(default="", description="Text the version was read from")
    method: str | None = Field(default=None, description="Probe that produced this fact")
    details: dict[str, str] = Field(default_factory=dict, description="Extra attributes")

    @model_validator(mode="before")
    @classmethod
    def _default_presence(cls, data: Any) -> Any:
        # Older or hand-written documents may omit presence entirely.
        if isinstance(data, dict) and "presence" not in data:
            data = dict(data)
            data["presence"] = data.get("version") is not None
        return data

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: Any) -> Any:
        # YAML reads unquoted 12.2 or 535 as numbers.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            from cuda_doctor.core.version import try_parse

            # Unparseable text degrades to "present, version unknown".
            return try_parse(value)
        return value

    @model_validator(mode="after")
    def _absent_has_no_version(self) -> "ComponentFact":
        if not self.presence and self.version is not None:
            raise ValueError("an absent component cannot carry a version")
        return self

    @field_serializer("version")
    def _serialize_version(self, version: VersionString | None) -> str | None:
        return str(version) if version is not None else None

    @property
    def key(self) -> str:
        """Unique key of this fact within a snapshot."""
        return fact_key(self.category, self.name, self.index)

    @property
    def display_name(self) -> str:
        if self.category == Category.FRAMEWORK and self.name:
            return self.name
        if self.category == Category.GPU and self.index is not None:
            return f"GPU {self.index}"
        return self.category.label

    @property
    def version_text(self) -> str | None:
        return str(self.version) if self.version is not None else None

    @classmethod
    def absent(
        cls,
        category: Category,
        name: str | None = None,
        method: str | None = None,
    ) -> "ComponentFact":
        """Create a fact for a component that was not found."""
        return cls(category=category, name=name, presence=False, method=method)

    @classmethod
    def detected(
        cls,
        category: Category,
        version: VersionString | None,
        raw: str = "",
        method: str | None = None,
        name: str | None = None,
        index: int | None = None,
        details: dict[str, str] | None = None,
    ) -> "ComponentFact":
        """Create a fact for a component that was found."""
        return cls(
            category=category,
            name=name,
            index=index,
            presence=True,
            version=version,
            raw=raw,
            method=method,
            details=details or {},
        )
