"""Data models for cuda-doctor.

All models are Pydantic BaseModel with frozen=True for immutability.
"""

from cuda_doctor.models.common import DiagnosticError
from cuda_doctor.models.version import VersionField, VersionString
from cuda_doctor.models.facts import Category, ComponentFact, fact_key
from cuda_doctor.models.compat import (
    CROSS_CHECK_NAMES,
    CompatibilityFinding,
    CompatibilityReport,
    CompatibilityRule,
    CrossCheck,
    Tier,
)
from cuda_doctor.models.snapshot import SCHEMA_VERSION, EnvironmentSnapshot, SystemDescriptor
from cuda_doctor.models.diff import ComparisonResult, DiffScope, DiffStatus, FieldDiff
from cuda_doctor.models.report import (
    CheckStatus,
    CompatibilityMatrix,
    DiagnosticReport,
    UpdateAdvice,
    UpdateReport,
    ValidationCheck,
    ValidationReport,
)

__all__ = [
    # Common
    "DiagnosticError",
    # Version
    "VersionField",
    "VersionString",
    # Facts
    "Category",
    "ComponentFact",
    "fact_key",
    # Compat
    "CROSS_CHECK_NAMES",
    "CompatibilityFinding",
    "CompatibilityReport",
    "CompatibilityRule",
    "CrossCheck",
    "Tier",
    # Snapshot
    "SCHEMA_VERSION",
    "EnvironmentSnapshot",
    "SystemDescriptor",
    # Diff
    "ComparisonResult",
    "DiffScope",
    "DiffStatus",
    "FieldDiff",
    # Reports
    "CheckStatus",
    "CompatibilityMatrix",
    "DiagnosticReport",
    "UpdateAdvice",
    "UpdateReport",
    "ValidationCheck",
    "ValidationReport",
]
