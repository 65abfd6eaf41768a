"""cuda-doctor: Diagnose the local GPU / CUDA / deep-learning stack.

This package detects the NVIDIA GPU, driver, CUDA toolkit, cuDNN and deep
learning frameworks installed on a machine, and explains whether they work
together:

- **Detection**: Ordered fallback probes per component and platform
- **Compatibility Engine**: Tiered version rules with cross-checks
- **Validation**: Environment variables, shared libraries and device files
- **Update Check**: Installed versions against the latest known releases
- **Snapshots**: Export, import and compare environment captures

Usage:
    # Library API
    from cuda_doctor import Doctor

    doctor = Doctor()

    # Diagnose
    report = doctor.diagnose()
    for finding in report.compatibility.findings:
        print(finding.key, finding.tier.value)

    # Export and compare
    doctor.export("my-env.json")
    result = doctor.compare_with("colleague-env.json")
    print(result.is_identical)

CLI:
    cuda-doctor
    cuda-doctor matrix
    cuda-doctor updates
    cuda-doctor validate
    cuda-doctor export <file>
    cuda-doctor import <file>
"""

__version__ = "0.1.0"

# Models (commonly used)
from cuda_doctor.models.facts import Category, ComponentFact
from cuda_doctor.models.version import VersionString
from cuda_doctor.models.compat import (
    CompatibilityFinding,
    CompatibilityReport,
    CompatibilityRule,
    CrossCheck,
    Tier,
)
from cuda_doctor.models.snapshot import EnvironmentSnapshot
from cuda_doctor.models.diff import ComparisonResult, DiffStatus
from cuda_doctor.models.report import DiagnosticReport, UpdateReport, ValidationReport

# Core classes
from cuda_doctor.core.doctor import Doctor
from cuda_doctor.core.compat import CompatibilityEngine
from cuda_doctor.core.compare import compare_snapshots
from cuda_doctor.core.persistence import load_snapshot, save_snapshot
from cuda_doctor.core.version import parse

# Extractors
from cuda_doctor.extractors.base import Extractor, ExtractorResult
from cuda_doctor.extractors.registry import ExtractorRegistry
from cuda_doctor.extractors.strategies import PlatformStrategy, select_strategy

# Renderers
from cuda_doctor.renderers.base import OutputFormat, RenderContext, Renderer

__all__ = [
    # Version
    "__version__",
    # Core
    "Doctor",
    "CompatibilityEngine",
    "compare_snapshots",
    "load_snapshot",
    "save_snapshot",
    "parse",
    # Models - Facts
    "Category",
    "ComponentFact",
    "VersionString",
    # Models - Compat
    "CompatibilityFinding",
    "CompatibilityReport",
    "CompatibilityRule",
    "CrossCheck",
    "Tier",
    # Models - Snapshot
    "EnvironmentSnapshot",
    "ComparisonResult",
    "DiffStatus",
    # Models - Reports
    "DiagnosticReport",
    "UpdateReport",
    "ValidationReport",
    # Extractors
    "Extractor",
    "ExtractorResult",
    "ExtractorRegistry",
    "PlatformStrategy",
    "select_strategy",
    # Renderers
    "Renderer",
    "RenderContext",
    "OutputFormat",
]
