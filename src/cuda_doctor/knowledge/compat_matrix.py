"""Version compatibility matrix.

Rules are plain data. Each one says: subject versions in a range have a
tier, and (optionally) require a dependency version in a range. Maxima are
inclusive at the precision they are written in, so ``"12"`` means any 12.x.

Rules whose subject minimum is ``0`` are catch-all fallbacks; a narrower
rule always wins over them.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from cuda_doctor.models.compat import CompatibilityRule, Tier
from cuda_doctor.models.facts import Category
from cuda_doctor.utils.errors import ConfigurationError

_CUDA = Category.CUDA_TOOLKIT.value
_DRIVER = Category.DRIVER.value
_CUDNN = Category.CUDNN.value
_GPU = Category.GPU.value
_FRAMEWORK = Category.FRAMEWORK.value


def _cuda_driver(low: str, high: str | None, driver: str, tier: Tier) -> dict[str, Any]:
    return {
        "subject": _CUDA,
        "subject_min": low,
        "subject_max": high,
        "dependency": _DRIVER,
        "required_min": driver,
        "tier": tier,
        "note": f"CUDA {low}{'+' if high is None else ''} needs driver {driver} or newer",
    }


def _cudnn_cuda(low: str, high: str | None, cuda_min: str, cuda_max: str, tier: Tier) -> dict[str, Any]:
    return {
        "subject": _CUDNN,
        "subject_min": low,
        "subject_max": high,
        "dependency": _CUDA,
        "required_min": cuda_min,
        "required_max": cuda_max,
        "tier": tier,
        "note": f"cuDNN {low}{'+' if high is None else ''} builds for CUDA {cuda_min} - {cuda_max}",
    }


def _framework(
    name: str,
    low: str,
    high: str | None,
    dependency: str,
    required_min: str,
    required_max: str | None,
    tier: Tier,
    note: str = "",
) -> dict[str, Any]:
    return {
        "subject": _FRAMEWORK,
        "subject_name": name,
        "subject_min": low,
        "subject_max": high,
        "dependency": dependency,
        "required_min": required_min,
        "required_max": required_max,
        "tier": tier,
        "note": note,
    }


def get_compat_matrix() -> list[dict[str, Any]]:
    """Get the raw compatibility matrix.

    Returns:
        List of rule dictionaries, in display order
    """
    return [
        # CUDA toolkit -> minimum driver
        _cuda_driver("12.3", None, "545.23", Tier.SUPPORTED),
        _cuda_driver("12.2", "12.2", "535.86", Tier.RECOMMENDED),
        _cuda_driver("12.1", "12.1", "530.30", Tier.SUPPORTED),
        _cuda_driver("12.0", "12.0", "525.60", Tier.SUPPORTED),
        _cuda_driver("11.8", "11.8", "520.61", Tier.RECOMMENDED),
        _cuda_driver("11.7", "11.7", "515.43", Tier.SUPPORTED),
        _cuda_driver("11.6", "11.6", "510.47", Tier.SUPPORTED),
        _cuda_driver("11.0", "11.5", "450.80", Tier.DEPRECATED),
        {
            "subject": _CUDA,
            "subject_min": "0",
            "tier": Tier.INCOMPATIBLE,
            "note": "CUDA releases before 11.0 are not supported by current frameworks",
        },
        # CUDA toolkit -> compute capability
        {
            "subject": _CUDA,
            "subject_min": "12.0",
            "dependency": _GPU,
            "required_min": "5.0",
            "tier": Tier.SUPPORTED,
            "note": "CUDA 12 targets compute capability 5.0 and newer",
        },
        # Driver -> compute capability
        {
            "subject": _DRIVER,
            "subject_min": "545.23",
            "dependency": _GPU,
            "required_min": "5.0",
            "tier": Tier.RECOMMENDED,
            "note": "Current driver branch",
        },
        {
            "subject": _DRIVER,
            "subject_min": "495",
            "subject_max": "545.22",
            "dependency": _GPU,
            "required_min": "5.0",
            "tier": Tier.SUPPORTED,
            "note": "Runs CUDA 11.x and 12.0-12.2",
        },
        {
            "subject": _DRIVER,
            "subject_min": "450.80",
            "subject_max": "494",
            "dependency": _GPU,
            "required_min": "3.5",
            "tier": Tier.DEPRECATED,
            "note": "Runs CUDA 11.0-11.5 only",
        },
        {
            "subject": _DRIVER,
            "subject_min": "0",
            "tier": Tier.INCOMPATIBLE,
            "note": "Too old for any CUDA 11 or 12 toolkit",
        },
        # GPU compute capability
        {"subject": _GPU, "subject_min": "5.0", "tier": Tier.SUPPORTED, "note": "Supported by CUDA 12"},
        {
            "subject": _GPU,
            "subject_min": "3.5",
            "subject_max": "4",
            "tier": Tier.DEPRECATED,
            "note": "Dropped by CUDA 12; usable with CUDA 11",
        },
        {"subject": _GPU, "subject_min": "0", "tier": Tier.INCOMPATIBLE, "note": "Below compute capability 3.5"},
        # cuDNN -> CUDA toolkit
        _cudnn_cuda("9.0", None, "11.8", "12", Tier.SUPPORTED),
        _cudnn_cuda("8.9", "8.9", "11.0", "12", Tier.RECOMMENDED),
        _cudnn_cuda("8.6", "8.8", "11.0", "12.0", Tier.SUPPORTED),
        _cudnn_cuda("8.1", "8.5", "11.0", "11", Tier.DEPRECATED),
        {
            "subject": _CUDNN,
            "subject_min": "0",
            "tier": Tier.INCOMPATIBLE,
            "note": "cuDNN releases before 8.1 are not supported by current frameworks",
        },
        # TensorFlow -> CUDA / cuDNN
        _framework("tensorflow", "2.15", None, _CUDA, "12.3", "12", Tier.SUPPORTED),
        _framework("tensorflow", "2.15", None, _CUDNN, "8.9", "8", Tier.SUPPORTED),
        _framework("tensorflow", "2.14", "2.14", _CUDA, "12.2", "12", Tier.RECOMMENDED),
        _framework("tensorflow", "2.14", "2.14", _CUDNN, "8.9", "8", Tier.RECOMMENDED),
        _framework("tensorflow", "2.12", "2.13", _CUDA, "11.8", "11", Tier.SUPPORTED),
        _framework("tensorflow", "2.12", "2.13", _CUDNN, "8.6", "8", Tier.SUPPORTED),
        _framework("tensorflow", "2.10", "2.11", _CUDA, "11.2", "11", Tier.DEPRECATED),
        _framework("tensorflow", "2.10", "2.11", _CUDNN, "8.1", "8", Tier.DEPRECATED),
        _framework("tensorflow", "2.11", None, _GPU, "3.5", None, Tier.SUPPORTED, "Needs compute capability 3.5+"),
        # PyTorch -> CUDA
        _framework("pytorch", "2.2", None, _CUDA, "11.8", "12", Tier.SUPPORTED),
        _framework("pytorch", "2.1", "2.1", _CUDA, "11.8", "12", Tier.RECOMMENDED),
        _framework("pytorch", "2.0", "2.0", _CUDA, "11.7", "11.8", Tier.RECOMMENDED),
        _framework("pytorch", "1.13", "1.13", _CUDA, "11.6", "11.7", Tier.SUPPORTED),
        _framework("pytorch", "1.12", "1.12", _CUDA, "11.3", "11.6", Tier.DEPRECATED),
        _framework("pytorch", "1.11", "1.11", _CUDA, "11.1", "11.3", Tier.DEPRECATED),
        _framework("pytorch", "1.13", None, _GPU, "3.7", None, Tier.SUPPORTED, "Needs compute capability 3.7+"),
    ]


@lru_cache(maxsize=1)
def get_rule_table() -> tuple[CompatibilityRule, ...]:
    """Get the validated rule table.

    Built and checked once per process.

    Raises:
        RuleTableInconsistency: If two rules for the same pair overlap at one tier
    """
    # Import lazily; the engine imports this module for its default table.
    from cuda_doctor.core.compat import validate_rule_table

    rules = tuple(CompatibilityRule.model_validate(entry) for entry in get_compat_matrix())
    validate_rule_table(rules)
    return rules


# Components whose newest known release drives the update check.
LATEST_KNOWN: dict[str, str] = {
    "driver": "545.23",
    "cuda_toolkit": "12.3",
    "cudnn": "8.9.7",
    "framework:pytorch": "2.1.2",
    "framework:tensorflow": "2.15.0",
}

UPDATE_SOURCES: dict[str, str] = {
    "driver": "https://www.nvidia.com/Download/index.aspx",
    "cuda_toolkit": "https://developer.nvidia.com/cuda-downloads",
    "cudnn": "https://developer.nvidia.com/cudnn",
    "framework:pytorch": "https://pytorch.org/get-started/locally/",
    "framework:tensorflow": "pip install --upgrade tensorflow",
}


def latest_version_rules(latest: dict[str, str] | None = None) -> list[CompatibilityRule]:
    """Synthetic rules classifying versions against the newest known release.

    Versions at or above the latest release are recommended; anything older
    is supported with an update available.

    Args:
        latest: Key -> version overrides merged over LATEST_KNOWN

    Returns:
        Two rules per component
    """
    versions = {**LATEST_KNOWN, **(latest or {})}
    rules = []
    for key, version in versions.items():
        category_text, _, name = key.partition(":")
        try:
            category = Category(category_text)
        except ValueError:
            raise ConfigurationError(f"Unknown component '{key}' in latest versions", config_key="updates.latest")
        rules.append(
            CompatibilityRule(
                subject=category,
                subject_name=name or None,
                subject_min=version,
                tier=Tier.RECOMMENDED,
                note=f"Up to date (latest known {version})",
            )
        )
        rules.append(
            CompatibilityRule(
                subject=category,
                subject_name=name or None,
                subject_min="0",
                tier=Tier.SUPPORTED,
                note=f"Update available: {version}",
            )
        )
    return rules


def get_recommended_stacks() -> dict[str, dict[str, str]]:
    """Get well-tested component combinations.

    Returns:
        Dictionary mapping stack names to component versions
    """
    return {
        "Latest Stable": {"cuda_toolkit": "12.2", "cudnn": "8.9", "tensorflow": "2.14", "pytorch": "2.1"},
        "High Performance": {"cuda_toolkit": "11.8", "cudnn": "8.6", "tensorflow": "2.13", "pytorch": "2.0"},
        "Long Term Support": {"cuda_toolkit": "11.2", "cudnn": "8.1", "tensorflow": "2.10", "pytorch": "1.13"},
    }
