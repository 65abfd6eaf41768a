"""Fact extractors for GPU, driver, CUDA, cuDNN and frameworks."""

from typing import Iterable

from cuda_doctor.extractors.base import (
    Extractor,
    ExtractorResult,
    FallbackExtractor,
    Probe,
    ProbeCapture,
    TextMatch,
    capture_probes,
    scan,
)
from cuda_doctor.extractors.markers import TextPattern
from cuda_doctor.extractors.registry import ExtractorRegistry
from cuda_doctor.extractors.strategies import (
    STRATEGIES,
    LinuxStrategy,
    MacStrategy,
    PlatformStrategy,
    WindowsStrategy,
    select_strategy,
)
from cuda_doctor.extractors.gpu import GPUExtractor
from cuda_doctor.extractors.driver import DriverExtractor
from cuda_doctor.extractors.cuda import CudaToolkitExtractor
from cuda_doctor.extractors.cudnn import CuDNNExtractor
from cuda_doctor.extractors.framework import FrameworkExtractor

__all__ = [
    "Extractor",
    "ExtractorResult",
    "FallbackExtractor",
    "Probe",
    "ProbeCapture",
    "TextMatch",
    "TextPattern",
    "capture_probes",
    "scan",
    "ExtractorRegistry",
    "STRATEGIES",
    "PlatformStrategy",
    "LinuxStrategy",
    "WindowsStrategy",
    "MacStrategy",
    "select_strategy",
    "GPUExtractor",
    "DriverExtractor",
    "CudaToolkitExtractor",
    "CuDNNExtractor",
    "FrameworkExtractor",
    "register_default_extractors",
]

DEFAULT_FRAMEWORKS = ("pytorch", "tensorflow")


def register_default_extractors(
    registry: ExtractorRegistry | None = None,
    frameworks: Iterable[str] = DEFAULT_FRAMEWORKS,
) -> ExtractorRegistry:
    """Register all default extractors with a registry.

    Args:
        registry: Registry to add to. A new one is created if None.
        frameworks: Framework names to detect

    Returns:
        The registry with extractors registered
    """
    if registry is None:
        registry = ExtractorRegistry()

    extractors: list[Extractor] = [
        GPUExtractor(),
        DriverExtractor(),
        CudaToolkitExtractor(),
        CuDNNExtractor(),
    ]
    extractors += [FrameworkExtractor(name) for name in frameworks]

    # Already registered names are kept
    for extractor in extractors:
        if extractor.name not in registry:
            registry.register(extractor)

    return registry
