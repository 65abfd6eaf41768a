"""NVIDIA driver extractor."""

from cuda_doctor.extractors.base import FallbackExtractor
from cuda_doctor.models.facts import Category


class DriverExtractor(FallbackExtractor):
    """Extractor for the NVIDIA kernel driver version."""

    category = Category.DRIVER

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Detects the NVIDIA driver version"
