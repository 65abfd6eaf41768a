"""CUDA toolkit extractor."""

from cuda_doctor.extractors.base import FallbackExtractor
from cuda_doctor.models.facts import Category


class CudaToolkitExtractor(FallbackExtractor):
    """Extractor for the CUDA toolkit version.

    Tries ``nvcc`` on PATH and under the known installation roots, then the
    toolkit's version files, then asks installed frameworks which CUDA
    they were built against.
    """

    category = Category.CUDA_TOOLKIT

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Detects the CUDA toolkit version"
