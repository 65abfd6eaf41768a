"""cuDNN extractor."""

from cuda_doctor.extractors.base import FallbackExtractor
from cuda_doctor.models.facts import Category


class CuDNNExtractor(FallbackExtractor):
    """Extractor for the cuDNN library version.

    Header files give the version as three ``#define`` lines; the PyTorch
    fallback reports it as a packed integer (``8902`` for 8.9.2).
    """

    category = Category.CUDNN

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Detects the cuDNN version from headers or frameworks"
