"""Deep learning framework extractor."""

from cuda_doctor.extractors.base import FallbackExtractor
from cuda_doctor.extractors.strategies import FRAMEWORK_CAPABILITY
from cuda_doctor.models.facts import Category


class FrameworkExtractor(FallbackExtractor):
    """Extractor for one Python framework (PyTorch, TensorFlow, ...).

    Example:
        extractor = FrameworkExtractor("pytorch")
        extractor.capability  # "detect-framework:pytorch"
    """

    category = Category.FRAMEWORK

    def __init__(self, name: str) -> None:
        super().__init__(name=name)

    @property
    def framework(self) -> str:
        return self._component or ""

    @property
    def description(self) -> str:
        """Human-readable description."""
        return f"Detects the installed {self.framework} version"

    @property
    def capability(self) -> str:
        return f"{FRAMEWORK_CAPABILITY}{self.framework}"
