"""Registry of the extractors a snapshot runs."""

from typing import Iterator

from cuda_doctor.extractors.base import Extractor


class ExtractorRegistry:
    """Extractors keyed by name.

    Registration order is the order facts appear in a snapshot, so GPU
    facts come first and frameworks last.

    Example:
        registry = ExtractorRegistry()
        registry.register(GPUExtractor())
        registry.register(FrameworkExtractor("jax"))
        collector = SnapshotCollector(registry=registry)
    """

    def __init__(self) -> None:
        self._extractors: dict[str, Extractor] = {}

    def register(self, extractor: Extractor) -> None:
        """Add an extractor.

        Raises:
            ValueError: If an extractor with the same name is already registered
        """
        if extractor.name in self._extractors:
            raise ValueError(f"Extractor '{extractor.name}' is already registered")
        self._extractors[extractor.name] = extractor

    def __contains__(self, name: str) -> bool:
        return name in self._extractors

    def __iter__(self) -> Iterator[Extractor]:
        return iter(self._extractors.values())

    def __len__(self) -> int:
        return len(self._extractors)

    @property
    def names(self) -> list[str]:
        return list(self._extractors)
