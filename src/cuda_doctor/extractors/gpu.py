"""GPU device extractor."""

from __future__ import annotations

from cuda_doctor.core.version import try_parse
from cuda_doctor.extractors.base import FallbackExtractor, Probe, TextMatch
from cuda_doctor.knowledge.gpu_matrix import lookup_gpu
from cuda_doctor.models.facts import Category, ComponentFact


class GPUExtractor(FallbackExtractor):
    """Extractor for NVIDIA GPU devices.

    Produces one fact per device, keyed ``gpu:<index>``. The fact version
    is the device's compute capability: taken from the probe when it
    reports one, otherwise looked up from the device name.

    Example:
        extractor = GPUExtractor()
        result = extractor.extract(captures)
        for fact in result.facts:
            print(fact.key, fact.name, fact.version)
    """

    category = Category.GPU

    @property
    def description(self) -> str:
        """Human-readable description."""
        return "Detects NVIDIA GPUs, their compute capability and memory"

    def build_facts(self, matches: list[TextMatch], probe: Probe) -> list[ComponentFact]:
        facts = []
        used: set[int] = set()
        for position, match in enumerate(matches):
            index = match.index if match.index is not None and match.index not in used else position
            while index in used:
                index += 1
            used.add(index)

            details = dict(match.details)
            version = match.version
            known = lookup_gpu(match.name) if match.name else None
            if known is not None:
                _, spec = known
                details.setdefault("architecture", spec["architecture"])
                if version is None:
                    version = try_parse(spec["compute_capability"])
                    details["compute_capability_source"] = "gpu_matrix"

            facts.append(
                ComponentFact.detected(
                    self.category,
                    version,
                    raw=match.raw,
                    method=probe.label,
                    name=match.name,
                    index=index,
                    details=details,
                )
            )
        return facts
