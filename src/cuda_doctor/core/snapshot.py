"""Environment snapshot capture."""

from __future__ import annotations

import os
import platform
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Protocol

import psutil
from pydantic import BaseModel, Field

from cuda_doctor.core.runner import DEFAULT_TIMEOUT, CommandRunner, SubprocessRunner
from cuda_doctor.extractors import ExtractorRegistry, register_default_extractors
from cuda_doctor.extractors.base import Extractor, ExtractorResult, capture_probes
from cuda_doctor.extractors.strategies import PlatformStrategy, select_strategy
from cuda_doctor.models.snapshot import EnvironmentSnapshot, SystemDescriptor
from cuda_doctor.utils.logging import get_logger_with_context


DEFAULT_MAX_WORKERS = 5


class HostInfo(BaseModel):
    """Host identity and descriptors, as reported by a system-info provider."""

    model_config = {"frozen": True}

    os_name: str = "unknown"
    arch: str = "unknown"
    hostname: str | None = None
    system: SystemDescriptor = Field(default_factory=SystemDescriptor)


class SystemInfoProvider(Protocol):
    """Source of host information for snapshots."""

    def collect(self) -> HostInfo:
        ...


class LocalSystemInfo:
    """Host information for the running machine, via ``platform`` and ``psutil``."""

    def collect(self) -> HostInfo:
        memory = psutil.virtual_memory()
        system = SystemDescriptor(
            os_version=platform.platform(),
            kernel=platform.release() or None,
            cpu=platform.processor() or platform.machine() or None,
            cpu_cores_physical=psutil.cpu_count(logical=False),
            cpu_cores_logical=psutil.cpu_count(logical=True),
            total_memory_gb=round(memory.total / (1024**3), 2),
            python_version=platform.python_version(),
            virtual_env=os.environ.get("VIRTUAL_ENV"),
            conda_env=os.environ.get("CONDA_DEFAULT_ENV"),
        )
        return HostInfo(
            os_name=platform.system() or "unknown",
            arch=platform.machine() or "unknown",
            hostname=platform.node() or None,
            system=system,
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotCollector:
    """Collector running every registered extractor and assembling a snapshot.

    Categories are extracted concurrently; within one category the fallback
    probes run strictly one after another and stop at the first match.

    Example:
        collector = SnapshotCollector(strategy=select_strategy("linux"))
        snapshot = collector.capture()
        for fact in snapshot.present_facts:
            print(fact.key, fact.version)
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        strategy: PlatformStrategy | None = None,
        registry: ExtractorRegistry | None = None,
        system_info: SystemInfoProvider | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._runner = runner or SubprocessRunner(timeout=timeout)
        self._strategy = strategy or select_strategy()
        self._registry = registry if registry is not None else register_default_extractors(ExtractorRegistry())
        self._system_info = system_info or LocalSystemInfo()
        self._timeout = timeout
        self._max_workers = max(1, max_workers)
        self._clock = clock or _utc_now

    @property
    def strategy(self) -> PlatformStrategy:
        return self._strategy

    def run_extractor(self, extractor: Extractor) -> ExtractorResult:
        """Run one extractor over lazily executed probes."""
        probes = self._strategy.probes(extractor.capability)
        captures = capture_probes(self._runner, probes, self._timeout)
        return extractor.extract(captures)

    def capture_detailed(self) -> tuple[EnvironmentSnapshot, list[ExtractorResult]]:
        """Capture a snapshot and keep the per-extractor results.

        Returns:
            The snapshot and the extractor results in registration order
        """
        extractors = list(self._registry)
        log = get_logger_with_context("snapshot", platform=self._strategy.tag)
        log.info(f"Running {len(extractors)} extractor(s)")
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            results = list(pool.map(self.run_extractor, extractors))

        host = self._system_info.collect()
        snapshot = EnvironmentSnapshot(
            captured_at=self._clock(),
            os_name=host.os_name,
            arch=host.arch,
            hostname=host.hostname,
            system=host.system,
            facts=[fact for result in results for fact in result.facts],
        )
        log.info(f"Captured {len(snapshot.present_facts)} of {len(snapshot.facts)} fact(s)")
        return snapshot, results

    def capture(self) -> EnvironmentSnapshot:
        """Capture an environment snapshot."""
        snapshot, _ = self.capture_detailed()
        return snapshot
