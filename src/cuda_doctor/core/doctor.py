"""Doctor: the library entry point tying the diagnostic modes together."""

from __future__ import annotations

from pathlib import Path

from cuda_doctor.core.compare import compare_snapshots
from cuda_doctor.core.compat import CompatibilityEngine
from cuda_doctor.core.persistence import load_snapshot, save_snapshot
from cuda_doctor.core.runner import CommandRunner, SubprocessRunner
from cuda_doctor.core.snapshot import SnapshotCollector, SystemInfoProvider
from cuda_doctor.core.updates import check_updates
from cuda_doctor.core.validate import ConfigValidator
from cuda_doctor.extractors import ExtractorRegistry, register_default_extractors
from cuda_doctor.extractors.strategies import PlatformStrategy, select_strategy
from cuda_doctor.models.diff import ComparisonResult
from cuda_doctor.models.report import DiagnosticReport, UpdateReport, ValidationReport
from cuda_doctor.models.snapshot import EnvironmentSnapshot
from cuda_doctor.utils.config import DoctorConfig, get_config
from cuda_doctor.utils.logging import get_logger

logger = get_logger("doctor")


class Doctor:
    """Diagnose the local GPU / CUDA / framework stack.

    Each mode is a combination of capture, evaluate and compare:
    diagnose captures and evaluates, validate evaluates the installation
    layer and checks the host, updates evaluate against the latest known
    releases, and compare_with diffs against a saved snapshot.

    Example:
        doctor = Doctor()
        report = doctor.diagnose()

        for finding in report.compatibility.findings:
            print(f"{finding.key}: {finding.tier.value}")

        doctor.export(Path("env.json"))
        result = doctor.compare_with(Path("colleague.json"))
    """

    def __init__(
        self,
        config: DoctorConfig | None = None,
        runner: CommandRunner | None = None,
        strategy: PlatformStrategy | None = None,
        engine: CompatibilityEngine | None = None,
        system_info: SystemInfoProvider | None = None,
        registry: ExtractorRegistry | None = None,
    ) -> None:
        """Initialize the doctor.

        Args:
            config: Configuration; defaults to the global configuration
            runner: Command runner; defaults to running real processes
            strategy: Probe strategy; defaults to the configured or detected platform
            engine: Compatibility engine; defaults to the built-in rule table
            system_info: Host information provider
            registry: Extractors to run; defaults to the built-in ones
        """
        self._config = config or get_config()
        detection = self._config.detection
        self._runner = runner or SubprocessRunner(timeout=detection.timeout)
        self._strategy = strategy or select_strategy(detection.platform)
        self._engine = engine or CompatibilityEngine()
        if registry is None:
            registry = register_default_extractors(ExtractorRegistry(), frameworks=detection.frameworks)
        self._collector = SnapshotCollector(
            runner=self._runner,
            strategy=self._strategy,
            registry=registry,
            system_info=system_info,
            timeout=detection.timeout,
            max_workers=detection.max_workers,
        )

    @property
    def strategy(self) -> PlatformStrategy:
        return self._strategy

    @property
    def engine(self) -> CompatibilityEngine:
        return self._engine

    def capture(self) -> EnvironmentSnapshot:
        """Capture the current environment."""
        return self._collector.capture()

    def diagnose(self) -> DiagnosticReport:
        """Capture the environment and evaluate it against the rule table."""
        snapshot, results = self._collector.capture_detailed()
        errors = [error for result in results for error in result.errors]
        return DiagnosticReport(
            snapshot=snapshot,
            compatibility=self._engine.evaluate(snapshot.facts),
            errors=errors,
        )

    def check_updates(self, snapshot: EnvironmentSnapshot | None = None) -> UpdateReport:
        """Compare installed versions with the latest known releases."""
        snapshot = snapshot or self.capture()
        return check_updates(snapshot, self._config.updates.latest)

    def validate(self, snapshot: EnvironmentSnapshot | None = None) -> ValidationReport:
        """Check the host configuration and the installation layer."""
        snapshot = snapshot or self.capture()
        validator = ConfigValidator(runner=self._runner, strategy=self._strategy, engine=self._engine)
        return validator.validate(snapshot)

    def export(self, path: Path | str, snapshot: EnvironmentSnapshot | None = None) -> Path:
        """Capture (unless given) and save a snapshot."""
        snapshot = snapshot or self.capture()
        return save_snapshot(snapshot, path)

    def compare_with(
        self,
        path: Path | str,
        current: EnvironmentSnapshot | None = None,
    ) -> ComparisonResult:
        """Compare the current environment with a saved snapshot.

        The saved snapshot is loaded before anything is captured, so a bad
        file fails fast.

        Raises:
            SerializationError: If the saved snapshot cannot be read
        """
        other = load_snapshot(path)
        current = current or self.capture()
        logger.debug(f"Comparing against snapshot captured at {other.captured_at.isoformat()}")
        return compare_snapshots(current, other)
