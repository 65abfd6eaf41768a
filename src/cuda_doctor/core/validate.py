"""Configuration validator."""

from __future__ import annotations

import os
from typing import Mapping

from cuda_doctor.core.compat import CompatibilityEngine
from cuda_doctor.core.runner import CommandOutput, CommandRunner, SubprocessRunner
from cuda_doctor.extractors.strategies import PlatformStrategy, select_strategy
from cuda_doctor.models.facts import Category
from cuda_doctor.models.report import CheckStatus, ValidationCheck, ValidationReport
from cuda_doctor.models.snapshot import EnvironmentSnapshot
from cuda_doctor.utils.errors import CommandNotFoundError, CommandTimeoutError
from cuda_doctor.utils.logging import get_logger

logger = get_logger("validate")

# Installation layer evaluated in validation mode.
VALIDATION_CATEGORIES = (Category.DRIVER, Category.CUDA_TOOLKIT, Category.CUDNN)

CUDA_LIBRARIES = {
    "libcuda.so.1": "NVIDIA driver library",
    "libcudart.so": "CUDA runtime library",
    "libcublas.so": "CUDA BLAS library",
    "libcudnn.so": "cuDNN library",
}

LDCONFIG_COMMANDS = (("ldconfig", "-p"), ("/sbin/ldconfig", "-p"))

DEFAULT_DEVICE = "/dev/nvidia0"


class ConfigValidator:
    """Validator for the host's CUDA configuration.

    Checks environment variables, shared library registration and device
    files, and evaluates the detected driver, toolkit and cuDNN against
    the installation-layer subset of the rule table.

    Example:
        validator = ConfigValidator()
        report = validator.validate(snapshot)
        for check in report.checks:
            print(check.group, check.name, check.status.value)
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        strategy: PlatformStrategy | None = None,
        env: Mapping[str, str] | None = None,
        engine: CompatibilityEngine | None = None,
        device_path: str | None = None,
    ) -> None:
        self._runner = runner or SubprocessRunner()
        self._strategy = strategy or select_strategy()
        self._env = dict(os.environ if env is None else env)
        self._engine = engine
        self._device_path = device_path or DEFAULT_DEVICE

    @property
    def _is_linux(self) -> bool:
        return self._strategy.tag == "linux"

    def validate(self, snapshot: EnvironmentSnapshot) -> ValidationReport:
        """Run every host check and the installation-layer evaluation.

        Args:
            snapshot: Captured environment

        Returns:
            ValidationReport with checks and compatibility findings
        """
        checks = self.check_environment() + self.check_libraries() + self.check_devices()
        engine = (self._engine or CompatibilityEngine()).subset(VALIDATION_CATEGORIES)
        compatibility = engine.evaluate(f for f in snapshot.facts if f.category in VALIDATION_CATEGORIES)
        return ValidationReport(checks=checks, compatibility=compatibility)

    def check_environment(self) -> list[ValidationCheck]:
        """Check the CUDA-related environment variables."""
        checks = []
        for var, description in (("CUDA_PATH", "CUDA installation path"), ("CUDA_HOME", "CUDA home directory")):
            value = self._env.get(var)
            if value:
                checks.append(_check("environment", var, CheckStatus.OK, f"Set to {value}"))
            else:
                checks.append(_check("environment", var, CheckStatus.WARN, f"Not set ({description})"))

        checks.append(self._search_path_check("PATH", "CUDA bin directory"))
        if self._is_linux:
            checks.append(self._search_path_check("LD_LIBRARY_PATH", "CUDA lib64 directory"))
        else:
            checks.append(_check("environment", "LD_LIBRARY_PATH", CheckStatus.SKIPPED, "Linux only"))
        return checks

    def _search_path_check(self, var: str, wanted: str) -> ValidationCheck:
        value = self._env.get(var)
        if not value:
            return _check("environment", var, CheckStatus.WARN, f"Not set (should include the {wanted})")
        separator = ";" if self._strategy.tag == "windows" else ":"
        entries = [e for e in value.split(separator) if e]
        if any("cuda" in entry.lower() for entry in entries):
            return _check("environment", var, CheckStatus.OK, f"Includes a {wanted}")
        return _check("environment", var, CheckStatus.WARN, f"Does not include a {wanted}")

    def check_libraries(self) -> list[ValidationCheck]:
        """Check that the CUDA shared libraries are registered with the loader."""
        if not self._is_linux:
            return [
                _check("libraries", lib, CheckStatus.SKIPPED, "Library checking is only implemented for Linux")
                for lib in CUDA_LIBRARIES
            ]

        output = self._ldconfig()
        if output is None:
            return [
                _check("libraries", lib, CheckStatus.SKIPPED, f"Cannot check ({description}): ldconfig unavailable")
                for lib, description in CUDA_LIBRARIES.items()
            ]

        checks = []
        for lib, description in CUDA_LIBRARIES.items():
            if lib in output.stdout:
                checks.append(_check("libraries", lib, CheckStatus.OK, "Found"))
            else:
                checks.append(_check("libraries", lib, CheckStatus.FAIL, f"Not found ({description})"))
        return checks

    def _ldconfig(self) -> CommandOutput | None:
        for argv in LDCONFIG_COMMANDS:
            try:
                output = self._runner.run(argv)
            except (CommandNotFoundError, CommandTimeoutError) as e:
                logger.debug(e.message)
                continue
            if output.ok:
                return output
        return None

    def check_devices(self) -> list[ValidationCheck]:
        """Check the NVIDIA device files and their permissions."""
        if not self._is_linux:
            return [_check("devices", "device files", CheckStatus.SKIPPED, "Only implemented for Linux")]

        path = self._device_path
        if not os.path.exists(path):
            return [_check("devices", path, CheckStatus.FAIL, "NVIDIA device files not found")]
        if os.access(path, os.R_OK | os.W_OK):
            return [_check("devices", path, CheckStatus.OK, "Device file exists and is accessible")]
        return [_check("devices", path, CheckStatus.FAIL, "Device file not accessible, check permissions")]


def _check(group: str, name: str, status: CheckStatus, detail: str) -> ValidationCheck:
    return ValidationCheck(group=group, name=name, status=status, detail=detail)
