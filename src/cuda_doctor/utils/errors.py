"""Error handling utilities for cuda-doctor."""

from __future__ import annotations

from typing import Any

from cuda_doctor.models.common import DiagnosticError


class DoctorError(Exception):
    """Base exception for cuda-doctor."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_diagnostic_error(self) -> DiagnosticError:
        """Convert to DiagnosticError model."""
        return DiagnosticError(code=self.code, message=self.message, details=self.details)


class ParseError(DoctorError):
    """Version text contained no numeric component."""

    def __init__(self, raw: str):
        super().__init__(
            f"No digits found in version text: {raw!r}",
            code="NO_DIGITS_FOUND",
            details={"raw": raw},
        )


class DetectionFailure(DoctorError):
    """No fallback probe produced usable output for a category."""

    def __init__(self, category: str, attempts: list[str] | None = None):
        attempts = attempts or []
        super().__init__(
            f"Could not detect {category} (tried {len(attempts)} probe(s))",
            code="DETECTION_FAILED",
            details={"category": category, "attempts": attempts},
        )


class CommandNotFoundError(DoctorError):
    """External command or file could not be spawned or opened."""

    def __init__(self, target: str, reason: str | None = None):
        message = f"Cannot run {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, code="COMMAND_NOT_FOUND", details={"target": target})


class CommandTimeoutError(DoctorError):
    """External command exceeded its timeout."""

    def __init__(self, target: str, timeout: float | None = None):
        details: dict[str, Any] = {"target": target}
        if timeout:
            details["timeout"] = timeout
        super().__init__(f"Command timed out: {target}", code="TIMEOUT_ERROR", details=details)


class RuleTableInconsistency(DoctorError):
    """Two rules for the same subject/dependency pair overlap at the same tier."""

    def __init__(self, message: str, rules: list[str] | None = None):
        super().__init__(message, code="RULE_TABLE_INCONSISTENT", details={"rules": rules or []})


class SerializationError(DoctorError):
    """A persisted snapshot could not be read."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="SERIALIZATION_ERROR", details=details)


class ConfigurationError(DoctorError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)
