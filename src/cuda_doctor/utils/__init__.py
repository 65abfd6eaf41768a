"""Utility functions for cuda-doctor."""

from cuda_doctor.utils.logging import configure_logging, get_logger, get_logger_with_context
from cuda_doctor.utils.errors import (
    DoctorError,
    ParseError,
    DetectionFailure,
    CommandNotFoundError,
    CommandTimeoutError,
    RuleTableInconsistency,
    SerializationError,
    ConfigurationError,
)
from cuda_doctor.utils.config import (
    DoctorConfig,
    DetectionConfig,
    OutputConfig,
    UpdatesConfig,
    load_config,
    save_config,
    get_config,
    set_config,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "DoctorError",
    "ParseError",
    "DetectionFailure",
    "CommandNotFoundError",
    "CommandTimeoutError",
    "RuleTableInconsistency",
    "SerializationError",
    "ConfigurationError",
    # Config
    "DoctorConfig",
    "DetectionConfig",
    "OutputConfig",
    "UpdatesConfig",
    "load_config",
    "save_config",
    "get_config",
    "set_config",
]
