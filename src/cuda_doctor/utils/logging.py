"""Logging setup for cuda-doctor.

Everything logs under the ``cuda_doctor`` namespace to stderr, so stdout
stays clean for JSON reports. Verbose runs switch to the detailed format,
which also prints the context fields attached through
:func:`get_logger_with_context`.
"""

import logging
import sys
from typing import Any, MutableMapping

ROOT_LOGGER = "cuda_doctor"

BRIEF_FORMAT = "%(levelname)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class ContextFormatter(logging.Formatter):
    """Formatter that appends a record's context fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return message
        return message + " " + " ".join(f"{key}={value}" for key, value in context.items())


def configure_logging(level: str = "INFO", structured: bool = False) -> None:
    """Route cuda-doctor logs to stderr.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        structured: Use the detailed format, with context fields
    """
    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(ContextFormatter(DETAILED_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(BRIEF_FORMAT))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    logger.handlers = [handler]
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the cuda_doctor namespace."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class ContextAdapter(logging.LoggerAdapter):
    """Adapter attaching fixed context fields to every record."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger_with_context(name: str, **context: Any) -> ContextAdapter:
    """Get a logger that tags every message with the given fields.

    Example:
        log = get_logger_with_context("snapshot", platform="linux")
        log.info("Captured 6 facts")  # ... Captured 6 facts platform=linux
    """
    return ContextAdapter(get_logger(name), context)
