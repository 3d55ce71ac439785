"""Structured logging configuration for skillscout.

Configures structlog with a shared processor chain. Development mode
renders human-readable console lines, production mode renders JSON so a
host can ship engine diagnostics to its own log pipeline. All output goes
to stderr; stdout belongs to the host.

Event naming convention:
- dot.notation, ``skills.<component>.<event>``
  (e.g. "skills.loader.entry_skipped", "skills.resolver.group_suppressed")

Standard context keys:
- request_id: bound by the engine for the duration of one request
- generation: registry snapshot generation the request ran against

Usage:
    from skillscout.observability import configure_logging, get_logger

    configure_logging(LoggingConfig(mode=LogMode.PROD))
    log = get_logger()
    log.info("skills.registry.reloaded", count=12, generation=3)
"""

from __future__ import annotations

from enum import Enum
import logging
import os
import sys
from typing import Any

from pydantic import BaseModel, Field
import structlog


class LogMode(str, Enum):
    """Logging output mode."""

    DEV = "dev"
    PROD = "prod"


class LoggingConfig(BaseModel):
    """Configuration for structured logging.

    Attributes:
        mode: Output mode (dev for human-readable, prod for JSON).
        log_level: Minimum log level to output.
    """

    mode: LogMode = Field(default_factory=lambda: _get_mode_from_env())
    log_level: str = Field(default="INFO")

    model_config = {"frozen": True}


_configured: bool = False
_current_config: LoggingConfig | None = None

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_mode_from_env() -> LogMode:
    """Read the output mode from SKILLSCOUT_LOG_MODE (defaults to dev)."""
    env_mode = os.environ.get("SKILLSCOUT_LOG_MODE", "dev").lower()
    if env_mode == "prod":
        return LogMode.PROD
    return LogMode.DEV


def _get_log_level(level_str: str) -> int:
    """Convert a level name like "INFO" to its logging constant."""
    return _LEVELS.get(level_str.upper(), logging.INFO)


def _get_processors(mode: LogMode) -> list[Any]:
    """Build the processor chain, ending in the renderer for ``mode``."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if mode == LogMode.DEV:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Configure structlog for the process.

    Safe to call more than once; the latest call wins.

    Args:
        config: Logging configuration. If None, uses defaults with the
            mode taken from the SKILLSCOUT_LOG_MODE environment variable.
    """
    global _configured, _current_config

    if config is None:
        config = LoggingConfig()

    _current_config = config
    structlog.configure(
        processors=_get_processors(config.mode),
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str | None = None) -> Any:
    """Get a bound logger, configuring defaults on first use.

    Args:
        name: Optional logger name.

    Returns:
        A bound structlog logger.
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key/values into every subsequent log entry of this context.

    Example:
        bind_context(request_id="req_1a2b", generation=3)
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove ``keys`` from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def get_current_config() -> LoggingConfig | None:
    """Return the active LoggingConfig, or None if never configured."""
    return _current_config


def is_configured() -> bool:
    """Return True once configure_logging has run."""
    return _configured


def reset_logging() -> None:
    """Reset module state and structlog defaults (used by tests)."""
    global _configured, _current_config
    _configured = False
    _current_config = None
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
