"""Structlog-based logging configuration.

Provides:
- configure_logging(): one-shot structlog setup writing to stderr
- get_logger(): returns a logger bound with a component name
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

_CONFIGURED = False

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(verbose: bool = False) -> None:
    """Configure structlog once for the process.

    Logs go to stderr so stdout stays clean for the generated message.
    Verbose mode lowers the threshold from WARNING to INFO; LOG_LEVEL
    overrides both.

    Args:
        verbose: Emit progress information while generating
    """
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    level = _resolve_level(verbose)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _select_renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> Any:
    """Return a structlog logger pre-bound with the component name."""
    return structlog.get_logger(component=component)


def _resolve_level(verbose: bool) -> int:
    override = os.environ.get("LOG_LEVEL", "").upper()
    if override in _LEVELS:
        return _LEVELS[override]
    return logging.INFO if verbose else logging.WARNING


def _select_renderer() -> Any:
    """Choose renderer based on LOG_FORMAT env."""
    if os.environ.get("LOG_FORMAT", "").lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
