"""Structured logging configuration for Stencil.

This module provides structlog-based logging with:
- JSON output for machine consumption (when STENCIL_LOG_FORMAT=json)
- Pretty console output for interactive use (default)
- Context binding for a render batch (batch_id, kit)

Usage:
    from stencil.logging import get_logger, configure_logging

    configure_logging()

    log = get_logger(__name__)
    log.info("render_batch_started", documents=2)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "get_logger",
    "configure_logging",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "STENCIL_LOG_FORMAT"

LOG_LEVEL_ENV_VAR = "STENCIL_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"


def _get_log_level() -> int:
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.WARNING)


def _is_json_output() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _get_shared_processors() -> list[Processor]:
    """Processors shared between stdlib and structlog records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _get_renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    *,
    force_json: bool = False,
    level: int | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; each call replaces the previous handler.

    Args:
        force_json: Force JSON output regardless of STENCIL_LOG_FORMAT.
        level: Override log level. If None, reads STENCIL_LOG_LEVEL.
    """
    use_json = force_json or _is_json_output()
    log_level = level if level is not None else _get_log_level()

    structlog.configure(
        processors=[
            *_get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Log output goes to stderr so rendered previews on stdout stay clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.dict_tracebacks
                if use_json
                else structlog.processors.format_exc_info,
                _get_renderer(use_json),
            ],
            foreign_pre_chain=_get_shared_processors(),
        )
    )
    root_logger.addHandler(handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        A bound structlog logger.

    Example:
        log = get_logger(__name__)
        log = log.bind(kit="uikit")
        log.info("kit_loaded", templates=2)
    """
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Bind context variables included in every subsequent log record.

    Example:
        bind_context(batch_id="a1b2c3")
        log.info("file_written")  # includes batch_id
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
