"""
Structured logging setup for Batch Shot.

All runtime logging should go through structlog. This module provides a
minimal baseline shared by the API and the capture worker.

Key principles:
- Logs are structured (JSON by default) and include contextual fields.
- Context can be bound per capture job (job_id, url, viewport, domain).
- Configuration is deterministic and avoids ad-hoc logging configuration
  scattered across the codebase.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog


def _build_shared_processors() -> list[structlog.types.Processor]:
    """Processors shared by the API and the capture worker."""

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        timestamper,
        structlog.processors.EventRenamer("message"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def _attach_handler(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_stdout: bool = True,
) -> None:
    """
    Configure structlog and the standard logging module.

    This should be called once at process startup (server or CLI). Calling
    it again replaces the root handlers, and loggers created at import time
    pick up the new level because bound loggers are not cached.

    - When log_stdout is True (default), logs are written to stdout.
    - When log_file is set, logs are also appended to that file (parent dir
      created if needed).
    - If neither applies, stdout is used so the process never has zero handlers.

    Third-party chatter (uvicorn access logs) stays on the stdlib logger and
    goes through the same handlers.
    """

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if log_stdout:
        _attach_handler(root, logging.StreamHandler(sys.stdout), level)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _attach_handler(root, logging.FileHandler(log_file, encoding="utf-8"), level)

    if not root.handlers:
        _attach_handler(root, logging.StreamHandler(sys.stdout), level)

    structlog.configure(
        processors=_build_shared_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Obtain a structured logger.

    Usage:
        from shared.logging import get_logger, bind_request_context

        logger = get_logger(__name__)
        bind_request_context(job_id="https://example.com-desktop", viewport="desktop")
        logger.info("capture_job_started")
    """

    # If configure_logging() has not been called yet, fall back to a
    # minimal configuration to avoid silent failures.
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_request_context(
    *,
    job_id: Optional[str] = None,
    url: Optional[str] = None,
    viewport: Optional[str] = None,
    domain: Optional[str] = None,
    **extra: Any,
) -> Mapping[str, Any]:
    """
    Bind common context fields for capture logging.

    This centralizes the convention that job logs should include:
    - job_id
    - url
    - viewport
    - domain

    Additional keyword arguments are also bound into the logging context.
    """

    context: dict[str, Any] = {
        "job_id": job_id,
        "url": url,
        "viewport": viewport,
        "domain": domain,
        **extra,
    }

    # Remove keys with None values to keep logs concise.
    filtered_context = {k: v for k, v in context.items() if v is not None}

    structlog.contextvars.bind_contextvars(**filtered_context)
    return filtered_context


def clear_request_context(*keys: str) -> None:
    """Unbind the given context keys (all of them when none are given)."""

    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()
