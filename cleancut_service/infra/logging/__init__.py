"""Logging infrastructure.

Structured JSONL logging with contextvars context injection, a non-blocking
QueueHandler/QueueListener pipeline and lazy debug messages.

Usage:
    import logging

    from cleancut_service.infra.logging import get_lazy_logger, set_log_context

    logger = logging.getLogger(__name__)
    set_log_context(account_id="...")
    logger.info("Project admitted", extra={"project_id": "..."})

    lazy = get_lazy_logger(__name__)
    lazy.debug(lambda: f"Snapshot: {build_snapshot()}")
"""

from cleancut_service.infra.logging.config import configure_logging, setup_logging, shutdown
from cleancut_service.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from cleancut_service.infra.logging.formatters import JSONFormatter
from cleancut_service.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "LazyLoggerAdapter",
    "clear_log_context",
    "configure_logging",
    "get_lazy_logger",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
