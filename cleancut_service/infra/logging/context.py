"""Contextvars-based log context.

Values set here (request_id, account_id, project_id) are attached to every
record emitted from the same async task by ContextInjectingFilter.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        set_log_context(request_id="abc-123", account_id=str(account_id))
        logger.info("Upload admitted")  # carries request_id and account_id
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop all context fields for the current task."""
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Copy the current log context onto each LogRecord.

    Installed on the root logger by configure_logging(); existing record
    attributes are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
