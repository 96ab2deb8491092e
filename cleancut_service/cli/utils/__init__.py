"""CLI helpers."""

from .async_runner import coro
from .formatters import error, info, quota, rows, section, success, warning

__all__ = ["coro", "error", "info", "quota", "rows", "section", "success", "warning"]
