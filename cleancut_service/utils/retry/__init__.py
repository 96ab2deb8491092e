from __future__ import annotations

from cleancut_service.utils.retry.strategies import RetryStrategy

__all__ = ["RetryStrategy"]
