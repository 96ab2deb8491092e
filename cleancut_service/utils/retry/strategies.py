from __future__ import annotations

import random
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cleancut_service.core.settings.jobs import JobSettings


class RetryStrategy:
    """Attempt ceiling and exponential backoff for failed work.

    ``calculate_delay(n)`` is the wait before retry number ``n`` (0-based):
    ``initial_delay * exponential_base ** n``, capped at ``max_delay``.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 5.0,
        max_delay: float = 3600.0,
        exponential_base: float = 2.0,
        jitter: bool = False,
        jitter_range: tuple[float, float] = (0.5, 1.5),
    ) -> None:
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.jitter_range = jitter_range

    @classmethod
    def from_settings(cls, settings: JobSettings) -> RetryStrategy:
        return cls(
            max_attempts=settings.max_attempts,
            initial_delay=settings.backoff_base_seconds,
            max_delay=settings.backoff_max_seconds,
            exponential_base=settings.backoff_multiplier,
        )

    def should_retry(self, attempts_made: int) -> bool:
        return attempts_made < self.max_attempts

    def calculate_delay(self, attempt: int) -> float:
        delay = self.initial_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)
        if self.jitter:
            delay *= random.uniform(self.jitter_range[0], self.jitter_range[1])
        return delay

    def backoff(self, attempt: int) -> timedelta:
        return timedelta(seconds=self.calculate_delay(attempt))
