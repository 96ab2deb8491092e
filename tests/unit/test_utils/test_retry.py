"""Unit tests for the retry strategy."""
from __future__ import annotations

from datetime import timedelta

import pytest

from cleancut_service.core.settings import JobSettings
from cleancut_service.utils.retry import RetryStrategy


@pytest.mark.unit
class TestRetryStrategy:
    """Test suite for RetryStrategy."""

    def test_exponential_delays(self):
        strategy = RetryStrategy(initial_delay=5.0, exponential_base=2.0)

        assert [strategy.calculate_delay(n) for n in range(3)] == [5.0, 10.0, 20.0]

    def test_delay_is_capped(self):
        strategy = RetryStrategy(initial_delay=5.0, max_delay=12.0)

        assert strategy.calculate_delay(5) == 12.0

    def test_jitter_stays_in_range(self):
        strategy = RetryStrategy(initial_delay=10.0, jitter=True, jitter_range=(0.5, 1.5))

        for _ in range(20):
            assert 5.0 <= strategy.calculate_delay(0) <= 15.0

    def test_should_retry_until_ceiling(self):
        strategy = RetryStrategy(max_attempts=3)

        assert strategy.should_retry(1)
        assert strategy.should_retry(2)
        assert not strategy.should_retry(3)

    def test_backoff_is_timedelta(self):
        assert RetryStrategy().backoff(1) == timedelta(seconds=10)

    def test_from_settings(self):
        settings = JobSettings(max_attempts=5, backoff_base_seconds=1.0, backoff_multiplier=3.0)

        strategy = RetryStrategy.from_settings(settings)

        assert strategy.max_attempts == 5
        assert strategy.calculate_delay(2) == 9.0
