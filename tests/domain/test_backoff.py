"""Tests for backoff delay calculation."""

import pytest

from asyncguard.domain.backoff import (
    DEFAULT_BASE_DELAY,
    MAX_DELAY,
    BackoffStrategy,
    calculate_delay,
)


class TestCalculateDelay:
    """Test delay values for each strategy."""

    def test_none_is_constant(self):
        delays = [calculate_delay(BackoffStrategy.NONE, n, 0.2) for n in range(1, 6)]

        assert delays == [0.2] * 5

    def test_linear_scales_with_attempt(self):
        assert calculate_delay(BackoffStrategy.LINEAR, 1, 0.05) == pytest.approx(0.05)
        assert calculate_delay(BackoffStrategy.LINEAR, 2, 0.05) == pytest.approx(0.1)
        assert calculate_delay(BackoffStrategy.LINEAR, 3, 0.05) == pytest.approx(0.15)

    @pytest.mark.parametrize("attempt", [0, -3])
    def test_attempt_below_one_never_shrinks_delay(self, attempt):
        for strategy in BackoffStrategy:
            delay = calculate_delay(strategy, attempt, 0.2)
            assert delay == pytest.approx(0.2)

    def test_exponential_doubles(self):
        delays = [
            calculate_delay(BackoffStrategy.EXPONENTIAL, n, 1.0) for n in range(1, 5)
        ]

        assert delays == [1.0, 2.0, 4.0, 8.0]

    @pytest.mark.parametrize(
        "strategy", [BackoffStrategy.LINEAR, BackoffStrategy.EXPONENTIAL]
    )
    def test_growing_strategies_are_monotonic(self, strategy):
        """Delays never shrink as the attempt index grows."""
        delays = [calculate_delay(strategy, n, 0.3) for n in range(1, 50)]

        assert delays == sorted(delays)

    @pytest.mark.parametrize("base_delay", [0, -1.0])
    def test_non_positive_base_uses_default(self, base_delay):
        delay = calculate_delay(BackoffStrategy.NONE, 1, base_delay)
        assert delay == DEFAULT_BASE_DELAY
        assert calculate_delay(
            BackoffStrategy.LINEAR, 2, base_delay
        ) == pytest.approx(DEFAULT_BASE_DELAY * 2)


class TestDelayOverflow:
    """Test that huge delays clamp instead of overflowing."""

    def test_exponential_overflow_clamps(self):
        assert calculate_delay(BackoffStrategy.EXPONENTIAL, 5000, 1.0) == MAX_DELAY

    def test_linear_clamps_to_max(self):
        assert calculate_delay(BackoffStrategy.LINEAR, 10**12, 10**8) == MAX_DELAY

    def test_exponential_large_but_finite_clamps(self):
        assert calculate_delay(BackoffStrategy.EXPONENTIAL, 100, 1.0) == MAX_DELAY
