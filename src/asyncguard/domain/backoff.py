"""Backoff strategies and delay calculation between retry attempts."""

import enum
from datetime import timedelta
from typing import Final

DEFAULT_BASE_DELAY: Final = 0.5
MAX_DELAY: Final = timedelta.max.total_seconds()


class BackoffStrategy(enum.StrEnum):
    """How the delay grows between consecutive retry attempts."""

    NONE = "none"  # Constant delay
    LINEAR = "linear"  # base_delay * attempt
    EXPONENTIAL = "exponential"  # base_delay * 2^(attempt - 1)


def calculate_delay(
    strategy: BackoffStrategy, attempt: int, base_delay: float
) -> float:
    """
    Calculate the delay to wait after a failed attempt.

    Non-positive base delays are replaced with DEFAULT_BASE_DELAY. Results that
    overflow are clamped to MAX_DELAY.

    Args:
        strategy: Backoff strategy to apply
        attempt: Index of the attempt that just failed (1-based)
        base_delay: Base delay in seconds

    Returns:
        Delay in seconds

    Examples:
        >>> calculate_delay(BackoffStrategy.LINEAR, 2, 0.05)
        0.1
        >>> calculate_delay(BackoffStrategy.EXPONENTIAL, 3, 1.0)
        4.0
        >>> calculate_delay(BackoffStrategy.NONE, 10, 1.0)
        1.0
    """
    if base_delay <= 0:
        base_delay = DEFAULT_BASE_DELAY

    match strategy:
        case BackoffStrategy.LINEAR:
            factor = float(max(1, attempt))
        case BackoffStrategy.EXPONENTIAL:
            try:
                factor = 2.0 ** max(0, attempt - 1)
            except OverflowError:
                return MAX_DELAY
        case _:
            return base_delay

    return min(base_delay * factor, MAX_DELAY)
