"""Domain models - backoff, policies, attempts and exceptions."""

from .attempt import AttemptOutcome, AttemptRecord
from .backoff import DEFAULT_BASE_DELAY, MAX_DELAY, BackoffStrategy, calculate_delay
from .exceptions import (
    GuardConfigurationError,
    GuardError,
    OperationReuseError,
    TaskTimeoutError,
)
from .policy import GuardPolicy, PolicyRule

__all__ = [
    # Backoff
    "BackoffStrategy",
    "calculate_delay",
    "DEFAULT_BASE_DELAY",
    "MAX_DELAY",
    # Attempts
    "AttemptOutcome",
    "AttemptRecord",
    # Policies
    "GuardPolicy",
    "PolicyRule",
    # Exceptions
    "GuardError",
    "GuardConfigurationError",
    "OperationReuseError",
    "TaskTimeoutError",
]
