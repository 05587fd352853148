"""Custom exceptions for asyncguard."""


class GuardError(Exception):
    """Base exception for asyncguard errors."""

    pass


class GuardConfigurationError(GuardError, ValueError):
    """Raised when guard configuration or registration arguments are invalid.

    Covers invalid process-wide options, malformed policy or hook
    registrations, and targets that cannot be turned into an operation.
    Always raised synchronously at the call site.
    """

    pass


class OperationReuseError(GuardError, RuntimeError):
    """Raised when an already-started awaitable is consumed a second time.

    An awaitable that is already running can only be observed once, so it
    cannot back more than one attempt.
    """

    pass


class TaskTimeoutError(GuardError, TimeoutError):
    """Raised (and reported) when a guarded attempt outlives its timeout."""

    def __init__(self, task_name: str, timeout: float | None) -> None:
        self.task_name = task_name
        self.timeout = timeout
        timeout_ms = (timeout or 0.0) * 1000
        super().__init__(
            f"Guarded task '{task_name}' timed out after {timeout_ms:.0f} ms."
        )
