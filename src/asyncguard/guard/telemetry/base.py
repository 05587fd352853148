"""Abstract base class for guard telemetry."""

import typing as t
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

TASK_NAME_ATTRIBUTE: t.Final = "asyncguard.task_name"
ATTEMPT_ATTRIBUTE: t.Final = "asyncguard.attempt"


def attributes_for(task_name: str, attempt: int) -> dict[str, str | int]:
    """Tags attached to every measurement and span."""
    return {TASK_NAME_ATTRIBUTE: task_name, ATTEMPT_ATTRIBUTE: attempt}


class BaseTelemetry(ABC):
    """Observational sink for counters, durations and spans.

    Implementations must never raise into the caller or change what the
    engine does next.
    """

    @abstractmethod
    def record_started(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_completed(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_failed(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_retried(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_timed_out(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_cancelled(self, task_name: str, attempt: int) -> None:
        pass

    @abstractmethod
    def record_duration(self, task_name: str, attempt: int, seconds: float) -> None:
        """Record how long an attempt took."""
        pass

    @abstractmethod
    def span(
        self, task_name: str, attempt: int
    ) -> AbstractContextManager[trace.Span]:
        """Open a span covering one attempt, parented to the current context."""
        pass

    def mark_ok(self, span: trace.Span) -> None:
        span.set_status(Status(StatusCode.OK))

    def mark_error(self, span: trace.Span, exception: BaseException) -> None:
        span.record_exception(exception)
        span.set_status(Status(StatusCode.ERROR, str(exception)))
