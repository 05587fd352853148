"""Null object implementation of telemetry."""

import typing as t
from contextlib import contextmanager

from opentelemetry import trace

from .base import BaseTelemetry


class NullTelemetry(BaseTelemetry):
    """Telemetry that discards everything.

    Spans are the non-recording INVALID_SPAN, so status calls are no-ops.
    """

    def record_started(self, task_name: str, attempt: int) -> None:
        pass

    def record_completed(self, task_name: str, attempt: int) -> None:
        pass

    def record_failed(self, task_name: str, attempt: int) -> None:
        pass

    def record_retried(self, task_name: str, attempt: int) -> None:
        pass

    def record_timed_out(self, task_name: str, attempt: int) -> None:
        pass

    def record_cancelled(self, task_name: str, attempt: int) -> None:
        pass

    def record_duration(self, task_name: str, attempt: int, seconds: float) -> None:
        pass

    @contextmanager
    def span(self, task_name: str, attempt: int) -> t.Iterator[trace.Span]:
        yield trace.INVALID_SPAN
