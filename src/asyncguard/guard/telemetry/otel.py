"""Telemetry backed by the OpenTelemetry API."""

import typing as t
from contextlib import AbstractContextManager

from opentelemetry import metrics, trace

from .base import BaseTelemetry, attributes_for

INSTRUMENTATION_NAME: t.Final = "asyncguard"
SPAN_NAME: t.Final = "asyncguard.fire_and_forget"


class OpenTelemetryTelemetry(BaseTelemetry):
    """Publishes guard measurements through OpenTelemetry.

    Only the API is used. Without an SDK configured by the host application
    every call is a no-op, so this is safe to use unconditionally.

    Instruments:
    - asyncguard.operations.{started,completed,failed,retried,timeout,cancelled}
      counters
    - asyncguard.operations.duration histogram, in milliseconds

    Each attempt gets an asyncguard.fire_and_forget span. The run task copies
    the caller's contextvars when it is created, so the span's parent and the
    active baggage are those of the code that called fire_and_forget.
    """

    def __init__(
        self,
        tracer: trace.Tracer | None = None,
        meter: metrics.Meter | None = None,
    ) -> None:
        """
        Initialise instruments.

        Args:
            tracer: Tracer to open spans with. Defaults to the global provider's.
            meter: Meter to create instruments on. Defaults to the global provider's.
        """
        self._tracer = tracer or trace.get_tracer(INSTRUMENTATION_NAME)
        meter = meter or metrics.get_meter(INSTRUMENTATION_NAME)

        self._started = meter.create_counter(
            "asyncguard.operations.started",
            unit="{operation}",
            description="Attempts started",
        )
        self._completed = meter.create_counter(
            "asyncguard.operations.completed",
            unit="{operation}",
            description="Runs completed successfully",
        )
        self._failed = meter.create_counter(
            "asyncguard.operations.failed",
            unit="{operation}",
            description="Runs that exhausted their attempts",
        )
        self._retried = meter.create_counter(
            "asyncguard.operations.retried",
            unit="{operation}",
            description="Failed attempts followed by a retry",
        )
        self._timed_out = meter.create_counter(
            "asyncguard.operations.timeout",
            unit="{operation}",
            description="Attempts abandoned after their timeout",
        )
        self._cancelled = meter.create_counter(
            "asyncguard.operations.cancelled",
            unit="{operation}",
            description="Runs stopped by their cancellation signal",
        )
        self._duration = meter.create_histogram(
            "asyncguard.operations.duration",
            unit="ms",
            description="Duration of successful attempts",
        )

    def record_started(self, task_name: str, attempt: int) -> None:
        self._started.add(1, attributes_for(task_name, attempt))

    def record_completed(self, task_name: str, attempt: int) -> None:
        self._completed.add(1, attributes_for(task_name, attempt))

    def record_failed(self, task_name: str, attempt: int) -> None:
        self._failed.add(1, attributes_for(task_name, attempt))

    def record_retried(self, task_name: str, attempt: int) -> None:
        self._retried.add(1, attributes_for(task_name, attempt))

    def record_timed_out(self, task_name: str, attempt: int) -> None:
        self._timed_out.add(1, attributes_for(task_name, attempt))

    def record_cancelled(self, task_name: str, attempt: int) -> None:
        self._cancelled.add(1, attributes_for(task_name, attempt))

    def record_duration(self, task_name: str, attempt: int, seconds: float) -> None:
        self._duration.record(seconds * 1000, attributes_for(task_name, attempt))

    def span(
        self, task_name: str, attempt: int
    ) -> AbstractContextManager[trace.Span]:
        return self._tracer.start_as_current_span(
            SPAN_NAME,
            kind=trace.SpanKind.INTERNAL,
            attributes=attributes_for(task_name, attempt),
        )
