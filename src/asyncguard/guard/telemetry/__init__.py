"""Telemetry adapters - counters, durations and spans."""

from .base import ATTEMPT_ATTRIBUTE, TASK_NAME_ATTRIBUTE, BaseTelemetry, attributes_for
from .null import NullTelemetry
from .otel import INSTRUMENTATION_NAME, SPAN_NAME, OpenTelemetryTelemetry

__all__ = [
    "ATTEMPT_ATTRIBUTE",
    "INSTRUMENTATION_NAME",
    "SPAN_NAME",
    "TASK_NAME_ATTRIBUTE",
    "BaseTelemetry",
    "NullTelemetry",
    "OpenTelemetryTelemetry",
    "attributes_for",
]
