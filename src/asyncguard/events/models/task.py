"""Lifecycle events published by the guard for each attempt."""

import enum

from pydantic import Field

from .base import BaseEvent
from .error_info import ErrorInfo


class TaskEventType(enum.StrEnum):
    """Event types published on the guard's emitter."""

    STARTED = "task.started"
    COMPLETED = "task.completed"
    FAILED = "task.failed"
    TIMED_OUT = "task.timed_out"


class TaskEvent(BaseEvent):
    """Base class for task lifecycle events.

    Every event identifies the task by name and the attempt it refers to.
    """

    task_name: str = Field(description="Resolved name of the guarded task")
    attempt: int = Field(ge=1, description="Attempt number (1-indexed)")
    total_attempts: int = Field(ge=1, description="Planned number of attempts")
    event_type: str = Field(default="task.base")


class TaskStartedEvent(TaskEvent):
    """Published when an attempt starts."""

    event_type: str = Field(default=TaskEventType.STARTED)


class TaskCompletedEvent(TaskEvent):
    """Published when an attempt completes successfully."""

    event_type: str = Field(default=TaskEventType.COMPLETED)
    duration_ms: float = Field(default=0.0, ge=0, description="Attempt duration")


class TaskFailedEvent(TaskEvent):
    """Published when an attempt raises.

    will_retry is True when another attempt follows after the backoff delay.
    """

    event_type: str = Field(default=TaskEventType.FAILED)
    error: ErrorInfo = Field(description="The normalized exception")
    will_retry: bool = Field(default=False)


class TaskTimedOutEvent(TaskEvent):
    """Published when an attempt outlives its timeout."""

    event_type: str = Field(default=TaskEventType.TIMED_OUT)
    duration_ms: float = Field(default=0.0, ge=0, description="Time waited")
