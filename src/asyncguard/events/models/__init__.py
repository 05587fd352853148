"""Event data models."""

from .base import BaseEvent
from .error_info import ErrorInfo
from .task import (
    TaskCompletedEvent,
    TaskEvent,
    TaskEventType,
    TaskFailedEvent,
    TaskStartedEvent,
    TaskTimedOutEvent,
)

__all__ = [
    "BaseEvent",
    "ErrorInfo",
    "TaskEvent",
    "TaskEventType",
    "TaskStartedEvent",
    "TaskCompletedEvent",
    "TaskFailedEvent",
    "TaskTimedOutEvent",
]
