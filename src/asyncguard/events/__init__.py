"""Event infrastructure - event emitter and event types."""

from .base import BaseEmitter, EventHandler
from .emitter import EventEmitter
from .models import (
    BaseEvent,
    ErrorInfo,
    TaskCompletedEvent,
    TaskEvent,
    TaskEventType,
    TaskFailedEvent,
    TaskStartedEvent,
    TaskTimedOutEvent,
)
from .null import NullEmitter
from .subscription import Subscription

__all__ = [
    # Base and implementations
    "BaseEmitter",
    "EventHandler",
    "EventEmitter",
    "NullEmitter",
    "Subscription",
    # Models
    "BaseEvent",
    "ErrorInfo",
    "TaskEvent",
    "TaskEventType",
    "TaskStartedEvent",
    "TaskCompletedEvent",
    "TaskFailedEvent",
    "TaskTimedOutEvent",
]
