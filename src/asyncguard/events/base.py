"""Contract shared by the emitters that publish task.* events."""

import typing as t
from abc import ABC, abstractmethod

EventHandler = t.Callable[[t.Any], t.Awaitable[None] | None]


class BaseEmitter(ABC):
    """Publishes guarded-run lifecycle events to subscribers.

    The runner emits one event per lifecycle point, keyed by TaskEventType:
    task.started before each attempt, then task.completed, task.timed_out or
    task.failed (will_retry tells a retried failure from a final one).
    Cancelled runs publish nothing after task.started.

    Implementations must never let a handler error reach the emitting run.
    """

    @abstractmethod
    def on(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe handler to event_type. Handlers may be sync or async."""
        pass

    @abstractmethod
    def off(self, event_type: str, handler: EventHandler) -> None:
        """Remove a handler previously passed to on()."""
        pass

    @abstractmethod
    def has_listeners(self, event_type: str) -> bool:
        """True if at least one handler is subscribed to event_type."""
        pass

    @abstractmethod
    async def emit(self, event_type: str, event_data: t.Any) -> None:
        """Deliver event_data to the handlers of event_type, in order."""
        pass
