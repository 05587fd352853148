"""Handle returned when subscribing to guard events."""

import typing as t

from .base import BaseEmitter


class Subscription:
    """Keeps track of one emitter subscription so it can be undone later.

    Usage:
        sub = guard.on(TaskEventType.FAILED, alert)
        ...
        sub.unsubscribe()
    """

    def __init__(
        self,
        emitter: BaseEmitter,
        event_type: str,
        handler: t.Callable[[t.Any], t.Any],
    ) -> None:
        self._emitter = emitter
        self._event_type = event_type
        self._handler = handler
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Remove the handler from the emitter. Safe to call more than once."""
        if not self._active:
            return
        self._emitter.off(self._event_type, self._handler)
        self._active = False
