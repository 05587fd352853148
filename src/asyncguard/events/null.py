"""Emitter used when nobody consumes task events."""

import typing as t

from .base import BaseEmitter, EventHandler


class NullEmitter(BaseEmitter):
    """Drops subscriptions and events. Never reports listeners."""

    def on(self, event_type: str, handler: EventHandler) -> None:
        pass

    def off(self, event_type: str, handler: EventHandler) -> None:
        pass

    def has_listeners(self, event_type: str) -> bool:
        return False

    async def emit(self, event_type: str, event_data: t.Any) -> None:
        pass
