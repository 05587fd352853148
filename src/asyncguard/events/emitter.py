"""In-process event emitter with sync and async handler support."""

import inspect
import typing as t

from ..infrastructure.logging import get_logger
from .base import BaseEmitter, EventHandler

if t.TYPE_CHECKING:
    import loguru


class EventEmitter(BaseEmitter):
    """Dispatches events to subscribed handlers.

    Handlers may be plain functions or coroutine functions. They are invoked
    in subscription order. A failing handler is logged and skipped so that
    one broken subscriber cannot stop the others or the emitting code.
    """

    def __init__(self, logger: "loguru.Logger" = get_logger(__name__)) -> None:
        """
        Initialise emitter.

        Args:
            logger: Logger used to report handler failures
        """
        self._logger = logger
        self._handlers: dict[str, list[EventHandler]] = {}

    def on(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        """Unsubscribe a handler. Unknown handlers are logged, not raised."""
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            self._logger.warning(f"Handler {handler} not found for event {event_type}")
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event_type]

    def has_listeners(self, event_type: str) -> bool:
        return bool(self._handlers.get(event_type))

    async def emit(self, event_type: str, event_data: t.Any) -> None:
        """Invoke every handler subscribed to event_type with event_data."""
        # Copy so handlers can unsubscribe themselves while being dispatched
        for handler in list(self._handlers.get(event_type, [])):
            try:
                result = handler(event_data)
            except Exception:
                self._logger.exception(
                    f"Event handler {handler} failed for event {event_type}"
                )
                continue

            if inspect.isawaitable(result):
                try:
                    await result
                except Exception as e:
                    self._logger.opt(exception=e).error(
                        f"Async event handler {handler} failed for event {event_type}"
                    )
