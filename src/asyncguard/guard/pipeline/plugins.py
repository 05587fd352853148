"""Reusable bundles of hooks."""

import inspect
import typing as t
from abc import ABC, abstractmethod

from ...domain.exceptions import GuardConfigurationError
from .builder import PipelineBuilder
from .models import HookContext

ErrorCallback = t.Callable[[HookContext], t.Awaitable[None] | None]


class GuardPlugin(ABC):
    """A set of hooks installed together."""

    @abstractmethod
    def configure(self, builder: PipelineBuilder) -> None:
        """Register this plugin's hooks on builder."""
        pass


class ErrorCallbackPlugin(GuardPlugin):
    """Forwards every error-stage context to a callback.

    Typical use is alerting: post a chat message or page someone whenever a
    guarded task times out or exhausts its retries.

    Usage:
        guard.use_plugin(ErrorCallbackPlugin(notify_ops))
    """

    def __init__(self, callback: ErrorCallback) -> None:
        if not callable(callback):
            raise GuardConfigurationError("Error callback must be callable")
        self._callback = callback

    def configure(self, builder: PipelineBuilder) -> None:
        builder.on_error(self._on_error)

    async def _on_error(self, context: HookContext) -> None:
        result = self._callback(context)
        if inspect.isawaitable(result):
            await result
