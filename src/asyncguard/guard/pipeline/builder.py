"""Fluent builder for hook pipeline configurations."""

import typing as t

from ...domain.exceptions import GuardConfigurationError
from .models import Hook, PipelineConfiguration

if t.TYPE_CHECKING:
    from .plugins import GuardPlugin


class PipelineBuilder:
    """Collects hooks per stage in registration order.

    Can be seeded from an existing configuration so plugins extend the
    current hooks instead of replacing them.
    """

    def __init__(self, seed: PipelineConfiguration | None = None) -> None:
        seed = seed or PipelineConfiguration()
        self._on_start: list[Hook] = list(seed.on_start)
        self._on_retry: list[Hook] = list(seed.on_retry)
        self._on_error: list[Hook] = list(seed.on_error)
        self._on_complete: list[Hook] = list(seed.on_complete)

    def on_start(self, hook: Hook) -> "PipelineBuilder":
        self._on_start.append(_checked(hook, "on_start"))
        return self

    def on_retry(self, hook: Hook) -> "PipelineBuilder":
        self._on_retry.append(_checked(hook, "on_retry"))
        return self

    def on_error(self, hook: Hook) -> "PipelineBuilder":
        self._on_error.append(_checked(hook, "on_error"))
        return self

    def on_complete(self, hook: Hook) -> "PipelineBuilder":
        self._on_complete.append(_checked(hook, "on_complete"))
        return self

    def add_plugin(self, plugin: "GuardPlugin") -> "PipelineBuilder":
        """Let a plugin register its hooks on this builder."""
        if plugin is None:
            raise GuardConfigurationError("Plugin must not be None")
        plugin.configure(self)
        return self

    def build(self) -> PipelineConfiguration:
        return PipelineConfiguration(
            on_start=tuple(self._on_start),
            on_retry=tuple(self._on_retry),
            on_error=tuple(self._on_error),
            on_complete=tuple(self._on_complete),
        )


def _checked(hook: t.Any, stage: str) -> Hook:
    if not callable(hook):
        raise GuardConfigurationError(
            f"{stage} hook must be callable, got {type(hook).__name__}"
        )
    return hook
