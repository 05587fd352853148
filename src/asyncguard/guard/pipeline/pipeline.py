"""Process-wide hook pipeline with copy-on-write snapshots."""

import inspect
import threading
import typing as t

from ...domain.exceptions import GuardConfigurationError
from .builder import PipelineBuilder
from .models import EMPTY_PIPELINE, HookContext, PipelineConfiguration

if t.TYPE_CHECKING:
    from .plugins import GuardPlugin


class HookPipeline:
    """Holds the current PipelineConfiguration.

    Writers build a new configuration and swap it in under a lock. Runs call
    snapshot() once and keep that configuration for their whole lifetime, so
    a reconfiguration never produces a run with a mix of old and new hooks.
    """

    def __init__(self, configuration: PipelineConfiguration = EMPTY_PIPELINE) -> None:
        self._configuration = configuration
        self._lock = threading.Lock()

    def snapshot(self) -> PipelineConfiguration:
        return self._configuration

    def configure(self, build: t.Callable[[PipelineBuilder], t.Any]) -> None:
        """Replace the whole configuration with the hooks registered by build."""
        if not callable(build):
            raise GuardConfigurationError("Pipeline configuration must be callable")
        builder = PipelineBuilder()
        build(builder)
        configuration = builder.build()
        with self._lock:
            self._configuration = configuration

    def use_plugin(self, plugin: "GuardPlugin") -> None:
        """Append a plugin's hooks, keeping the ones already registered."""
        with self._lock:
            builder = PipelineBuilder(seed=self._configuration)
            builder.add_plugin(plugin)
            self._configuration = builder.build()

    def reset(self) -> None:
        with self._lock:
            self._configuration = EMPTY_PIPELINE


async def run_hooks(
    configuration: PipelineConfiguration, context: HookContext
) -> None:
    """Invoke the hooks of context.stage sequentially, awaiting each one.

    Hook exceptions propagate to the caller.
    """
    for hook in configuration.hooks_for(context.stage):
        result = hook(context)
        if inspect.isawaitable(result):
            await result
