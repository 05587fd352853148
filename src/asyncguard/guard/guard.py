"""Public entry point for fire-and-forget supervision."""

import asyncio
import functools
import typing as t
from contextlib import contextmanager

from ..config.settings import GuardOptions
from ..domain.backoff import BackoffStrategy
from ..events import BaseEmitter, EventEmitter, Subscription
from ..infrastructure.logging import get_logger
from .context import GuardContext
from .operation import Operation
from .pipeline import GuardPlugin, PipelineBuilder
from .policies import PolicyBuilder
from .runner import ErrorCallback, GuardRunner
from .telemetry import BaseTelemetry, OpenTelemetryTelemetry

if t.TYPE_CHECKING:
    import loguru

P = t.ParamSpec("P")


class AsyncGuard:
    """Launches work without awaiting it while making sure failures are seen.

    Owns a GuardContext (options, policies, hooks), the runner that executes
    guarded runs and the emitter that publishes task.* events.

    Usage:
        guard = AsyncGuard()
        guard.configure(default_retry=2, default_backoff=BackoffStrategy.LINEAR)
        guard.configure_policies(lambda p: p.for_task("sync_ledger", timeout=0))
        guard.on(TaskEventType.FAILED, lambda e: print(e.error.message))

        guard.fire_and_forget(sync_ledger)   # factory: retried on failure
        guard.fire_and_forget(send_email())  # coroutine: run once

        @guard.guarded(retry_count=3)
        async def refresh_cache() -> None:
            ...

        refresh_cache()  # returns the run task immediately
    """

    def __init__(
        self,
        options: GuardOptions | None = None,
        *,
        telemetry: BaseTelemetry | None = None,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """
        Initialise the guard.

        Args:
            options: Initial defaults. If None, GuardOptions() is used.
            telemetry: Telemetry sink. If None, OpenTelemetry's global
                      providers are used.
            emitter: Emitter for task.* events. If None, a new EventEmitter
                    is created.
            logger: Logger for run outcomes
        """
        self.context = GuardContext(options)
        self.emitter = emitter if emitter is not None else EventEmitter(logger)
        self.runner = GuardRunner(
            self.context,
            telemetry=telemetry if telemetry is not None else OpenTelemetryTelemetry(),
            emitter=self.emitter,
            logger=logger,
        )

    @property
    def defaults(self) -> GuardOptions:
        return self.context.options

    @property
    def active_tasks(self) -> frozenset[asyncio.Future[t.Any]]:
        return self.runner.active_tasks

    def configure(self, **changes: t.Any) -> GuardOptions:
        """Change default options. Invalid values raise GuardConfigurationError."""
        return self.context.configure(**changes)

    @contextmanager
    def override(self, **changes: t.Any) -> t.Iterator[GuardOptions]:
        """Change default options inside a with-block only."""
        with self.context.override(**changes) as options:
            yield options

    def reset(self) -> None:
        """Restore default options and drop all policies and hooks."""
        self.context.reset()

    def configure_policies(self, build: t.Callable[[PolicyBuilder], t.Any]) -> None:
        self.context.policies.configure(build)

    def configure_pipeline(self, build: t.Callable[[PipelineBuilder], t.Any]) -> None:
        self.context.pipeline.configure(build)

    def reset_pipeline(self) -> None:
        self.context.pipeline.reset()

    def use_plugin(self, plugin: GuardPlugin) -> None:
        self.context.pipeline.use_plugin(plugin)

    def on(
        self, event_type: str, handler: t.Callable[[t.Any], t.Any]
    ) -> Subscription:
        """Subscribe to a task.* event. Returns a handle to unsubscribe."""
        self.emitter.on(event_type, handler)
        return Subscription(self.emitter, event_type, handler)

    def fire_and_forget(
        self,
        target: t.Any,
        *,
        task_name: str | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        backoff: BackoffStrategy | None = None,
        on_error: ErrorCallback | None = None,
        cancel_signal: asyncio.Event | None = None,
        logger: "loguru.Logger | None" = None,
    ) -> asyncio.Task[None]:
        """
        Guard target and return the run task without waiting for it.

        Args:
            target: An awaitable (run once), a zero-argument factory, a factory
                   taking the cancellation signal, or an Operation
            task_name: Overrides the name derived from target
            timeout: Seconds per attempt. <= 0 disables the timeout.
            retry_count: Retries after the first attempt. Ignored for
                        awaitables, which can only run once.
            backoff: Backoff strategy between retries
            on_error: Called with every attempt error
            cancel_signal: Event that stops the run silently once set
            logger: Logger for this run's outcome lines

        Returns:
            The run task. Awaiting it is optional.

        Raises:
            GuardConfigurationError: If target cannot be guarded
        """
        operation = Operation.wrap(target, task_name)
        return self.runner.run(
            operation,
            task_name=task_name,
            timeout=timeout,
            retry_count=retry_count,
            backoff=backoff,
            on_error=on_error,
            cancel_signal=cancel_signal,
            logger=logger,
        )

    def guarded(
        self,
        *,
        task_name: str | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        backoff: BackoffStrategy | None = None,
        on_error: ErrorCallback | None = None,
        cancel_signal: asyncio.Event | None = None,
    ) -> t.Callable[
        [t.Callable[P, t.Awaitable[t.Any]]],
        t.Callable[P, asyncio.Task[None]],
    ]:
        """Decorate an async function so calling it fires a guarded run.

        Each call builds a fresh factory over the call's arguments, so the run
        can be retried. The task name defaults to the function's qualname.
        """

        def decorator(
            func: t.Callable[P, t.Awaitable[t.Any]],
        ) -> t.Callable[P, asyncio.Task[None]]:
            name = task_name or func.__qualname__

            @functools.wraps(func)
            def wrapper(*args: P.args, **kwargs: P.kwargs) -> asyncio.Task[None]:
                operation = Operation.from_factory(
                    functools.partial(func, *args, **kwargs), name
                )
                return self.runner.run(
                    operation,
                    task_name=name,
                    timeout=timeout,
                    retry_count=retry_count,
                    backoff=backoff,
                    on_error=on_error,
                    cancel_signal=cancel_signal,
                )

            return wrapper

        return decorator
