"""Guarded execution engine: timeouts, cancellation, retries and reporting."""

import asyncio
import inspect
import time
import typing as t
from dataclasses import dataclass

from opentelemetry import trace

from ..config.settings import GuardOptions, LogLevel
from ..domain.attempt import AttemptOutcome, AttemptRecord
from ..domain.backoff import BackoffStrategy, calculate_delay
from ..domain.exceptions import OperationReuseError, TaskTimeoutError
from ..events import (
    BaseEmitter,
    ErrorInfo,
    NullEmitter,
    TaskCompletedEvent,
    TaskEventType,
    TaskFailedEvent,
    TaskStartedEvent,
    TaskTimedOutEvent,
)
from ..infrastructure.logging import get_logger
from .context import GuardContext
from .operation import Operation
from .pipeline import HookContext, HookStage, PipelineConfiguration, run_hooks
from .task_logger import (
    OUTCOME_FAILED,
    OUTCOME_RETRYING,
    OUTCOME_TIMED_OUT,
    TaskLogger,
)
from .telemetry import BaseTelemetry, NullTelemetry

if t.TYPE_CHECKING:
    import loguru

ErrorCallback = t.Callable[[BaseException], t.Awaitable[None] | None]


@dataclass(frozen=True)
class EffectiveConfig:
    """Everything one run needs, resolved once when the run is scheduled."""

    task_name: str
    timeout: float | None  # None disables the timeout
    retry_count: int
    backoff: BackoffStrategy
    options: GuardOptions
    pipeline: PipelineConfiguration
    task_logger: TaskLogger
    cancel_signal: asyncio.Event | None = None
    on_error: ErrorCallback | None = None

    @property
    def total_attempts(self) -> int:
        return self.retry_count + 1


def normalize_exception(exc: BaseException) -> BaseException:
    """Unwrap exception groups that hold exactly one exception."""
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return exc


class GuardRunner:
    """Runs guarded operations as independent asyncio tasks.

    Each run goes through an attempt loop:
    - the attempt is raced against its timeout and the cancellation signal
    - exceptions are retried with backoff while attempts remain
    - timeouts end the run, since the abandoned work may still be running
    - cancellation ends the run silently

    Every lifecycle point is reported to telemetry first, then to the event
    emitter, then to the snapshot of hooks taken when the run was scheduled.

    Implementation decisions:
    - Work abandoned after a timeout or cancellation keeps running. A done
      callback observes it and only logs a late failure at DEBUG level.
    - The runner holds strong references to run tasks and abandoned work
      until they finish, so the event loop cannot garbage collect them.
    - Hook and on_error exceptions are not caught. They fail the run task
      and are logged when the task finishes.

    Usage:
        runner = GuardRunner(GuardContext())
        task = runner.run(Operation.wrap(send_email), retry_count=2)
        # caller carries on; awaiting task is optional
    """

    def __init__(
        self,
        context: GuardContext,
        telemetry: BaseTelemetry | None = None,
        emitter: BaseEmitter | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        """
        Initialise the runner.

        Args:
            context: Options, policies and hooks to resolve runs against
            telemetry: Sink for counters, durations and spans.
                      If None, measurements are discarded.
            emitter: Emitter for task.* events. If None, events are discarded.
            logger: Default logger for run outcomes and engine diagnostics
        """
        self.context = context
        self.telemetry = telemetry if telemetry is not None else NullTelemetry()
        self.emitter = emitter if emitter is not None else NullEmitter()
        self._logger = logger
        self._tasks: set[asyncio.Future[t.Any]] = set()

    @property
    def active_tasks(self) -> frozenset[asyncio.Future[t.Any]]:
        """Run tasks and abandoned attempts that have not finished yet."""
        return frozenset(self._tasks)

    def run(
        self,
        operation: Operation,
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
        Schedule a guarded run and return its task without waiting for it.

        Must be called while an event loop is running. The run task copies the
        caller's context, so tracing spans and baggage carry over.

        Args:
            operation: The work to guard
            task_name: Name used in logs, telemetry and policy lookup.
                      Defaults to the operation's name.
            timeout: Seconds before an attempt is abandoned. <= 0 disables it.
            retry_count: Retries after the first attempt
            backoff: Backoff strategy between retries
            on_error: Called with every normalized attempt error, including
                     timeouts. May be sync or async.
            cancel_signal: Event that stops the run silently once set
            logger: Logger for this run's outcome lines

        Returns:
            The run task. It completes normally whatever the work does.

        Raises:
            OperationReuseError: If a single-use operation was already consumed
        """
        config = self.resolve(
            operation,
            task_name=task_name,
            timeout=timeout,
            retry_count=retry_count,
            backoff=backoff,
            on_error=on_error,
            cancel_signal=cancel_signal,
            logger=logger,
        )
        operation.reserve()
        task = asyncio.create_task(
            self._execute(operation, config), name=f"asyncguard:{config.task_name}"
        )
        self._track(task)
        task.add_done_callback(lambda done: self._on_run_done(done, operation, config))
        return task

    def resolve(
        self,
        operation: Operation,
        *,
        task_name: str | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        backoff: BackoffStrategy | None = None,
        on_error: ErrorCallback | None = None,
        cancel_signal: asyncio.Event | None = None,
        logger: "loguru.Logger | None" = None,
    ) -> EffectiveConfig:
        """Layer call arguments over the matching policy over the defaults."""
        options = self.context.options
        name = task_name or operation.name
        policy = self.context.policies.resolve(name)

        if timeout is None and policy is not None:
            timeout = policy.timeout
        if timeout is None:
            timeout = options.default_timeout

        if retry_count is None and policy is not None:
            retry_count = policy.retry_count
        if retry_count is None:
            retry_count = options.default_retry
        retry_count = max(0, retry_count)

        if backoff is None and policy is not None:
            backoff = policy.backoff
        if backoff is None:
            backoff = options.default_backoff

        if retry_count > 0 and not operation.supports_retry:
            self._logger.debug(
                f"Retry requested for {name} ({retry_count}) but the operation "
                "wraps already running work; running it once"
            )
            retry_count = 0

        return EffectiveConfig(
            task_name=name,
            timeout=timeout if timeout > 0 else None,
            retry_count=retry_count,
            backoff=backoff,
            options=options,
            pipeline=self.context.pipeline.snapshot(),
            task_logger=TaskLogger(options, logger or self._logger),
            cancel_signal=cancel_signal,
            on_error=on_error,
        )

    async def _execute(self, operation: Operation, config: EffectiveConfig) -> None:
        name = config.task_name
        signal = config.cancel_signal
        total = config.total_attempts

        for attempt in range(1, total + 1):
            if signal is not None and signal.is_set():
                return

            with self.telemetry.span(name, attempt) as span:
                await self._report_started(config, attempt)
                record = await self._attempt(operation, config, attempt)

                match record.outcome:
                    case AttemptOutcome.COMPLETED:
                        await self._report_completed(config, record, span)
                        return
                    case AttemptOutcome.CANCELLED:
                        self.telemetry.record_cancelled(name, attempt)
                        return
                    case AttemptOutcome.TIMED_OUT:
                        await self._report_timed_out(config, record, span)
                        return

                if signal is not None and signal.is_set():
                    self.telemetry.record_cancelled(name, attempt)
                    return

                await self._call_on_error(config, record.exception)
                if record.is_final:
                    await self._report_failed(config, record, span)
                    return
                await self._report_retry(config, record, span)

            delay = calculate_delay(
                config.backoff, attempt, config.options.retry_base_delay
            )
            if not await self._wait_backoff(delay, signal):
                self.telemetry.record_cancelled(name, attempt)
                return

    async def _attempt(
        self, operation: Operation, config: EffectiveConfig, attempt: int
    ) -> AttemptRecord:
        """Start the work and race it against the timeout and the signal."""
        started = time.perf_counter()

        def record(
            outcome: AttemptOutcome, exception: BaseException | None = None
        ) -> AttemptRecord:
            return AttemptRecord(
                attempt=attempt,
                total_attempts=config.total_attempts,
                duration=time.perf_counter() - started,
                outcome=outcome,
                exception=exception,
            )

        try:
            work = asyncio.ensure_future(operation.start(config.cancel_signal))
        except OperationReuseError:
            raise
        except Exception as exc:
            return record(AttemptOutcome.FAILED, normalize_exception(exc))

        waiters: set[asyncio.Future[t.Any]] = {work}
        signal_waiter = None
        if config.cancel_signal is not None:
            signal_waiter = asyncio.ensure_future(config.cancel_signal.wait())
            waiters.add(signal_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=config.timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            self._detach(work, config)
            raise
        finally:
            if signal_waiter is not None:
                signal_waiter.cancel()

        if work in done:
            if work.cancelled():
                signal = config.cancel_signal
                if signal is not None and signal.is_set():
                    return record(AttemptOutcome.CANCELLED)
                cancelled = asyncio.CancelledError(f"{config.task_name} was cancelled")
                return record(AttemptOutcome.FAILED, cancelled)
            exception = work.exception()
            if exception is None:
                return record(AttemptOutcome.COMPLETED)
            return record(AttemptOutcome.FAILED, normalize_exception(exception))

        self._detach(work, config)
        if signal_waiter is not None and signal_waiter in done:
            return record(AttemptOutcome.CANCELLED)
        return record(
            AttemptOutcome.TIMED_OUT, TaskTimeoutError(config.task_name, config.timeout)
        )

    async def _wait_backoff(
        self, delay: float, signal: asyncio.Event | None
    ) -> bool:
        """Sleep for delay. Returns False if the signal fired first."""
        if signal is None:
            await asyncio.sleep(delay)
            return True

        sleeper = asyncio.ensure_future(asyncio.sleep(delay))
        signal_waiter = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait(
                {sleeper, signal_waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            sleeper.cancel()
            signal_waiter.cancel()
        return not signal.is_set()

    async def _report_started(self, config: EffectiveConfig, attempt: int) -> None:
        name = config.task_name
        self.telemetry.record_started(name, attempt)
        await self.emitter.emit(
            TaskEventType.STARTED,
            TaskStartedEvent(
                task_name=name, attempt=attempt, total_attempts=config.total_attempts
            ),
        )
        await run_hooks(
            config.pipeline, self._hook_context(config, HookStage.START, attempt)
        )

    async def _report_completed(
        self, config: EffectiveConfig, record: AttemptRecord, span: trace.Span
    ) -> None:
        name = config.task_name
        self.telemetry.record_duration(name, record.attempt, record.duration)
        self.telemetry.record_completed(name, record.attempt)
        self.telemetry.mark_ok(span)
        config.task_logger.log_success(
            name, record.attempt, record.total_attempts, record.duration
        )
        await run_hooks(
            config.pipeline,
            self._hook_context(config, HookStage.COMPLETE, record.attempt, record),
        )
        await self.emitter.emit(
            TaskEventType.COMPLETED,
            TaskCompletedEvent(
                task_name=name,
                attempt=record.attempt,
                total_attempts=record.total_attempts,
                duration_ms=record.duration_ms,
            ),
        )

    async def _report_timed_out(
        self, config: EffectiveConfig, record: AttemptRecord, span: trace.Span
    ) -> None:
        name = config.task_name
        exception = t.cast(BaseException, record.exception)
        await self._call_on_error(config, exception)
        self.telemetry.mark_error(span, exception)
        self.telemetry.record_timed_out(name, record.attempt)
        config.task_logger.log_failure(
            name,
            record.attempt,
            record.total_attempts,
            record.duration,
            OUTCOME_TIMED_OUT,
            LogLevel.ERROR,
            exception,
        )
        await self.emitter.emit(
            TaskEventType.TIMED_OUT,
            TaskTimedOutEvent(
                task_name=name,
                attempt=record.attempt,
                total_attempts=record.total_attempts,
                duration_ms=record.duration_ms,
            ),
        )
        await run_hooks(
            config.pipeline,
            self._hook_context(config, HookStage.ERROR, record.attempt, record),
        )

    async def _report_failed(
        self, config: EffectiveConfig, record: AttemptRecord, span: trace.Span
    ) -> None:
        name = config.task_name
        exception = t.cast(BaseException, record.exception)
        self.telemetry.mark_error(span, exception)
        self.telemetry.record_failed(name, record.attempt)
        config.task_logger.log_failure(
            name,
            record.attempt,
            record.total_attempts,
            record.duration,
            OUTCOME_FAILED,
            LogLevel.ERROR,
            exception,
        )
        await run_hooks(
            config.pipeline,
            self._hook_context(config, HookStage.ERROR, record.attempt, record),
        )
        await self._emit_failed(config, record, will_retry=False)

    async def _report_retry(
        self, config: EffectiveConfig, record: AttemptRecord, span: trace.Span
    ) -> None:
        name = config.task_name
        exception = t.cast(BaseException, record.exception)
        self.telemetry.mark_error(span, exception)
        self.telemetry.record_retried(name, record.attempt)
        config.task_logger.log_failure(
            name,
            record.attempt,
            record.total_attempts,
            record.duration,
            OUTCOME_RETRYING,
            LogLevel.WARNING,
            exception,
        )
        await self._emit_failed(config, record, will_retry=True)
        await run_hooks(
            config.pipeline,
            self._hook_context(config, HookStage.RETRY, record.attempt, record),
        )

    async def _emit_failed(
        self, config: EffectiveConfig, record: AttemptRecord, will_retry: bool
    ) -> None:
        await self.emitter.emit(
            TaskEventType.FAILED,
            TaskFailedEvent(
                task_name=config.task_name,
                attempt=record.attempt,
                total_attempts=record.total_attempts,
                error=ErrorInfo.from_exception(
                    t.cast(BaseException, record.exception)
                ),
                will_retry=will_retry,
            ),
        )

    async def _call_on_error(
        self, config: EffectiveConfig, exception: BaseException | None
    ) -> None:
        if config.on_error is None or exception is None:
            return
        result = config.on_error(exception)
        if inspect.isawaitable(result):
            await result

    def _hook_context(
        self,
        config: EffectiveConfig,
        stage: HookStage,
        attempt: int,
        record: AttemptRecord | None = None,
    ) -> HookContext:
        return HookContext(
            task_name=config.task_name,
            attempt=attempt,
            total_attempts=config.total_attempts,
            stage=stage,
            duration=record.duration if record else None,
            exception=record.exception if record else None,
        )

    def _track(self, future: asyncio.Future[t.Any]) -> None:
        self._tasks.add(future)
        future.add_done_callback(self._tasks.discard)

    def _detach(self, work: asyncio.Future[t.Any], config: EffectiveConfig) -> None:
        """Keep abandoned work alive and observe its outcome at DEBUG level."""
        self._track(work)

        def observe(future: asyncio.Future[t.Any]) -> None:
            if future.cancelled():
                return
            exception = future.exception()
            if exception is not None:
                config.task_logger.log_detached(
                    config.task_name, normalize_exception(exception)
                )

        work.add_done_callback(observe)

    def _on_run_done(
        self, task: asyncio.Task[None], operation: Operation, config: EffectiveConfig
    ) -> None:
        operation.discard()
        if task.cancelled():
            return
        exception = task.exception()
        if exception is not None:
            self._logger.opt(exception=exception).error(
                f"Guarded run of {config.task_name} stopped by a hook or error "
                f"callback: {type(exception).__name__}: {exception}"
            )
