"""Renders guarded run outcomes as log lines."""

import traceback as tb
import typing as t

from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import GuardOptions, LogLevel
from ..infrastructure.logging import get_logger

if t.TYPE_CHECKING:
    import loguru

OUTCOME_COMPLETED: t.Final = "completed"
OUTCOME_FAILED: t.Final = "failed"
OUTCOME_RETRYING: t.Final = "failed, retrying"
OUTCOME_TIMED_OUT: t.Final = "timed out"


class TaskLogPayload(BaseModel):
    """Structured form of one log entry."""

    model_config = ConfigDict(frozen=True)

    task_name: str
    outcome: str
    attempt: int
    attempts: int
    duration_ms: float
    exception_type: str | None = None
    exception_message: str | None = None
    traceback: str | None = Field(default=None, description="Formatted traceback")


class TaskLogger:
    """Writes run outcomes either as text or as encoded structured payloads.

    Text form:
        Guarded task send_email failed after 12 ms on attempt 1/3: ValueError: boom

    Structured form (options.structured_logs): the JSON encoding of a
    TaskLogPayload, so it survives sinks that only keep the message.
    """

    def __init__(
        self,
        options: GuardOptions,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self._options = options
        self._logger = logger

    def log_success(
        self, task_name: str, attempt: int, total_attempts: int, duration: float
    ) -> None:
        """Log a completed run at the configured success level, if any."""
        level = self._options.success_log_level
        if level is None:
            return
        self._write(
            level, task_name, OUTCOME_COMPLETED, attempt, total_attempts, duration
        )

    def log_failure(
        self,
        task_name: str,
        attempt: int,
        total_attempts: int,
        duration: float,
        outcome: str,
        level: LogLevel,
        exception: BaseException | None = None,
    ) -> None:
        """Log a timed out, failed or retried attempt at the given level."""
        self._write(
            level, task_name, outcome, attempt, total_attempts, duration, exception
        )

    def log_detached(self, task_name: str, exception: BaseException) -> None:
        """Record a late failure of an attempt that is no longer observed."""
        self._logger.debug(
            f"Detached attempt of guarded task {task_name} failed after being "
            f"abandoned: {type(exception).__name__}: {exception}"
        )

    def _write(
        self,
        level: LogLevel,
        task_name: str,
        outcome: str,
        attempt: int,
        total_attempts: int,
        duration: float,
        exception: BaseException | None = None,
    ) -> None:
        duration_ms = duration * 1000
        if self._options.structured_logs:
            message = TaskLogPayload(
                task_name=task_name,
                outcome=outcome,
                attempt=attempt,
                attempts=total_attempts,
                duration_ms=round(duration_ms, 3),
                exception_type=type(exception).__name__ if exception else None,
                exception_message=str(exception) if exception else None,
                traceback="".join(tb.format_exception(exception))
                if exception
                else None,
            ).model_dump_json()
        else:
            message = (
                f"Guarded task {task_name} {outcome} after {duration_ms:.0f} ms "
                f"on attempt {attempt}/{total_attempts}"
            )
            if exception is not None:
                message += f": {type(exception).__name__}: {exception}"
        self._logger.log(level.value, message)
