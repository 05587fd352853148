"""Hook context and the immutable pipeline configuration."""

import enum
import typing as t
from dataclasses import dataclass


class HookStage(enum.StrEnum):
    """Lifecycle points at which hooks run."""

    START = "start"
    RETRY = "retry"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class HookContext:
    """What a hook learns about the attempt that triggered it."""

    task_name: str
    attempt: int
    total_attempts: int
    stage: HookStage
    duration: float | None = None  # seconds
    exception: BaseException | None = None


Hook = t.Callable[[HookContext], t.Awaitable[None] | None]


@dataclass(frozen=True)
class PipelineConfiguration:
    """Hooks for every stage, captured as a single snapshot per run."""

    on_start: tuple[Hook, ...] = ()
    on_retry: tuple[Hook, ...] = ()
    on_error: tuple[Hook, ...] = ()
    on_complete: tuple[Hook, ...] = ()

    def hooks_for(self, stage: HookStage) -> tuple[Hook, ...]:
        match stage:
            case HookStage.START:
                return self.on_start
            case HookStage.RETRY:
                return self.on_retry
            case HookStage.ERROR:
                return self.on_error
            case HookStage.COMPLETE:
                return self.on_complete

    @property
    def is_empty(self) -> bool:
        return not (self.on_start or self.on_retry or self.on_error or self.on_complete)


EMPTY_PIPELINE: t.Final = PipelineConfiguration()
