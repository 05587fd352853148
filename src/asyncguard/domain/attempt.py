"""Per-attempt outcome models."""

import enum
from dataclasses import dataclass


class AttemptOutcome(enum.StrEnum):
    """How a single attempt of a guarded run ended."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class AttemptRecord:
    """Transient record of one attempt.

    Lives only for the duration of the attempt that produced it and feeds
    telemetry tags, hook context and log output.
    """

    attempt: int  # 1-based
    total_attempts: int
    duration: float  # seconds
    outcome: AttemptOutcome
    exception: BaseException | None = None

    @property
    def is_final(self) -> bool:
        """True if no attempt can follow this one."""
        return self.attempt >= self.total_attempts

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000
