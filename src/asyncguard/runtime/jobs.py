"""Contract for durable job queues that share the guard's backoff rules.

Only the record model and the retry arithmetic live here. Storage and
replay belong to concrete queues.
"""

import typing as t
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..domain.backoff import BackoffStrategy, calculate_delay

JobHandler = t.Callable[["JobRecord"], t.Awaitable[None]]

_any_adapter: TypeAdapter[t.Any] = TypeAdapter(t.Any)


class JobRecord(BaseModel):
    """A persisted unit of work with an opaque JSON payload."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    job_type: str = Field(min_length=1, description="Key used to find the handler")
    payload: str = Field(default="null", description="JSON encoded payload")
    enqueued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    attempts: int = Field(default=0, ge=0, description="Attempts made so far")

    @classmethod
    def create(cls, job_type: str, payload: t.Any = None) -> "JobRecord":
        """Build a record, JSON encoding payload."""
        return cls(
            job_type=job_type, payload=_any_adapter.dump_json(payload).decode()
        )

    def load_payload(self) -> t.Any:
        return _any_adapter.validate_json(self.payload)

    def next_attempt(self) -> "JobRecord":
        """Copy of this record with one more attempt counted."""
        return self.model_copy(update={"attempts": self.attempts + 1})


class JobQueueOptions(BaseModel):
    """Retry settings for a job queue."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    retry_base_delay: float = Field(default=1.0, gt=0, description="Seconds")


class BaseJobQueue(ABC):
    """Abstract base class for durable job queues."""

    def __init__(self, options: JobQueueOptions | None = None) -> None:
        self.options = options if options is not None else JobQueueOptions()

    @abstractmethod
    def register_handler(self, job_type: str, handler: JobHandler) -> None:
        """Route records of job_type to handler."""
        pass

    @abstractmethod
    async def enqueue(self, job_type: str, payload: t.Any = None) -> JobRecord:
        """Persist a new job and return its record."""
        pass

    @abstractmethod
    async def start(self) -> None:
        """Begin replaying stored jobs."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop processing. Unfinished jobs stay stored."""
        pass

    def should_retry(self, record: JobRecord) -> bool:
        """True while the record has attempts left."""
        return record.attempts < self.options.max_attempts

    def retry_delay(self, record: JobRecord) -> float:
        """Seconds to wait before the next attempt of record."""
        return calculate_delay(
            self.options.backoff,
            max(1, record.attempts),
            self.options.retry_base_delay,
        )
