"""Tests for the durable job queue contract."""

import typing as t

import pytest
from pydantic import ValidationError

from asyncguard.domain.backoff import BackoffStrategy
from asyncguard.runtime.jobs import (
    BaseJobQueue,
    JobHandler,
    JobQueueOptions,
    JobRecord,
)


class InMemoryJobQueue(BaseJobQueue):
    """Minimal queue used to exercise the shared retry arithmetic."""

    def __init__(self, options: JobQueueOptions | None = None) -> None:
        super().__init__(options)
        self.handlers: dict[str, JobHandler] = {}
        self.records: list[JobRecord] = []
        self.running = False

    def register_handler(self, job_type: str, handler: JobHandler) -> None:
        self.handlers[job_type] = handler

    async def enqueue(self, job_type: str, payload: t.Any = None) -> JobRecord:
        record = JobRecord.create(job_type, payload)
        self.records.append(record)
        return record

    async def start(self) -> None:
        self.running = True

    async def stop(self) -> None:
        self.running = False


class TestJobRecord:
    """Test the persisted record model."""

    def test_payload_round_trips_through_json(self):
        record = JobRecord.create("email", {"to": "ops@example.com", "retries": 2})

        assert record.payload == '{"to":"ops@example.com","retries":2}'
        assert record.load_payload() == {"to": "ops@example.com", "retries": 2}

    def test_defaults(self):
        record = JobRecord.create("email")

        assert record.attempts == 0
        assert record.payload == "null"
        assert record.enqueued_at.tzinfo is not None
        assert len(record.id) == 32

    def test_ids_are_unique(self):
        assert JobRecord.create("email").id != JobRecord.create("email").id

    def test_next_attempt_returns_copy(self):
        record = JobRecord.create("email")

        bumped = record.next_attempt()

        assert bumped.attempts == 1
        assert record.attempts == 0
        assert bumped.id == record.id

    def test_job_type_required(self):
        with pytest.raises(ValidationError):
            JobRecord(job_type="")


class TestRetryArithmetic:
    """Test retry decisions shared by every queue."""

    def test_default_options(self):
        options = JobQueueOptions()

        assert options.max_attempts == 3
        assert options.backoff == BackoffStrategy.EXPONENTIAL
        assert options.retry_base_delay == 1.0

    def test_should_retry_until_max_attempts(self):
        queue = InMemoryJobQueue()
        record = JobRecord.create("email")

        decisions = []
        for _ in range(4):
            decisions.append(queue.should_retry(record))
            record = record.next_attempt()

        assert decisions == [True, True, True, False]

    def test_retry_delay_uses_backoff(self):
        queue = InMemoryJobQueue()
        record = JobRecord.create("email")

        delays = []
        for _ in range(3):
            record = record.next_attempt()
            delays.append(queue.retry_delay(record))

        assert delays == [1.0, 2.0, 4.0]

    def test_retry_delay_before_first_attempt_uses_base(self):
        queue = InMemoryJobQueue(
            JobQueueOptions(backoff=BackoffStrategy.LINEAR, retry_base_delay=0.5)
        )

        assert queue.retry_delay(JobRecord.create("email")) == 0.5


class TestQueueContract:
    """Test that a concrete queue plugs into the base class."""

    @pytest.mark.asyncio
    async def test_enqueue_and_lifecycle(self):
        queue = InMemoryJobQueue()

        async def handler(record: JobRecord) -> None:
            pass

        queue.register_handler("email", handler)
        record = await queue.enqueue("email", ["a", "b"])
        await queue.start()

        assert queue.handlers["email"] is handler
        assert record.load_payload() == ["a", "b"]
        assert queue.running is True

        await queue.stop()
        assert queue.running is False
