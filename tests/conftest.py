"""Pytest configuration and fixtures for asyncguard tests."""

import typing as t
from collections import Counter
from contextlib import contextmanager

import loguru
import pytest
from loguru import logger as loguru_logger
from opentelemetry import trace

from asyncguard.app import create_app
from asyncguard.config.settings import Environment, GuardOptions, LogLevel, Settings
from asyncguard.events import BaseEmitter, EventEmitter
from asyncguard.guard import AsyncGuard, GuardContext, GuardRunner
from asyncguard.guard.telemetry import BaseTelemetry
from asyncguard.infrastructure.logging import configure_logger, reset_logging


class RecordingTelemetry(BaseTelemetry):
    """Telemetry that keeps every call for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []
        self.durations: list[tuple[str, int, float]] = []
        self.spans: list[tuple[str, int]] = []

    def count(self, kind: str) -> int:
        return Counter(call[0] for call in self.calls)[kind]

    @property
    def kinds(self) -> list[str]:
        return [call[0] for call in self.calls]

    def record_started(self, task_name: str, attempt: int) -> None:
        self.calls.append(("started", task_name, attempt))

    def record_completed(self, task_name: str, attempt: int) -> None:
        self.calls.append(("completed", task_name, attempt))

    def record_failed(self, task_name: str, attempt: int) -> None:
        self.calls.append(("failed", task_name, attempt))

    def record_retried(self, task_name: str, attempt: int) -> None:
        self.calls.append(("retried", task_name, attempt))

    def record_timed_out(self, task_name: str, attempt: int) -> None:
        self.calls.append(("timed_out", task_name, attempt))

    def record_cancelled(self, task_name: str, attempt: int) -> None:
        self.calls.append(("cancelled", task_name, attempt))

    def record_duration(self, task_name: str, attempt: int, seconds: float) -> None:
        self.durations.append((task_name, attempt, seconds))

    @contextmanager
    def span(self, task_name: str, attempt: int) -> t.Iterator[trace.Span]:
        self.spans.append((task_name, attempt))
        yield trace.INVALID_SPAN


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Automatically reset logging before each test for isolation."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def test_settings():
    """Provide test-specific settings."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,  # Minimal logging during tests
    )


@pytest.fixture
def test_app(test_settings):
    """Provide a test app with clean logging state."""
    reset_logging()
    app = create_app(settings=test_settings)
    yield app
    reset_logging()


@pytest.fixture
def mock_logger(mocker):
    """Provide a mock logger for testing that captures log calls."""
    logger = mocker.Mock(spec=loguru.logger)
    return logger


@pytest.fixture
def mock_emitter(mocker):
    """Provide a mock event emitter for testing event emission."""
    emitter = mocker.Mock(spec=BaseEmitter)
    return emitter


@pytest.fixture
def real_emitter(mock_logger):
    """Provide a real EventEmitter whose failures go to the mock logger."""
    return EventEmitter(mock_logger)


@pytest.fixture
def log_records() -> t.Iterator[list[dict[str, t.Any]]]:
    """Capture every loguru record emitted during the test.

    Logging is configured first so that no later auto-configuration removes
    the capturing sink.
    """
    configure_logger(level=LogLevel.CRITICAL, environment=Environment.TESTING)
    records: list[dict[str, t.Any]] = []
    handler_id = loguru_logger.add(
        lambda message: records.append(message.record),
        level="DEBUG",
        format="{message}",
    )
    yield records
    loguru_logger.remove(handler_id)


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def guard_options() -> GuardOptions:
    """Defaults with short delays so retry tests stay fast."""
    return GuardOptions(default_timeout=0, retry_base_delay=0.001)


@pytest.fixture
def guard_context(guard_options) -> GuardContext:
    return GuardContext(guard_options)


@pytest.fixture
def runner(guard_context, telemetry, real_emitter) -> GuardRunner:
    """Provide a GuardRunner logging through loguru and recording telemetry."""
    return GuardRunner(guard_context, telemetry=telemetry, emitter=real_emitter)


@pytest.fixture
def guard(guard_options, telemetry) -> AsyncGuard:
    """Provide an AsyncGuard with recording telemetry."""
    return AsyncGuard(guard_options, telemetry=telemetry)
