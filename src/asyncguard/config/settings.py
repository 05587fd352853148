"""Application settings and process-wide guard defaults."""

import enum
import typing as t

from pydantic import BaseModel, ConfigDict, Field

from ..domain.backoff import DEFAULT_BASE_DELAY, BackoffStrategy


class Environment(enum.StrEnum):
    """Runtime environment for the application.

    Drives how logging is rendered (colourised, JSON lines, or plain).
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(enum.StrEnum):
    """Log levels understood by loguru."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GuardOptions(BaseModel):
    """Process-wide defaults applied to every guarded run.

    Values are validated on construction; instances are immutable, so a
    configuration change always produces a new snapshot.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_timeout: float = Field(
        default=30.0,
        ge=0,
        description="Timeout in seconds applied when none is given. 0 disables it",
    )
    default_retry: int = Field(
        default=0,
        ge=0,
        description="Number of re-executions after the first attempt",
    )
    default_backoff: BackoffStrategy = Field(
        default=BackoffStrategy.NONE,
        description="Backoff strategy used between retries",
    )
    success_log_level: LogLevel | None = Field(
        default=LogLevel.ERROR,
        description="Level used to log successful runs. None disables them",
    )
    structured_logs: bool = Field(
        default=False,
        description="Emit encoded structured payloads instead of text",
    )
    retry_base_delay: float = Field(
        default=DEFAULT_BASE_DELAY,
        gt=0,
        description="Base delay in seconds for backoff calculation",
    )


class Settings(BaseModel):
    """Settings container used to bootstrap the app.

    Keeps a stable shape that core code depends on while letting the caller
    decide how values are populated.
    """

    model_config = ConfigDict(frozen=True)

    environment: Environment = Environment.PRODUCTION
    log_level: LogLevel = LogLevel.INFO
    guard: GuardOptions = Field(default_factory=GuardOptions)


def build_settings(**overrides: t.Any) -> Settings:
    """Build Settings from keyword overrides, ignoring None values."""
    filtered = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**filtered)
