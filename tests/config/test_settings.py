"""Tests for Settings configuration helpers."""

import pytest
from pydantic import ValidationError

from asyncguard.config.settings import (
    Environment,
    GuardOptions,
    LogLevel,
    Settings,
    build_settings,
)
from asyncguard.domain.backoff import BackoffStrategy


@pytest.fixture
def default_settings():
    """Provide default Settings for comparison."""
    return Settings()


class TestBuildSettings:
    """Test our build_settings helper logic."""

    def test_filters_none_values(self, default_settings):
        """build_settings ignores None overrides."""
        settings = build_settings(
            environment=None,
            log_level=LogLevel.DEBUG,
        )

        assert settings.environment == default_settings.environment
        assert settings.log_level == LogLevel.DEBUG

    def test_applies_all_overrides(self):
        """build_settings applies all non-None overrides."""
        settings = build_settings(
            environment=Environment.DEVELOPMENT,
            log_level=LogLevel.ERROR,
            guard=GuardOptions(default_retry=3),
        )

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.log_level == LogLevel.ERROR
        assert settings.guard.default_retry == 3


class TestGuardOptions:
    """Test defaults and validation of process-wide guard options."""

    def test_defaults(self):
        options = GuardOptions()

        assert options.default_timeout == 30.0
        assert options.default_retry == 0
        assert options.default_backoff == BackoffStrategy.NONE
        assert options.success_log_level == LogLevel.ERROR
        assert options.structured_logs is False
        assert options.retry_base_delay == 0.5

    @pytest.mark.parametrize(
        "field,value",
        [
            ("default_timeout", -1),
            ("default_retry", -1),
            ("retry_base_delay", 0),
            ("retry_base_delay", -0.5),
        ],
    )
    def test_rejects_invalid_values(self, field, value):
        """Invalid values fail instead of being clamped."""
        with pytest.raises(ValidationError):
            GuardOptions(**{field: value})

    def test_zero_timeout_is_allowed(self):
        """A zero timeout is valid and means no timeout."""
        assert GuardOptions(default_timeout=0).default_timeout == 0

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            GuardOptions(max_workers=3)

    def test_is_immutable(self):
        options = GuardOptions()

        with pytest.raises(ValidationError):
            options.default_retry = 5

    def test_success_logs_can_be_disabled(self):
        assert GuardOptions(success_log_level=None).success_log_level is None
