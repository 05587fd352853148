"""Tests for policy registration and resolution."""

import pytest

from asyncguard.domain.backoff import BackoffStrategy
from asyncguard.domain.exceptions import GuardConfigurationError
from asyncguard.guard.policies import PolicyTable


@pytest.fixture
def table():
    return PolicyTable()


class TestPolicyResolution:
    """Test which rule wins for a task name."""

    def test_no_rules_resolves_none(self, table):
        assert table.resolve("anything") is None

    def test_for_task_matches_case_insensitively(self, table):
        table.configure(lambda rules: rules.for_task("Send_Email", retry_count=2))

        policy = table.resolve("send_email")

        assert policy is not None
        assert policy.retry_count == 2

    def test_for_task_does_not_match_other_names(self, table):
        table.configure(lambda rules: rules.for_task("send_email", retry_count=2))

        assert table.resolve("send_sms") is None

    def test_last_registered_rule_wins(self, table):
        """timeout=5s then timeout=10ms for the same name resolves to 10ms."""
        table.configure(
            lambda rules: rules.for_task("job", timeout=5.0).for_task(
                "job", timeout=0.01
            )
        )

        assert table.resolve("job").timeout == 0.01

    def test_predicate_rules(self, table):
        table.configure(
            lambda rules: rules.for_predicate(
                lambda name: name.startswith("sync_"),
                backoff=BackoffStrategy.EXPONENTIAL,
            )
        )

        assert table.resolve("sync_ledger").backoff == BackoffStrategy.EXPONENTIAL
        assert table.resolve("ledger") is None

    def test_newer_generic_rule_shadows_older_specific_rule(self, table):
        table.configure(
            lambda rules: rules.for_task("job", retry_count=1).for_predicate(
                lambda name: True, retry_count=7
            )
        )

        assert table.resolve("job").retry_count == 7

    def test_unset_fields_stay_none(self, table):
        table.configure(lambda rules: rules.for_task("job", timeout=1.0))

        policy = table.resolve("job")

        assert policy.retry_count is None
        assert policy.backoff is None


class TestPolicyConfiguration:
    """Test replacement semantics and validation."""

    def test_configure_replaces_all_rules(self, table):
        table.configure(lambda rules: rules.for_task("old", retry_count=1))
        table.configure(lambda rules: rules.for_task("new", retry_count=2))

        assert table.resolve("old") is None
        assert table.resolve("new").retry_count == 2

    def test_reset_clears_rules(self, table):
        table.configure(lambda rules: rules.for_task("job", retry_count=1))

        table.reset()

        assert table.rules == ()
        assert table.resolve("job") is None

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_task_name_rejected(self, table, name):
        with pytest.raises(GuardConfigurationError):
            table.configure(lambda rules: rules.for_task(name, retry_count=1))

    def test_non_callable_predicate_rejected(self, table):
        with pytest.raises(GuardConfigurationError):
            table.configure(lambda rules: rules.for_predicate("job", retry_count=1))

    @pytest.mark.parametrize(
        "overrides",
        [{"timeout": "soon"}, {"retry_count": "many"}, {"backoff": "random"}],
    )
    def test_invalid_override_values_rejected(self, table, overrides):
        with pytest.raises(GuardConfigurationError, match="Invalid guard policy"):
            table.configure(lambda rules: rules.for_task("job", **overrides))

    def test_failed_configuration_keeps_previous_rules(self, table):
        table.configure(lambda rules: rules.for_task("job", retry_count=1))

        with pytest.raises(GuardConfigurationError):
            table.configure(lambda rules: rules.for_task("", retry_count=2))

        assert table.resolve("job").retry_count == 1
