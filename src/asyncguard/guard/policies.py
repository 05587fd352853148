"""Per-task overrides resolved ahead of the process-wide defaults."""

import threading
import typing as t

from pydantic import ValidationError

from ..domain.backoff import BackoffStrategy
from ..domain.exceptions import GuardConfigurationError
from ..domain.policy import GuardPolicy, NamePredicate, PolicyRule


class PolicyBuilder:
    """Collects policy rules in registration order.

    Usage:
        table.configure(
            lambda rules: rules
            .for_task("send_email", timeout=5.0, retry_count=2)
            .for_predicate(lambda name: name.startswith("sync_"), timeout=0)
        )
    """

    def __init__(self) -> None:
        self._rules: list[PolicyRule] = []

    def for_task(
        self,
        task_name: str,
        *,
        timeout: float | None = None,
        retry_count: int | None = None,
        backoff: BackoffStrategy | None = None,
    ) -> "PolicyBuilder":
        """Register overrides for one task name, compared case-insensitively."""
        if not task_name or not task_name.strip():
            raise GuardConfigurationError("Policy task name must not be blank")
        expected = task_name.casefold()
        return self.for_predicate(
            lambda name: name.casefold() == expected,
            timeout=timeout,
            retry_count=retry_count,
            backoff=backoff,
        )

    def for_predicate(
        self,
        predicate: NamePredicate,
        *,
        timeout: float | None = None,
        retry_count: int | None = None,
        backoff: BackoffStrategy | None = None,
    ) -> "PolicyBuilder":
        """Register overrides for every task name the predicate accepts."""
        if not callable(predicate):
            raise GuardConfigurationError(
                f"Policy predicate must be callable, got {type(predicate).__name__}"
            )
        try:
            policy = GuardPolicy(
                timeout=timeout, retry_count=retry_count, backoff=backoff
            )
        except ValidationError as e:
            raise GuardConfigurationError(f"Invalid guard policy: {e}") from e
        self._rules.append(PolicyRule(predicate=predicate, policy=policy))
        return self

    def build(self) -> tuple[PolicyRule, ...]:
        return tuple(self._rules)


class PolicyTable:
    """Ordered rule set where the most recently registered match wins.

    Each configure call replaces the whole rule set. Readers take the current
    tuple without locking, so a resolve running alongside a configure sees
    either the old rules or the new ones, never a mix.
    """

    def __init__(self) -> None:
        self._rules: tuple[PolicyRule, ...] = ()
        self._lock = threading.Lock()

    @property
    def rules(self) -> tuple[PolicyRule, ...]:
        return self._rules

    def configure(self, build: t.Callable[[PolicyBuilder], t.Any]) -> None:
        """
        Replace all rules with the ones registered by build.

        Args:
            build: Callable receiving a fresh PolicyBuilder

        Raises:
            GuardConfigurationError: If a registration is invalid. The current
                                     rules are kept in that case.
        """
        if not callable(build):
            raise GuardConfigurationError("Policy configuration must be callable")
        builder = PolicyBuilder()
        build(builder)
        rules = builder.build()
        with self._lock:
            self._rules = rules

    def resolve(self, task_name: str) -> GuardPolicy | None:
        """Return the policy of the newest rule matching task_name, if any."""
        for rule in reversed(self._rules):
            if rule.matches(task_name):
                return rule.policy
        return None

    def reset(self) -> None:
        with self._lock:
            self._rules = ()
