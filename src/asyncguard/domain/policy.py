"""Per-task override models resolved ahead of the process-wide defaults."""

import typing as t
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from .backoff import BackoffStrategy

NamePredicate = t.Callable[[str], bool]


class GuardPolicy(BaseModel):
    """Optional overrides for timeout, retry count and backoff.

    Unset fields (None) fall through to the process-wide defaults. A timeout
    of 0 disables the timeout for matching tasks.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float | None = Field(
        default=None, description="Timeout in seconds; <= 0 disables it"
    )
    retry_count: int | None = Field(
        default=None, description="Retries after the first attempt"
    )
    backoff: BackoffStrategy | None = Field(
        default=None, description="Backoff strategy between retries"
    )


@dataclass(frozen=True)
class PolicyRule:
    """A predicate over task names paired with the policy it selects."""

    predicate: NamePredicate
    policy: GuardPolicy

    def matches(self, task_name: str) -> bool:
        return bool(self.predicate(task_name))
