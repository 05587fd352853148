"""Explicit configuration context read by the guard runner."""

import threading
import typing as t
from contextlib import contextmanager

from pydantic import ValidationError

from ..config.settings import GuardOptions
from ..domain.exceptions import GuardConfigurationError
from .pipeline import HookPipeline
from .policies import PolicyTable


class GuardContext:
    """Options, policies and hooks shared by every run of one guard.

    Each of the three is an immutable snapshot replaced wholesale under its
    own lock. Runs read the current snapshots once, when they are scheduled.
    """

    def __init__(
        self,
        options: GuardOptions | None = None,
        policies: PolicyTable | None = None,
        pipeline: HookPipeline | None = None,
    ) -> None:
        self._options = options if options is not None else GuardOptions()
        self._options_lock = threading.Lock()
        self.policies = policies if policies is not None else PolicyTable()
        self.pipeline = pipeline if pipeline is not None else HookPipeline()

    @property
    def options(self) -> GuardOptions:
        return self._options

    def configure(self, **changes: t.Any) -> GuardOptions:
        """
        Apply option changes and return the new snapshot.

        Args:
            **changes: GuardOptions fields to change

        Returns:
            The options now in effect

        Raises:
            GuardConfigurationError: If a value is invalid or a field is unknown.
                                     The previous options stay in effect.
        """
        with self._options_lock:
            try:
                options = GuardOptions.model_validate(
                    {**self._options.model_dump(), **changes}
                )
            except ValidationError as e:
                raise GuardConfigurationError(f"Invalid guard options: {e}") from e
            self._options = options
        return options

    def replace_options(self, options: GuardOptions) -> None:
        with self._options_lock:
            self._options = options

    @contextmanager
    def override(self, **changes: t.Any) -> t.Iterator[GuardOptions]:
        """Apply option changes for the duration of a with-block.

        The snapshot taken on entry is restored on exit, discarding any other
        option change made inside the block.
        """
        previous = self._options
        options = self.configure(**changes)
        try:
            yield options
        finally:
            self.replace_options(previous)

    def reset(self) -> None:
        """Restore default options and clear policies and hooks."""
        self.replace_options(GuardOptions())
        self.policies.reset()
        self.pipeline.reset()
