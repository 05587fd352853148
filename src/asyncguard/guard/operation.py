"""Uniform view over the shapes of work the guard accepts."""

import asyncio
import functools
import inspect
import re
import threading
import typing as t
from abc import ABC, abstractmethod

from ..domain.exceptions import GuardConfigurationError, OperationReuseError

FALLBACK_NAME: t.Final = "GuardedTask"

Factory = t.Callable[[], t.Awaitable[t.Any]]
CancellableFactory = t.Callable[[asyncio.Event | None], t.Awaitable[t.Any]]

# asyncio names unnamed tasks "Task-<n>"
_GENERATED_TASK_NAME = re.compile(r"^Task-\d+$")


class Operation(ABC):
    """One unit of guarded work that can be started once per attempt.

    Attributes:
        name: Display name resolved when the operation is built
        supports_retry: False when the work can only be observed once
    """

    def __init__(self, name: str, supports_retry: bool) -> None:
        self.name = name
        self.supports_retry = supports_retry

    @property
    def is_consumed(self) -> bool:
        """True once a single-use operation has handed out its work."""
        return False

    def reserve(self) -> None:
        """Claim the operation for one run before that run is scheduled."""
        pass

    def discard(self) -> None:
        """Release work the run never started."""
        pass

    @abstractmethod
    def start(self, cancel_signal: asyncio.Event | None = None) -> t.Awaitable[t.Any]:
        """Start one attempt and return the awaitable that tracks it."""
        pass

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"supports_retry={self.supports_retry})"
        )

    @classmethod
    def from_awaitable(
        cls, awaitable: t.Awaitable[t.Any], name: str | None = None
    ) -> "Operation":
        """Wrap work that is already running or already created.

        The awaitable is handed out once. It cannot be replayed, so the
        resulting operation never supports retry.
        """
        if not inspect.isawaitable(awaitable):
            raise GuardConfigurationError(
                f"Expected an awaitable, got {type(awaitable).__name__}"
            )
        return _AwaitableOperation(
            awaitable, name or _awaitable_hint(awaitable) or FALLBACK_NAME
        )

    @classmethod
    def from_factory(cls, factory: Factory, name: str | None = None) -> "Operation":
        """Wrap a zero-argument callable that creates fresh work on every call."""
        _require_callable(factory)
        return _FactoryOperation(
            lambda _signal: factory(),
            name or _factory_hint(factory) or FALLBACK_NAME,
        )

    @classmethod
    def from_cancellable_factory(
        cls, factory: CancellableFactory, name: str | None = None
    ) -> "Operation":
        """Wrap a callable that receives the run's cancellation signal."""
        _require_callable(factory)
        return _FactoryOperation(
            factory, name or _factory_hint(factory) or FALLBACK_NAME
        )

    @classmethod
    def wrap(cls, target: t.Any, name: str | None = None) -> "Operation":
        """
        Build an operation from whatever shape the caller passed.

        Dispatch order:
        - Operation instances are returned unchanged
        - awaitables become single-use operations
        - callables taking one required positional argument receive the
          cancellation signal
        - any other callable is treated as a zero-argument factory

        Raises:
            GuardConfigurationError: If target is neither awaitable nor callable
        """
        if isinstance(target, Operation):
            return target
        if inspect.isawaitable(target):
            return cls.from_awaitable(target, name)
        if callable(target):
            if _required_positional_count(target) == 1:
                return cls.from_cancellable_factory(target, name)
            return cls.from_factory(target, name)
        raise GuardConfigurationError(
            f"Cannot guard object of type {type(target).__name__}: "
            "expected an awaitable or a callable returning one"
        )


class _AwaitableOperation(Operation):
    def __init__(self, awaitable: t.Awaitable[t.Any], name: str) -> None:
        super().__init__(name, supports_retry=False)
        self._awaitable = awaitable
        self._consumed = False
        self._started = False
        self._lock = threading.Lock()

    def reserve(self) -> None:
        with self._lock:
            if self._consumed:
                raise OperationReuseError(
                    f"Operation '{self.name}' has already been handed to a run"
                )
            self._consumed = True

    def discard(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
        # Unstarted coroutines warn when collected
        if inspect.iscoroutine(self._awaitable):
            self._awaitable.close()

    def start(self, cancel_signal: asyncio.Event | None = None) -> t.Awaitable[t.Any]:
        with self._lock:
            if self._started:
                raise OperationReuseError(
                    f"Operation '{self.name}' wraps work that is already running "
                    "and cannot be started again"
                )
            self._started = True
            self._consumed = True
        return self._awaitable

    @property
    def is_consumed(self) -> bool:
        return self._consumed


class _FactoryOperation(Operation):
    def __init__(self, factory: CancellableFactory, name: str) -> None:
        super().__init__(name, supports_retry=True)
        self._factory = factory

    def start(self, cancel_signal: asyncio.Event | None = None) -> t.Awaitable[t.Any]:
        # Synchronous factory errors share the awaited error path
        try:
            result = self._factory(cancel_signal)
        except Exception as exc:
            return _failed(exc)
        if not inspect.isawaitable(result):
            return _failed(
                TypeError(
                    f"Factory for '{self.name}' returned "
                    f"{type(result).__name__}, expected an awaitable"
                )
            )
        return result


def _failed(exc: BaseException) -> asyncio.Future[t.Any]:
    future = asyncio.get_running_loop().create_future()
    future.set_exception(exc)
    return future


def _require_callable(factory: t.Any) -> None:
    if not callable(factory):
        raise GuardConfigurationError(
            f"Expected a callable factory, got {type(factory).__name__}"
        )


def _awaitable_hint(awaitable: t.Awaitable[t.Any]) -> str | None:
    if isinstance(awaitable, asyncio.Task):
        task_name = awaitable.get_name()
        if not _GENERATED_TASK_NAME.match(task_name):
            return task_name
        awaitable = awaitable.get_coro()
    return getattr(awaitable, "__qualname__", None)


def _factory_hint(factory: t.Callable[..., t.Any]) -> str | None:
    while isinstance(factory, functools.partial):
        factory = factory.func
    qualname = getattr(factory, "__qualname__", None)
    if not qualname or qualname.endswith("<lambda>"):
        return None
    return qualname


def _required_positional_count(target: t.Callable[..., t.Any]) -> int:
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return 0
    return sum(
        1
        for parameter in signature.parameters.values()
        if parameter.kind
        in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is parameter.empty
    )
