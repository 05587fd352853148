"""Process-wide default guard behind an explicit accessor."""

import threading
import typing as t

from .guard import AsyncGuard

_default_guard: AsyncGuard | None = None
_lock = threading.Lock()


def get_default_guard() -> AsyncGuard:
    """Return the process-wide guard, creating it on first use."""
    global _default_guard

    guard = _default_guard
    if guard is not None:
        return guard
    with _lock:
        if _default_guard is None:
            _default_guard = AsyncGuard()
        return _default_guard


def set_default_guard(guard: AsyncGuard | None) -> AsyncGuard | None:
    """Replace the process-wide guard and return the previous one.

    Passing None drops the current guard so the next access builds a new one.
    """
    global _default_guard

    with _lock:
        previous, _default_guard = _default_guard, guard
    return previous


def fire_and_forget(target: t.Any, **overrides: t.Any) -> t.Any:
    """Guard target with the process-wide guard. See AsyncGuard.fire_and_forget."""
    return get_default_guard().fire_and_forget(target, **overrides)
