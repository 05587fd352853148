"""asyncguard - supervision for fire-and-forget asyncio work."""

from .app import App, create_app
from .config import Environment, GuardOptions, LogLevel, Settings, build_settings
from .domain import (
    BackoffStrategy,
    GuardConfigurationError,
    GuardError,
    GuardPolicy,
    OperationReuseError,
    TaskTimeoutError,
    calculate_delay,
)
from .events import (
    ErrorInfo,
    EventEmitter,
    Subscription,
    TaskCompletedEvent,
    TaskEventType,
    TaskFailedEvent,
    TaskStartedEvent,
    TaskTimedOutEvent,
)
from .guard import (
    AsyncGuard,
    ErrorCallbackPlugin,
    GuardContext,
    GuardPlugin,
    GuardRunner,
    HookContext,
    HookStage,
    Operation,
    OpenTelemetryTelemetry,
    fire_and_forget,
    get_default_guard,
    set_default_guard,
)

__version__ = "0.1.0"

__all__ = [
    # App
    "App",
    "create_app",
    # Config
    "Environment",
    "GuardOptions",
    "LogLevel",
    "Settings",
    "build_settings",
    # Domain
    "BackoffStrategy",
    "GuardPolicy",
    "calculate_delay",
    "GuardError",
    "GuardConfigurationError",
    "OperationReuseError",
    "TaskTimeoutError",
    # Events
    "ErrorInfo",
    "EventEmitter",
    "Subscription",
    "TaskEventType",
    "TaskStartedEvent",
    "TaskCompletedEvent",
    "TaskFailedEvent",
    "TaskTimedOutEvent",
    # Guard
    "AsyncGuard",
    "ErrorCallbackPlugin",
    "GuardContext",
    "GuardPlugin",
    "GuardRunner",
    "HookContext",
    "HookStage",
    "Operation",
    "OpenTelemetryTelemetry",
    "fire_and_forget",
    "get_default_guard",
    "set_default_guard",
]
