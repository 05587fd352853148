"""Guarded execution - operations, policies, hooks, telemetry and the runner."""

from .context import GuardContext
from .default import fire_and_forget, get_default_guard, set_default_guard
from .guard import AsyncGuard
from .operation import FALLBACK_NAME, Operation
from .pipeline import (
    ErrorCallbackPlugin,
    GuardPlugin,
    HookContext,
    HookPipeline,
    HookStage,
    PipelineBuilder,
    PipelineConfiguration,
)
from .policies import PolicyBuilder, PolicyTable
from .runner import EffectiveConfig, GuardRunner, normalize_exception
from .task_logger import TaskLogger, TaskLogPayload
from .telemetry import BaseTelemetry, NullTelemetry, OpenTelemetryTelemetry

__all__ = [
    # Facade
    "AsyncGuard",
    "fire_and_forget",
    "get_default_guard",
    "set_default_guard",
    # Engine
    "EffectiveConfig",
    "GuardContext",
    "GuardRunner",
    "normalize_exception",
    # Operations
    "FALLBACK_NAME",
    "Operation",
    # Policies
    "PolicyBuilder",
    "PolicyTable",
    # Pipeline
    "ErrorCallbackPlugin",
    "GuardPlugin",
    "HookContext",
    "HookPipeline",
    "HookStage",
    "PipelineBuilder",
    "PipelineConfiguration",
    # Reporting
    "TaskLogger",
    "TaskLogPayload",
    "BaseTelemetry",
    "NullTelemetry",
    "OpenTelemetryTelemetry",
]
