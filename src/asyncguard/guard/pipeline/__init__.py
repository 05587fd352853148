"""Hook pipeline - ordered lifecycle callbacks and plugins."""

from .builder import PipelineBuilder
from .models import (
    EMPTY_PIPELINE,
    Hook,
    HookContext,
    HookStage,
    PipelineConfiguration,
)
from .pipeline import HookPipeline, run_hooks
from .plugins import ErrorCallbackPlugin, GuardPlugin

__all__ = [
    "EMPTY_PIPELINE",
    "ErrorCallbackPlugin",
    "GuardPlugin",
    "Hook",
    "HookContext",
    "HookPipeline",
    "HookStage",
    "PipelineBuilder",
    "PipelineConfiguration",
    "run_hooks",
]
