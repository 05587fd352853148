"""Configuration - settings, environments and guard defaults."""

from .settings import Environment, GuardOptions, LogLevel, Settings, build_settings

__all__ = [
    "Environment",
    "GuardOptions",
    "LogLevel",
    "Settings",
    "build_settings",
]
