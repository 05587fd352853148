"""Logging infrastructure built on loguru.

The module keeps a single configured flag so that `get_logger` can
auto-configure sensible defaults the first time it is used, while the app
layer can call `setup_logging` explicitly with its own settings.
"""

import sys
import typing as t

from loguru import logger as _logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

_DEVELOPMENT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - <level>{message}</level>"
)
_PLAIN_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} - {message}"
)

_configured = False


def configure_logger(
    level: LogLevel = LogLevel.INFO,
    environment: Environment = Environment.PRODUCTION,
) -> None:
    """Replace all loguru sinks with one configured for the environment.

    Args:
        level: Minimum level written to the sink
        environment: DEVELOPMENT renders colourised text, PRODUCTION renders
                    JSON lines, TESTING renders plain text
    """
    global _configured

    _logger.remove()
    _logger.configure(extra={"component": "asyncguard"})

    match environment:
        case Environment.DEVELOPMENT:
            _logger.add(
                sys.stderr,
                level=level.value,
                format=_DEVELOPMENT_FORMAT,
                colorize=True,
                backtrace=True,
            )
        case Environment.PRODUCTION:
            _logger.add(sys.stderr, level=level.value, serialize=True)
        case Environment.TESTING:
            _logger.add(sys.stderr, level=level.value, format=_PLAIN_FORMAT)

    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def get_logger(name: str) -> "loguru.Logger":
    """Return a logger bound to a component name, configuring defaults if needed."""
    if not _configured:
        configure_logger()
    return _logger.bind(component=name)


def is_configured() -> bool:
    """True once logging has been configured explicitly or implicitly."""
    return _configured


def reset_logging() -> None:
    """Remove all sinks and mark logging as unconfigured."""
    global _configured

    _logger.remove()
    _configured = False
