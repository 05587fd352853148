from dataclasses import dataclass

from .config.settings import Settings
from .guard.guard import AsyncGuard
from .infrastructure.logging import setup_logging


@dataclass(frozen=True)
class App:
    """Application wiring container.

    Holds the settings the process booted with and the guard built from
    them. Tests can pass explicit `Settings` to get a fully isolated guard.
    """

    settings: Settings
    guard: AsyncGuard


def create_app(settings: Settings | None = None) -> App:
    """Configure logging and build an `App` with a guard using settings.guard.

    Keep logic here minimal so boot is predictable and test-friendly.
    """
    settings = settings or Settings()
    setup_logging(settings)
    return App(settings=settings, guard=AsyncGuard(settings.guard))
