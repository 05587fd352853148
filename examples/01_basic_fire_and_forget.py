#!/usr/bin/env python3
"""
01_basic_fire_and_forget.py - Launch background work without awaiting it

Demonstrates:
- Guarding a coroutine (runs once) and a factory (can be retried)
- Per-call timeout and retry overrides
- Reading outcomes from task.* events instead of the run task
"""

import asyncio
import random
from datetime import datetime

from asyncguard import (
    AsyncGuard,
    BackoffStrategy,
    GuardOptions,
    TaskEventType,
    TaskFailedEvent,
    create_app,
)


def on_failed(event: TaskFailedEvent) -> None:
    """Print attempt failures with timing info."""
    ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    retry = "retrying" if event.will_retry else "giving up"
    print(
        f"  [{ts}] {event.task_name} attempt {event.attempt}/{event.total_attempts} "
        f"failed ({event.error.exc_type}), {retry}"
    )


async def send_welcome_email(user: str) -> None:
    await asyncio.sleep(0.05)
    print(f"  Welcome email sent to {user}")


async def refresh_exchange_rates() -> None:
    await asyncio.sleep(0.05)
    if random.random() < 0.7:
        raise ConnectionError("rates provider unavailable")
    print("  Exchange rates refreshed")


async def main() -> None:
    create_app()
    guard = AsyncGuard(GuardOptions(default_timeout=2.0, success_log_level=None))
    guard.on(TaskEventType.FAILED, on_failed)

    print("Firing a coroutine (single attempt)")
    guard.fire_and_forget(send_welcome_email("ada@example.com"))

    print("Firing a factory with 3 retries and linear backoff")
    run = guard.fire_and_forget(
        refresh_exchange_rates,
        retry_count=3,
        backoff=BackoffStrategy.LINEAR,
    )

    print("Caller continues immediately...")
    # Awaiting is optional; done here so the demo exits after the runs finish
    await run
    await asyncio.sleep(0.1)


if __name__ == "__main__":
    asyncio.run(main())
