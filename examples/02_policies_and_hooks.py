#!/usr/bin/env python3
"""
02_policies_and_hooks.py - Central policies, lifecycle hooks and cancellation

Demonstrates:
- Name based and predicate based policies
- Hook pipeline with an error callback plugin
- Stopping a run silently through a cancellation signal
- The guarded decorator
"""

import asyncio

from asyncguard import (
    AsyncGuard,
    ErrorCallbackPlugin,
    GuardOptions,
    HookContext,
    create_app,
)


def log_stage(ctx: HookContext) -> None:
    print(f"  hook: {ctx.stage} {ctx.task_name} attempt {ctx.attempt}")


async def alert(ctx: HookContext) -> None:
    print(f"  alert: {ctx.task_name} raised {ctx.exception!r}")


async def main() -> None:
    create_app()
    guard = AsyncGuard(GuardOptions(success_log_level=None, retry_base_delay=0.05))

    guard.configure_policies(
        lambda rules: rules.for_task(
            "sync_ledger", timeout=0.2, retry_count=1
        ).for_predicate(lambda name: name.startswith("report."), retry_count=2)
    )
    guard.configure_pipeline(
        lambda hooks: hooks.on_start(log_stage)
        .on_retry(log_stage)
        .on_complete(log_stage)
    )
    guard.use_plugin(ErrorCallbackPlugin(alert))

    async def sync_ledger() -> None:
        await asyncio.sleep(1)

    print("Policy timeout on sync_ledger")
    await guard.fire_and_forget(sync_ledger, task_name="sync_ledger")

    @guard.guarded(task_name="report.daily")
    async def daily_report(day: str) -> None:
        raise ValueError(f"no data for {day}")

    print("Predicate policy retries report.* tasks")
    await daily_report("2024-01-01")

    print("Cancellation signal stops a run without logging")
    stop = asyncio.Event()

    async def poll(signal: asyncio.Event) -> None:
        while not signal.is_set():
            await asyncio.sleep(0.05)

    run = guard.fire_and_forget(poll, task_name="poller", cancel_signal=stop)
    await asyncio.sleep(0.1)
    stop.set()
    await run
    print("  poller stopped")


if __name__ == "__main__":
    asyncio.run(main())
