"""Concurrency helpers for controlling background thread usage."""

from __future__ import annotations

from typing import Any, Callable

import anyio

from salesboard.core.config import settings

_security_sem = anyio.Semaphore(settings.SECURITY_MAX_CONCURRENCY)


async def run_in_thread_security(func: Callable[..., Any], *args: Any):
    """Run a CPU-heavy hashing call in a worker thread with bounded concurrency."""

    async with _security_sem:
        return await anyio.to_thread.run_sync(func, *args)
