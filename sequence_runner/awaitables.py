"""Bridge for user callables that return awaitables.

The engine is synchronous; validators, extractors, step handlers, hooks
and reporters may still be ``async def``. Their results are driven to
completion here before the engine continues.
"""

import asyncio
import inspect
from concurrent.futures import ThreadPoolExecutor
from typing import Any


def resolve(value: Any) -> Any:
    """Return ``value``, awaiting it first if it is awaitable."""
    if not inspect.isawaitable(value):
        return value

    async def _wait():
        return await value

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_wait())

    # Already inside a running loop: asyncio.run() is not allowed on this thread.
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, _wait()).result()


def call(func, *args, **kwargs) -> Any:
    """Call ``func`` and resolve its result."""
    return resolve(func(*args, **kwargs))
