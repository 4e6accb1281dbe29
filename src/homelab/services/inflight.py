from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any


class InflightRequests:
    """Coalesces concurrent refreshes of the same cache key.

    The first caller for a key starts the refresh as a task; callers arriving
    while it runs await the same task instead of hitting upstream again.
    """

    def __init__(self):
        self._tasks: dict[str, asyncio.Task] = {}

    async def run(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(partial(self._forget, key))
        # shield: one caller going away must not cancel the refresh for the rest
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if not task.cancelled():
            # mark the exception as retrieved when every waiter was cancelled
            task.exception()

    def __contains__(self, key: object) -> bool:
        return key in self._tasks
