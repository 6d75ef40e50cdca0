from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import Any, Coroutine, Set


class TaskRunner:
    """Tracks background tasks of one client session and cancels them on shutdown."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()

    def create(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
