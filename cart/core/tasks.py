"""
Background Task Registry

Fire-and-forget work (points notifications, menu table sync) is spawned
through this registry so every task keeps a strong reference, logs its
completion, and is drained on shutdown instead of being orphaned.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from cart.core.logging.logger import get_logger

logger = get_logger(__name__)


class BackgroundTaskRegistry:
    """Tracks spawned asyncio tasks until they finish."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("background_task_cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "background_task_failed",
                task=task.get_name(),
                error_type=type(exc).__name__,
                error=str(exc),
            )
        else:
            logger.debug("background_task_completed", task=task.get_name())

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding tasks; cancel whatever is left after `timeout`."""
        if not self._tasks:
            return

        tasks = list(self._tasks)
        logger.info("draining_background_tasks", count=len(tasks), timeout=timeout)
        done, pending = await asyncio.wait(tasks, timeout=timeout)

        for task in pending:
            task.cancel()
        if pending:
            logger.warning("background_tasks_cancelled_on_drain", count=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
