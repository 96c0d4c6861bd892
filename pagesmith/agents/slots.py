"""
One in-flight generation per target.

A target is whatever a generation writes into: usually a block id. Starting
a new generation for a target cancels the one still running for it, so an
older answer can never land after a newer one.
"""

import asyncio
import logging
from typing import Awaitable, Dict


class GenerationSlots:
    """
    Tracks the running generation task of each target.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def start(self, target: str, coro: Awaitable) -> asyncio.Task:
        """
        Run ``coro`` as the generation for ``target``, canceling the previous one.

        Must be called from a running event loop.
        """
        previous = self._tasks.get(target)
        if previous is not None and not previous.done():
            logging.debug(f"Superseding running generation for {target}")
            previous.cancel()

        task = asyncio.ensure_future(coro)
        self._tasks[target] = task
        task.add_done_callback(lambda done: self._release(target, done))
        return task

    async def run(self, target: str, coro: Awaitable):
        """
        Run ``coro`` in the target's slot and wait for it.

        Raises:
            asyncio.CancelledError: If a newer generation for the same target replaced it
        """
        return await self.start(target, coro)

    def _release(self, target: str, task: asyncio.Task) -> None:
        if self._tasks.get(target) is task:
            del self._tasks[target]

    def is_running(self, target: str) -> bool:
        task = self._tasks.get(target)
        return task is not None and not task.done()

    def cancel(self, target: str) -> bool:
        """Cancel the running generation for a target; True if one was running."""
        task = self._tasks.get(target)
        if task is None or task.done():
            return False
        task.cancel()
        return True
