"""Cancellable repeating callbacks on the asyncio event loop."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[Any]]]


class RepeatingTask:
    """Runs a callback every ``interval`` seconds until cancelled.

    The owner of the task is responsible for calling ``cancel`` on teardown;
    a task that is never cancelled keeps firing for the life of the loop.
    """

    def __init__(self, interval: float, callback: Callback, name: str = "repeating-task"):
        """Initialize repeating task.

        Args:
            interval: Seconds between calls
            callback: Plain function or coroutine function taking no arguments
            name: Name used in logs and for the asyncio task
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop.

        Raises:
            RuntimeError: If already started or no event loop is running
        """
        if self.running:
            raise RuntimeError(f"{self.name} is already running")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name=self.name)
        logger.debug(f"Started {self.name} (every {self.interval}s)")

    def cancel(self) -> None:
        """Stop firing. Safe to call more than once."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"Cancelled {self.name}")
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                result = self.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"{self.name} callback failed: {e}")
