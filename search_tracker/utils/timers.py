"""
Recurring timers on the running asyncio event loop.

``Interval`` mirrors ``setInterval``: the callback runs every
*seconds* until ``stop()`` is called.  A callback that raises is
logged and the timer keeps running.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable

from search_tracker.utils import errors, logger

log = logger.create_logger("Timer")


class Interval:
    """A cancellable recurring callback."""

    def __init__(self, name: str, seconds: float, callback: Callable[[], object]) -> None:
        self.name = name
        self.seconds = seconds
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking.  Requires a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"interval:{self.name}")

    def stop(self) -> None:
        """Cancel the timer without waiting for it to finish."""
        if self._task and not self._task.done():
            self._task.cancel()

    async def aclose(self) -> None:
        """Cancel the timer and wait until its task has exited."""
        task = self._task
        self.stop()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.seconds)
            try:
                self._callback()
            except Exception as error:
                log.error(
                    "Timer callback failed",
                    {"timer": self.name, "error": errors.get_error_message(error)},
                )
