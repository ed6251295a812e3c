"""Timer-based debouncing on the asyncio event loop."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import inspect
from typing import Any

from loguru import logger


class Debouncer:
    """Runs the most recently scheduled action after a quiet period.

    Scheduling again before the delay elapses cancels the pending action.
    Coroutine functions are started as tasks on the loop.
    """

    def __init__(self, delay: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._delay = max(0.0, float(delay))
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, action: Callable[[], Any | Awaitable[Any]]) -> None:
        """Arm the timer for `action`, replacing any pending one."""
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self._delay, self._fire, action)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, action: Callable[[], Any | Awaitable[Any]]) -> None:
        self._handle = None
        result = action()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Debounced action failed: {}", exc)

    async def drain(self) -> None:
        """Wait for actions already started by the timer to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
