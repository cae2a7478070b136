"""Cancelable timer abstraction used to drive the rolling phase of a draw."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Optional, Protocol

Callback = Callable[[], None]


class TaskHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Anything able to run callbacks once after a delay or periodically."""

    def call_later(self, delay: float, callback: Callback) -> TaskHandle: ...

    def call_every(self, interval: float, callback: Callback) -> TaskHandle: ...


class _RecurringAsyncioHandle:
    """Re-arms ``loop.call_later`` after each run until cancelled."""

    def __init__(
        self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callback
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._timer: Optional[asyncio.TimerHandle] = None
        self._arm()

    def _arm(self) -> None:
        self._timer = self._loop.call_later(self._interval, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()
        # the callback may have cancelled us
        if not self._cancelled:
            self._arm()

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    When ``loop`` is omitted the running loop at call time is used, so the
    scheduler can be created outside of a coroutine.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callback) -> TaskHandle:
        return self._get_loop().call_later(delay, callback)

    def call_every(self, interval: float, callback: Callback) -> TaskHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return _RecurringAsyncioHandle(self._get_loop(), interval, callback)


class ManualHandle:
    def __init__(self, interval: Optional[float] = None) -> None:
        self.interval = interval
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Virtual-clock scheduler; nothing runs until :meth:`advance` is called.

    Callbacks due at the same instant run in the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualHandle, Callback]] = []
        self._counter = itertools.count()

    def _push(self, due: float, handle: ManualHandle, callback: Callback) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), handle, callback))

    def call_later(self, delay: float, callback: Callback) -> ManualHandle:
        handle = ManualHandle()
        self._push(self.now + max(delay, 0.0), handle, callback)
        return handle

    def call_every(self, interval: float, callback: Callback) -> ManualHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = ManualHandle(interval)
        self._push(self.now + interval, handle, callback)
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns the number of callbacks executed.
        """

        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        target = self.now + seconds
        executed = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            if handle.cancelled():
                continue
            self.now = due
            callback()
            executed += 1
            if handle.interval is not None and not handle.cancelled():
                self._push(due + handle.interval, handle, callback)
        self.now = target
        return executed

    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled())


__all__ = [
    "AsyncioScheduler",
    "Callback",
    "ManualHandle",
    "ManualScheduler",
    "Scheduler",
    "TaskHandle",
]
