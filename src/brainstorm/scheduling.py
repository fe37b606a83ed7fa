"""
Timer scheduling on the event loop.

Anything with an asyncio-style `call_later(delay_seconds, callback)` that
returns a handle with `cancel()` can be used as a scheduler.
"""

import asyncio
from typing import Any, Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class LoopScheduler:
    """Schedules on whichever asyncio loop is running when the timer is set."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class PendingTimer:
    """
    Single-slot timer with cancel-and-replace semantics.

    At most one callback is ever scheduled; `schedule()` cancels the
    outstanding one before arming the new one.
    """

    def __init__(self, scheduler: Scheduler, delay_ms: int):
        self.scheduler = scheduler
        self.delay = delay_ms / 1000.0  # Convert to seconds
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], Any]) -> None:
        self.cancel()
        self._handle = self.scheduler.call_later(self.delay, lambda: self._fire(callback))

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], Any]) -> None:
        self._handle = None
        callback()
