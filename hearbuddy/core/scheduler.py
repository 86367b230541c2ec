"""Delayed-callback schedulers for the interim finalize timer.

WHY: The accumulator needs exactly one kind of timing: "run this callback
after N seconds unless cancelled". Hiding that behind a tiny interface
lets the same accumulator run under a plain thread, inside an asyncio
event loop, or against a virtual clock in tests and script replays.

HOW: Scheduler.call_later() returns a handle with cancel().
  ThreadingScheduler: one daemon threading.Timer per call
  AsyncioScheduler: delegates to loop.call_later()
  ManualScheduler: virtual clock advanced explicitly with advance()

RULES:
- Handles must tolerate cancel() after firing and repeated cancel()
- ManualScheduler fires due callbacks in due-time order, then insertion order
- Callbacks scheduled while advancing fire in the same advance() if due
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Abstract source of cancellable delayed callbacks."""

    @abstractmethod
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay_s`` seconds unless the handle is cancelled."""


class ThreadingScheduler(Scheduler):
    """Fires callbacks on daemon timer threads.

    The callback runs on a separate thread; callers serialize shared state
    themselves (the accumulator holds a lock).
    """

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(max(delay_s, 0.0), callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop.

    WHY: When captions are driven from an async application, callbacks
    must run on the loop thread, interleaved with engine callbacks.

    RULES:
    - Without an explicit loop, the running loop at call time is used
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay_s, 0.0), callback)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler driven by advance().

    WHY: Tests and recorded-script replays need the finalize timer to fire
    at exact virtual times without sleeping.

    HOW: Pending callbacks sit in a heap keyed by (due time, sequence).
    advance() moves the clock forward and fires everything that comes due,
    including callbacks scheduled by callbacks fired along the way.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualHandle, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        due = self.now + max(delay_s, 0.0)
        heapq.heappush(self._queue, (due, next(self._counter), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled callbacks that are neither fired nor cancelled."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that comes due."""
        target = self.now + max(seconds, 0.0)
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = due
            if not handle.cancelled:
                handle.cancelled = True
                callback()
        self.now = target
