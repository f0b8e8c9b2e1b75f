"""
Trouble - Scheduled Callbacks

Every deferred action in a session (die settling, turn timeout, the Roll-of-1
chain, auto-ending a turn with no moves) goes through a Scheduler, so tests
can drive time by hand and an application can plug in real timers.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock plus delayed-callback registration."""

    def now(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class _ManualTask:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock that only moves when ``advance`` is called.

    Callbacks run synchronously on the caller's thread, in due-time order
    (ties in scheduling order). Callbacks scheduled while advancing run in
    the same call if they fall due before the target time.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, _ManualTask]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTask:
        task = _ManualTask(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
        return task

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for _, _, task in self._queue if not task.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if not task.cancelled:
                task.callback()
        self._now = target

    def run_all(self, limit: int = 1000) -> None:
        """Fire callbacks until the queue is empty."""
        for _ in range(limit):
            live = [entry for entry in self._queue if not entry[2].cancelled]
            if not live:
                return
            self.advance(max(0.0, min(entry[0] for entry in live) - self._now))
        raise RuntimeError(f"Scheduler still busy after {limit} steps")


class _ThreadingHandle:
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Wall-clock scheduler backed by daemon ``threading.Timer`` threads.

    Callbacks run on timer threads; the session serialises them with its own
    lock.
    """

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ThreadingHandle:
        timer = threading.Timer(max(0.0, delay), self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return _ThreadingHandle(timer)

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback failed")
