"""
Turn Timer - A cancellable once-per-second countdown tick.

The countdown is an explicit scheduled task rather than a callback owned
by a UI runtime:
- A Scheduler hands out one-shot callbacks with a cancel() handle
- Countdown re-arms itself after each tick
- Every armed callback carries the generation it was created under;
  start() and cancel() bump the generation, so a callback that is already
  in flight when the countdown is cancelled does nothing

Only one schedule is live per Countdown. Cancelling twice is safe.
"""

from __future__ import annotations
import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class AsyncioScheduler:
    """
    Schedules on an asyncio event loop.

    Without an explicit loop the running loop is looked up on each call,
    so the scheduler can be created before the loop starts (e.g. at app
    construction) and used from inside request handlers.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


@dataclass(order=True)
class ScheduledCall:
    """A pending callback in a ManualScheduler."""
    when: float
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by advance().

    Used by tests, and by hosts that run their own clock.

    Usage:
        scheduler = ManualScheduler()
        scheduler.call_later(1.0, tick)
        scheduler.advance(3)  # fires every callback due within 3 seconds
    """

    def __init__(self):
        self.now = 0.0
        self._queue: list[ScheduledCall] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> ScheduledCall:
        call = ScheduledCall(self.now + delay, next(self._counter), callback)
        heapq.heappush(self._queue, call)
        return call

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) callbacks."""
        return sum(1 for call in self._queue if not call.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing due callbacks in time order.

        Callbacks scheduled while advancing fire too if they fall due
        before the target time.

        Returns:
            Number of callbacks fired
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0].when <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self.now = call.when
            call.callback()
            fired += 1
        self.now = target
        return fired


class Countdown:
    """
    Repeating tick with staleness protection.

    Usage:
        countdown = Countdown(scheduler, on_tick=game.tick)
        countdown.start()   # tick every second until cancelled
        countdown.cancel()
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callable[[], Any],
        interval: float = 1.0,
    ):
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.interval = interval
        self._generation = 0
        self._handle: TimerHandle | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self):
        """(Re)start ticking; any previous schedule is cancelled first."""
        self.cancel()
        self._arm(self._generation)

    def cancel(self):
        """Stop ticking. Idempotent."""
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _arm(self, generation: int):
        self._handle = self.scheduler.call_later(
            self.interval,
            lambda: self._fire(generation),
        )

    def _fire(self, generation: int):
        if generation != self._generation:
            logger.debug("Dropping stale tick (generation %d, current %d)", generation, self._generation)
            return
        # Re-arm before the callback so a cancel() inside it wins
        self._arm(generation)
        self.on_tick()
