"""Cancellable timers for spin duration and auto-spin pacing."""
import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable


class TimerHandle(ABC):
    """A scheduled callback. Cancelling is idempotent."""

    @abstractmethod
    def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass


class Scheduler(ABC):
    """Abstract single-queue scheduler used by the orchestrator."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        pass


class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """
    Live scheduler on an asyncio event loop.

    All callbacks run on the loop thread, so economy mutations never
    interleave. Must be used from inside the loop, or be given one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _AsyncioTimer(self.loop.call_later(max(0.0, delay), callback))


class _VirtualTimer(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler(Scheduler):
    """
    Test/Simulation scheduler.

    Deterministic manual clock: nothing runs until advance() or
    run_until_idle() is called. Timers due at the same time fire in the
    order they were scheduled.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, _VirtualTimer]] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = _VirtualTimer(self._now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (timer.due, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers still due to fire."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def next_due(self) -> float | None:
        for due, _, timer in sorted(self._queue):
            if not timer.cancelled:
                return due
        return None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers. Returns how many fired."""
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = due
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, max_steps: int = 10_000) -> int:
        """Fire timers in order until none are left. Returns how many fired."""
        fired = 0
        while fired < max_steps:
            due = self.next_due()
            if due is None:
                break
            fired += self.advance(due - self._now)
        return fired
