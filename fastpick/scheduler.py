"""Single-threaded cooperative task scheduler.

Everything in a picker session runs on one logical thread. "Concurrency" is a
queue of deferred callbacks and cancellable timers driven by ``run_pending``.
The clock and sleep functions are injected so tests can drive time by hand.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TimerHandle:
    """Cancellable reference to one scheduled callback."""

    __slots__ = ("deadline", "seq", "callback", "cancelled", "done")

    def __init__(self, deadline: float, seq: int, callback: Callable[[], object]) -> None:
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        """Whether the callback may still run."""
        return not (self.cancelled or self.done)

    def __lt__(self, other: TimerHandle) -> bool:
        return (self.deadline, self.seq) < (other.deadline, other.seq)


class Scheduler:
    """Deadline-ordered task queue with one-tick ``defer`` semantics.

    A tick is one ``run_pending`` call. Tasks queued while a tick is running
    wait for the next tick, so ``defer`` never runs a callback synchronously
    and bursts of deferred work collapse naturally.
    """

    def __init__(
        self,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._monotonic = monotonic
        self._sleep = sleep
        self._queue: list[TimerHandle] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._monotonic()

    def call_later(self, delay_seconds: float, callback: Callable[[], object]) -> TimerHandle:
        """Schedule ``callback`` to run once ``delay_seconds`` have elapsed."""
        deadline = self._monotonic() + max(0.0, delay_seconds)
        handle = TimerHandle(deadline, next(self._seq), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def defer(self, callback: Callable[[], object]) -> TimerHandle:
        """Schedule ``callback`` for the next scheduling opportunity."""
        return self.call_later(0.0, callback)

    def pending_count(self) -> int:
        return sum(1 for handle in self._queue if handle.active)

    def next_deadline(self) -> float | None:
        self._drop_cancelled_head()
        if not self._queue:
            return None
        return self._queue[0].deadline

    def _drop_cancelled_head(self) -> None:
        while self._queue and not self._queue[0].active:
            heapq.heappop(self._queue)

    def run_pending(self) -> int:
        """Run every task due now and return how many callbacks ran.

        The set of runnable tasks is fixed when the tick starts: work scheduled
        by a callback during this tick runs on a later tick.
        """
        now = self._monotonic()
        due: list[TimerHandle] = []
        while self._queue:
            head = self._queue[0]
            if not head.active:
                heapq.heappop(self._queue)
                continue
            if head.deadline > now:
                break
            due.append(heapq.heappop(self._queue))

        ran = 0
        for handle in due:
            # An earlier callback in this tick may have cancelled a later one.
            if not handle.active:
                continue
            handle.done = True
            ran += 1
            try:
                handle.callback()
            except Exception:
                logger.exception("scheduled callback %r failed", handle.callback)
        return ran

    def run_until(
        self,
        predicate: Callable[[], bool] | None = None,
        timeout_seconds: float | None = None,
    ) -> bool:
        """Drive the loop until ``predicate`` holds, the queue drains, or timeout.

        Returns ``True`` when ``predicate`` became true (or, without a
        predicate, when the queue drained).
        """
        deadline = None if timeout_seconds is None else self._monotonic() + timeout_seconds
        while True:
            if predicate is not None and predicate():
                return True
            next_due = self.next_deadline()
            if next_due is None:
                return predicate is None
            now = self._monotonic()
            if deadline is not None and now >= deadline:
                return False
            if next_due > now:
                wait = next_due - now
                if deadline is not None:
                    wait = min(wait, max(0.0, deadline - now))
                self._sleep(wait)
                continue
            self.run_pending()


__all__ = ["Scheduler", "TimerHandle"]
