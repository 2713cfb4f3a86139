from __future__ import annotations

import heapq
import itertools
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

Clock = Callable[[], int]


def monotonic_ms() -> int:
    """Real clock in integer milliseconds."""
    return int(time.monotonic() * 1000)


class ManualClock:
    """Virtual clock for tests and simulations; time only moves through advance()."""

    def __init__(self, start: int = 0) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += int(ms)
        return self.now


@dataclass(eq=False)
class Timer:
    """Handle for a scheduled callback. Periodic timers carry an interval and are re-armed after each firing."""
    due: int
    callback: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    interval: Optional[int] = None
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Pump-driven timer queue.

    Nothing runs on its own: run_due() fires every timer whose due time has been
    reached, in (due, scheduling order). While a callback runs, now() reports that
    callback's due time so work scheduled from inside it stays on the virtual timeline.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or monotonic_ms
        self._heap: List[Tuple[int, int, Timer]] = []
        self._seq = itertools.count()
        self._current: Optional[int] = None

    def now(self) -> int:
        if self._current is not None:
            return self._current
        return int(self._clock())

    def _push(self, timer: Timer) -> Timer:
        heapq.heappush(self._heap, (timer.due, next(self._seq), timer))
        return timer

    def call_later(self, delay_ms: int, callback: Callable[..., Any], *args: Any) -> Timer:
        return self._push(Timer(self.now() + max(0, int(delay_ms)), callback, args))

    def call_every(self, interval_ms: int, callback: Callable[..., Any], *args: Any) -> Timer:
        if interval_ms <= 0:
            raise ValueError('interval_ms must be positive')
        return self._push(Timer(self.now() + int(interval_ms), callback, args, interval=int(interval_ms)))

    def _drop_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)

    def next_due(self) -> Optional[int]:
        """Due time of the earliest live timer, or None when idle."""
        self._drop_cancelled()
        return self._heap[0][0] if self._heap else None

    def run_due(self, now: Optional[int] = None) -> int:
        """Fires all timers due at or before `now` (default: the clock). Returns how many fired."""
        target = int(self._clock()) if now is None else int(now)
        fired = 0
        while self._heap and self._heap[0][0] <= target:
            due, _, timer = heapq.heappop(self._heap)
            if timer.cancelled:
                continue
            self._current = due
            try:
                timer.callback(*timer.args)
            finally:
                self._current = None
            fired += 1
            if timer.interval is not None and not timer.cancelled:
                # Coalesce missed periodic ticks: jump to the last tick not after target.
                missed = (target - due) // timer.interval
                timer.due = due + timer.interval * max(1, missed)
                self._push(timer)
        return fired
