"""Per-clock alarm deadlines that a single waiter can block on."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

ALARM_TYPE_COUNT = 5
N_TIMER_FDS = ALARM_TYPE_COUNT + 1
ALARM_TIME_CHANGE_MASK = 1 << 16

_REALTIME_SLOTS = frozenset({0, 1, ALARM_TYPE_COUNT})
_MAX_SLEEP_S = 1.0
_NS_PER_S = 1_000_000_000


def _boot_time_ns() -> int:
    if hasattr(time, "CLOCK_BOOTTIME"):
        try:
            return time.clock_gettime_ns(time.CLOCK_BOOTTIME)
        except OSError:
            pass
    return time.monotonic_ns()


class TimerHandler:
    """One-shot absolute deadlines, one per alarm type, plus a time-change signal.

    Slots 0, 1 and the last slot follow the wall clock; the others follow
    ``clock``, which returns boot-clock nanoseconds.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None) -> None:
        self.clock: Callable[[], int] = clock if clock is not None else _boot_time_ns
        self._deadlines: list[Optional[int]] = [None] * N_TIMER_FDS
        self._time_changed = False
        self._closed = False
        self._cond = threading.Condition()

    def _now(self, slot: int) -> int:
        return time.time_ns() if slot in _REALTIME_SLOTS else self.clock()

    def set(self, alarm_type: int, when_ns: int) -> None:
        """Arm the deadline for ``alarm_type``; a zero time disarms it."""
        slot = int(alarm_type)
        if slot < 0 or slot > ALARM_TYPE_COUNT:
            raise ValueError(f"invalid alarm type: {alarm_type}")
        with self._cond:
            self._deadlines[slot] = None if when_ns == 0 else int(when_ns)
            self._cond.notify_all()

    def notify_time_changed(self) -> None:
        """Signal that the wall clock was set."""
        with self._cond:
            self._time_changed = True
            self._cond.notify_all()

    def wait_for_alarm(self, timeout: Optional[float] = None) -> int:
        """Block until deadlines pass or the time changes and return their bit mask.

        Bit ``1 << type`` marks an expired deadline, which is disarmed;
        ``ALARM_TIME_CHANGE_MASK`` marks a time change. Returns 0 when
        ``timeout`` seconds pass first or the handler is closed.
        """
        end = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while True:
                if self._closed:
                    return 0
                result = 0
                nearest: Optional[int] = None
                for slot, deadline in enumerate(self._deadlines):
                    if deadline is None:
                        continue
                    remaining = deadline - self._now(slot)
                    if remaining <= 0:
                        result |= 1 << slot
                        self._deadlines[slot] = None
                    elif nearest is None or remaining < nearest:
                        nearest = remaining
                if self._time_changed:
                    result |= ALARM_TIME_CHANGE_MASK
                    self._time_changed = False
                if result:
                    return result
                wait = _MAX_SLEEP_S if nearest is None else min(nearest / _NS_PER_S, _MAX_SLEEP_S)
                if end is not None:
                    left = end - time.monotonic()
                    if left <= 0:
                        return 0
                    wait = min(wait, left)
                self._cond.wait(wait)

    def close(self) -> None:
        """Disarm everything and release any waiter."""
        with self._cond:
            self._closed = True
            self._deadlines = [None] * N_TIMER_FDS
            self._cond.notify_all()

    def __enter__(self) -> "TimerHandler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()