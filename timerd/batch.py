"""A group of timers that may fire together within a shared window."""

from __future__ import annotations

import bisect
import copy
import math
from typing import Callable, Iterator, Optional

from timerd.timer_info import TimerInfo

_TYPE_NONWAKEUP_MASK = 0x1


class Batch:
    """Timers ordered by elapsed trigger time, with the window they all fit in."""

    def __init__(self, seed: Optional[TimerInfo] = None) -> None:
        if seed is None:
            self._start: float = -math.inf
            self._end: float = math.inf
            self._flags = 0
            self._alarms: list[TimerInfo] = []
        else:
            self._start = seed.when_elapsed
            self._end = seed.max_when_elapsed
            self._flags = seed.flags
            self._alarms = [copy.copy(seed)]

    @property
    def start(self) -> float:
        return self._start

    @property
    def end(self) -> float:
        return self._end

    @property
    def flags(self) -> int:
        return self._flags

    def __len__(self) -> int:
        return len(self._alarms)

    def __iter__(self) -> Iterator[TimerInfo]:
        return iter(list(self._alarms))

    def get(self, index: int) -> Optional[TimerInfo]:
        """The timer at ``index``, or None when out of range."""
        if 0 <= index < len(self._alarms):
            return self._alarms[index]
        return None

    def can_hold(self, when_elapsed: float, max_when: float) -> bool:
        """Whether a timer with this window overlaps the batch's window."""
        return self._end > when_elapsed and self._start <= max_when

    def add(self, alarm: TimerInfo) -> bool:
        """Insert a timer; return True if the batch start moved later."""
        bisect.insort_right(self._alarms, alarm, key=lambda item: item.when_elapsed)
        new_start = False
        if alarm.when_elapsed > self._start:
            self._start = alarm.when_elapsed
            new_start = True
        if alarm.max_when_elapsed < self._end:
            self._end = alarm.max_when_elapsed
        self._flags |= alarm.flags
        return new_start

    def remove(self, alarm: TimerInfo) -> bool:
        """Remove timers equal to ``alarm``; return whether any were removed."""
        return self.remove_if(lambda item: item == alarm)

    def remove_if(self, predicate: Callable[[TimerInfo], bool]) -> bool:
        """Remove matching timers and recompute the window when any went."""
        kept = [alarm for alarm in self._alarms if not predicate(alarm)]
        if len(kept) == len(self._alarms):
            return False
        self._alarms = kept
        self._start = max((a.when_elapsed for a in kept), default=-math.inf)
        self._end = min((a.max_when_elapsed for a in kept), default=math.inf)
        flags = 0
        for alarm in kept:
            flags |= alarm.flags
        self._flags = flags
        return True

    def has_package(self, package_name: str) -> bool:
        return any(alarm.matches(package_name) for alarm in self._alarms)

    def has_wakeups(self) -> bool:
        """Whether any timer in the batch is of a wakeup type."""
        return any((int(alarm.type) & _TYPE_NONWAKEUP_MASK) == 0 for alarm in self._alarms)