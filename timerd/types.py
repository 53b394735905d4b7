"""Timer types, flags and the record kept for each created timer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Callable, Optional


class TimerFlag(IntFlag):
    """Behaviour flags a timer may carry."""

    STANDALONE = 1 << 0
    WAKE_FROM_IDLE = 1 << 1
    ALLOW_WHILE_IDLE = 1 << 2
    ALLOW_WHILE_IDLE_UNRESTRICTED = 1 << 3
    IDLE_UNTIL = 1 << 4


class TimerType(IntEnum):
    """The clock a timer is measured against and whether it wakes the device."""

    RTC_WAKEUP = 0
    RTC = 1
    ELAPSED_REALTIME_WAKEUP = 2
    ELAPSED_REALTIME = 3

    def is_wakeup(self) -> bool:
        """True for the wakeup variants."""
        return self in (TimerType.RTC_WAKEUP, TimerType.ELAPSED_REALTIME_WAKEUP)

    def is_rtc(self) -> bool:
        """True when the trigger time is wall-clock time."""
        return self in (TimerType.RTC_WAKEUP, TimerType.RTC)


@dataclass
class TimerEntry:
    """A created timer as registered with the manager, before it is started."""

    id: int
    type: int
    window_length: int
    interval: int
    flag: int
    callback: Optional[Callable[[int], None]]
    uid: int