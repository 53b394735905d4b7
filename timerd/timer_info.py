"""A scheduled timer as it sits in the batch queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from timerd.types import TimerType


@dataclass(eq=False)
class TimerInfo:
    """A started timer.

    ``when``, ``window_length`` and ``repeat_interval`` are milliseconds;
    ``when_elapsed`` and ``max_when_elapsed`` are boot-clock nanoseconds.
    Two timers are equal when their ids are equal.
    """

    id: int
    type: int
    when: int
    when_elapsed: int
    window_length: int
    max_when_elapsed: int
    repeat_interval: int
    callback: Optional[Callable[[int], None]]
    flags: int
    uid: int
    orig_when: int = field(init=False)
    wakeup: bool = field(init=False)
    count: int = field(init=False, default=0)
    expected_when_elapsed: int = field(init=False)
    expected_max_when_elapsed: int = field(init=False)
    package_name: Optional[str] = field(default=None, kw_only=True)

    def __post_init__(self) -> None:
        self.orig_when = self.when
        self.wakeup = self.type in (TimerType.ELAPSED_REALTIME_WAKEUP, TimerType.RTC_WAKEUP)
        self.expected_when_elapsed = self.when_elapsed
        self.expected_max_when_elapsed = self.max_when_elapsed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimerInfo):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def matches(self, package_name: str) -> bool:
        """Whether the timer belongs to ``package_name``; unattributed timers never match."""
        if self.package_name is None:
            return False
        return self.package_name == package_name