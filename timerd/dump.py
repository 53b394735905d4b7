"""Text renderings of timers for diagnostic dumps."""

from __future__ import annotations

from timerd.timer_info import TimerInfo
from timerd.types import TimerEntry


def format_timer_entry(number: int, entry: TimerEntry) -> str:
    """Describe a registered timer, ending with a blank line."""
    return (
        f" - dump timer number   = {number}\n"
        f" * timer id            = {entry.id}\n"
        f" * timer type          = {int(entry.type)}\n"
        f" * timer window Length = {entry.window_length}\n"
        f" * timer interval      = {entry.interval}\n"
        f" * timer uid           = {entry.uid}\n\n"
    )


def format_timer_trigger(alarm: TimerInfo) -> str:
    """Describe a scheduled timer and its original trigger time."""
    return (
        f" - dump timer id   = {alarm.id}\n"
        f" * timer trigger   = {alarm.orig_when}\n"
    )