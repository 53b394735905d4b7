"""Scheduling rules shared by the timer manager: batch ordering, windows and limits.

Elapsed times are boot-clock nanoseconds; durations handed in by callers are
milliseconds.
"""

from __future__ import annotations

import bisect
from typing import MutableSequence

from timerd.batch import Batch

NS_PER_MS = 1_000_000

TIME_CHANGED_MASK = 1 << 16
TIME_CHANGE_TOLERANCE_MS = 1000
BATCH_WINDOW_COE = 0.75
MIN_FUTURITY_MS = 5_000
ZERO_FUTURITY_MS = 0
MIN_INTERVAL_FIVE_SECONDS_MS = 5_000
MIN_INTERVAL_ONE_SECOND_MS = 1_000
MAX_INTERVAL_MS = 24 * 365 * 3_600_000
INTERVAL_HOUR_MS = 3_600_000
INTERVAL_HALF_DAY_MS = 12 * 3_600_000
MIN_FUZZABLE_INTERVAL_MS = 10_000


def ns_to_ms(duration_ns: int) -> int:
    """Convert nanoseconds to whole milliseconds, truncating toward zero."""
    whole = abs(int(duration_ns)) // NS_PER_MS
    return whole if duration_ns >= 0 else -whole


def add_batch(batches: MutableSequence[Batch], batch: Batch) -> bool:
    """Insert ``batch`` after every batch starting no later; True if it went first."""
    index = bisect.bisect_right(batches, batch.start, key=lambda item: item.start)
    batches.insert(index, batch)
    return index == 0


def max_trigger_time(now: int, trigger_at: int, interval: int) -> int:
    """The latest elapsed time a timer due at ``trigger_at`` may be deferred to.

    ``now`` and ``trigger_at`` are nanoseconds, ``interval`` milliseconds.
    Timers closer than the fuzzable minimum get no slack at all.
    """
    futurity = ns_to_ms(trigger_at - now) if interval == 0 else interval
    if futurity < MIN_FUZZABLE_INTERVAL_MS:
        futurity = 0
    return trigger_at + int(BATCH_WINDOW_COE * futurity) * NS_PER_MS


def clamp_window(window_ms: int) -> int:
    """Limit a batching window: anything above half a day becomes one hour."""
    return INTERVAL_HOUR_MS if window_ms > INTERVAL_HALF_DAY_MS else window_ms


def clamp_interval(interval_ms: int, system_uid: bool) -> int:
    """Raise a repeat interval to the minimum for the caller, or cap it at a year."""
    minimum = MIN_INTERVAL_ONE_SECOND_MS if system_uid else MIN_INTERVAL_FIVE_SECONDS_MS
    if 0 < interval_ms < minimum:
        return minimum
    if interval_ms > MAX_INTERVAL_MS:
        return MAX_INTERVAL_MS
    return interval_ms