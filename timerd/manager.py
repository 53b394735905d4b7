"""The timer manager: registers timers, batches them and fires their callbacks."""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Callable, Optional, TextIO

from timerd.batch import Batch
from timerd.dump import format_timer_entry, format_timer_trigger
from timerd.handler import TimerHandler
from timerd.proxy import ProxyRegistry
from timerd.scheduling import (
    MIN_FUTURITY_MS,
    NS_PER_MS,
    TIME_CHANGE_TOLERANCE_MS,
    TIME_CHANGED_MASK,
    ZERO_FUTURITY_MS,
    add_batch,
    clamp_interval,
    clamp_window,
    max_trigger_time,
    ns_to_ms,
)
from timerd.timer_info import TimerInfo
from timerd.types import TimerEntry, TimerFlag, TimerType

_log = logging.getLogger(__name__)

_UINT64_BITS = 64


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


class TimerManager:
    """Creates, starts and stops timers and delivers them when they expire."""

    def __init__(
        self,
        handler: Optional[TimerHandler] = None,
        is_system_uid: Optional[Callable[[int], bool]] = None,
        start_thread: bool = True,
    ) -> None:
        self._handler = handler if handler is not None else TimerHandler()
        self._is_system_uid = is_system_uid if is_system_uid is not None else (lambda uid: False)
        self._random = random.Random(time.time())
        self._lock = threading.RLock()
        self._entries: dict[int, TimerEntry] = {}
        self._batches: list[Batch] = []
        self._proxy = ProxyRegistry()
        self._last_time_change_clock_ms: Optional[int] = None
        self._last_time_change_realtime_ms = 0
        self._running = True
        self._thread: Optional[threading.Thread] = None
        if start_thread:
            self._thread = threading.Thread(target=self._loop, name="timer-looper", daemon=True)
            self._thread.start()

    def create_timer(
        self,
        timer_type: int,
        window_length: int,
        interval: int,
        flag: int,
        callback: Optional[Callable[[int], None]],
        uid: int,
    ) -> int:
        """Register a timer and return its new non-zero id."""
        _log.info("create timer: type=%s window=%s interval=%s flag=%s",
                  timer_type, window_length, interval, flag)
        with self._lock:
            timer_id = 0
            while timer_id == 0 or timer_id in self._entries:
                timer_id = self._random.getrandbits(_UINT64_BITS)
            self._entries[timer_id] = TimerEntry(
                timer_id, int(timer_type), window_length, interval, int(flag), callback, uid
            )
            return timer_id

    def start_timer(self, timer_id: int, trigger_time: int) -> bool:
        """Schedule a registered timer at ``trigger_time`` milliseconds."""
        with self._lock:
            entry = self._entries.get(timer_id)
            if entry is None:
                _log.error("timer id not found: %d", timer_id)
                return False
            self._set_handler(entry, trigger_time)
            return True

    def stop_timer(self, timer_id: int) -> bool:
        """Unschedule a timer but keep it registered."""
        return self._stop_timer(timer_id, destroy=False)

    def destroy_timer(self, timer_id: int) -> bool:
        """Unschedule a timer and forget it."""
        return self._stop_timer(timer_id, destroy=True)

    def proxy_timer(self, uid: int, is_proxy: bool, need_retrigger: bool) -> bool:
        return self._proxy.proxy_timer(uid, is_proxy, need_retrigger)

    def reset_all_proxy(self) -> bool:
        return self._proxy.reset_all()

    def batches(self) -> list[Batch]:
        """The pending batches in trigger order."""
        with self._lock:
            return list(self._batches)

    def process_alarms(self, result: int) -> list[TimerInfo]:
        """Handle one wake-up of the alarm handler and return the timers fired."""
        now_rtc_ms = time.time_ns() // NS_PER_MS
        now_elapsed = self._boot_time_ns()
        with self._lock:
            if result & TIME_CHANGED_MASK:
                now_elapsed_ms = ns_to_ms(now_elapsed)
                last = self._last_time_change_clock_ms
                if last is None or abs(
                    now_rtc_ms - (last + now_elapsed_ms - self._last_time_change_realtime_ms)
                ) > TIME_CHANGE_TOLERANCE_MS:
                    self._rebatch_all_locked()
                    self._last_time_change_clock_ms = now_rtc_ms
                    self._last_time_change_realtime_ms = now_elapsed_ms
            triggered: list[TimerInfo] = []
            if result != TIME_CHANGED_MASK:
                triggered = self._trigger_timers_locked(now_elapsed)
                for alarm in triggered:
                    if alarm.callback is not None:
                        self._proxy.deliver(alarm)
            self._reschedule_kernel_timer_locked()
            return triggered

    def show_timer_entry_map(self, out: TextIO) -> bool:
        with self._lock:
            for number, entry in self._entries.items():
                out.write(format_timer_entry(number, entry))
        return True

    def show_timer_entry_by_id(self, out: TextIO, timer_id: int) -> bool:
        with self._lock:
            entry = self._entries.get(timer_id)
            if entry is None:
                return False
            out.write(format_timer_entry(timer_id, entry))
        return True

    def show_timer_trigger_by_id(self, out: TextIO, timer_id: int) -> bool:
        with self._lock:
            for batch in self._batches:
                for alarm in batch:
                    if alarm.id == timer_id:
                        out.write(format_timer_trigger(alarm))
        return True

    def close(self) -> None:
        """Stop the looper thread and release the handler."""
        self._running = False
        self._handler.close()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def __enter__(self) -> "TimerManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _loop(self) -> None:
        _log.info("start timer wait loop")
        while self._running:
            result = self._handler.wait_for_alarm(None)
            if not self._running:
                break
            self.process_alarms(result)

    def _boot_time_ns(self) -> int:
        return self._handler.clock()

    def _convert_to_elapsed(self, when_ms: int, timer_type: int) -> int:
        boot_now = self._boot_time_ns()
        if timer_type in (TimerType.RTC, TimerType.RTC_WAKEUP):
            return boot_now + when_ms * NS_PER_MS - time.time_ns()
        return when_ms * NS_PER_MS

    def _set_handler(self, entry: TimerEntry, trigger_at_ms: int) -> None:
        system = self._is_system_uid(entry.uid)
        window_ms = clamp_window(entry.window_length)
        interval_ms = clamp_interval(entry.interval, system)
        now_elapsed = self._boot_time_ns()
        nominal = self._convert_to_elapsed(trigger_at_ms, entry.type)
        if nominal < now_elapsed:
            _log.info("invalid trigger time for timer %d", entry.id)
            return
        futurity = ZERO_FUTURITY_MS if system else MIN_FUTURITY_MS
        trigger_elapsed = max(nominal, now_elapsed + futurity * NS_PER_MS)
        if window_ms == 0:
            max_elapsed = trigger_elapsed
        elif window_ms < 0:
            max_elapsed = max_trigger_time(nominal, trigger_elapsed, interval_ms)
            window_ms = ns_to_ms(max_elapsed - trigger_elapsed)
        else:
            max_elapsed = trigger_elapsed + window_ms * NS_PER_MS
        alarm = TimerInfo(entry.id, entry.type, trigger_at_ms, trigger_elapsed, window_ms,
                          max_elapsed, interval_ms, entry.callback, entry.flag, entry.uid)
        self._set_handler_locked(alarm, rebatching=False)

    def _set_handler_locked(self, alarm: TimerInfo, rebatching: bool) -> None:
        self._insert_and_batch_locked(alarm)
        if not rebatching:
            self._reschedule_kernel_timer_locked()

    def _insert_and_batch_locked(self, alarm: TimerInfo) -> None:
        if alarm.flags & TimerFlag.STANDALONE:
            which = -1
        else:
            which = self._attempt_coalesce_locked(alarm.when_elapsed, alarm.max_when_elapsed)
        if which < 0:
            add_batch(self._batches, Batch(alarm))
            return
        batch = self._batches[which]
        if batch.add(alarm):
            del self._batches[which]
            add_batch(self._batches, batch)

    def _attempt_coalesce_locked(self, when_elapsed: int, max_when: int) -> int:
        for index, batch in enumerate(self._batches):
            if not batch.flags & TimerFlag.STANDALONE and batch.can_hold(when_elapsed, max_when):
                return index
        return -1

    def _stop_timer(self, timer_id: int, destroy: bool) -> bool:
        with self._lock:
            entry = self._entries.get(timer_id)
            if entry is None:
                return False
            self._remove_locked(timer_id)
            self._proxy.remove(timer_id, entry.uid)
            if destroy:
                del self._entries[timer_id]
            return True

    def _remove_locked(self, timer_id: int) -> None:
        did_remove = False
        kept: list[Batch] = []
        for batch in self._batches:
            if batch.remove_if(lambda timer: timer.id == timer_id):
                did_remove = True
            if len(batch):
                kept.append(batch)
        self._batches = kept
        if did_remove:
            self._rebatch_all_locked()

    def _rebatch_all_locked(self) -> None:
        old_batches, self._batches = self._batches, []
        now_elapsed = self._boot_time_ns()
        for batch in old_batches:
            for timer in batch:
                self._re_add_timer_locked(timer, now_elapsed)
        self._reschedule_kernel_timer_locked()

    def _re_add_timer_locked(self, timer: TimerInfo, now_elapsed: int) -> None:
        timer.when = timer.orig_when
        when_elapsed = self._convert_to_elapsed(timer.when, timer.type)
        if when_elapsed < now_elapsed:
            _log.info("dropping expired timer %d", timer.id)
            return
        if timer.window_length == 0:
            max_elapsed = when_elapsed
        elif timer.window_length > 0:
            max_elapsed = when_elapsed + timer.window_length * NS_PER_MS
        else:
            max_elapsed = max_trigger_time(now_elapsed, when_elapsed, timer.repeat_interval)
        timer.when_elapsed = when_elapsed
        timer.max_when_elapsed = max_elapsed
        self._set_handler_locked(timer, rebatching=True)

    def _trigger_timers_locked(self, now_elapsed: int) -> list[TimerInfo]:
        triggered: list[TimerInfo] = []
        while self._batches and self._batches[0].start <= now_elapsed:
            batch = self._batches.pop(0)
            for alarm in batch:
                alarm.count = 1
                triggered.append(alarm)
                if alarm.repeat_interval > 0:
                    alarm.count += _trunc_div(
                        ns_to_ms(now_elapsed - alarm.expected_when_elapsed), alarm.repeat_interval
                    )
                    delta_ms = alarm.count * alarm.repeat_interval
                    next_elapsed = alarm.when_elapsed + delta_ms * NS_PER_MS
                    nxt = TimerInfo(
                        alarm.id, alarm.type, alarm.when + delta_ms, next_elapsed,
                        alarm.window_length,
                        max_trigger_time(now_elapsed, next_elapsed, alarm.repeat_interval),
                        alarm.repeat_interval, alarm.callback, alarm.flags, alarm.uid,
                    )
                    self._set_handler_locked(nxt, rebatching=False)
        triggered.sort(key=lambda item: item.when_elapsed)
        return triggered

    def _reschedule_kernel_timer_locked(self) -> None:
        if not self._batches:
            return
        first_wakeup = next((batch for batch in self._batches if batch.has_wakeups()), None)
        first_batch = self._batches[0]
        if first_wakeup is not None:
            self._handler.set(TimerType.ELAPSED_REALTIME_WAKEUP, int(first_wakeup.start))
        if first_batch is not first_wakeup:
            self._handler.set(TimerType.ELAPSED_REALTIME, int(first_batch.start))