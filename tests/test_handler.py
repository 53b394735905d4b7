import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from timerd.handler import ALARM_TIME_CHANGE_MASK, ALARM_TYPE_COUNT, TimerHandler
from timerd.types import TimerType

START = 1_000_000_000_000


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def handler(clock):
    with TimerHandler(clock) as h:
        yield h


@pytest.mark.parametrize("bad", [ALARM_TYPE_COUNT + 1, -1])
def test_set_rejects_invalid_type(handler, bad):
    with pytest.raises(ValueError):
        handler.set(bad, START)


def test_past_deadline_fires(handler):
    handler.set(TimerType.ELAPSED_REALTIME_WAKEUP, START - 1)
    assert handler.wait_for_alarm(0) == 1 << TimerType.ELAPSED_REALTIME_WAKEUP


def test_future_deadline_waits_until_clock_advances(handler, clock):
    handler.set(TimerType.ELAPSED_REALTIME, START + 10)
    assert handler.wait_for_alarm(0) == 0
    clock.now = START + 10
    assert handler.wait_for_alarm(0) == 1 << TimerType.ELAPSED_REALTIME


def test_deadline_is_one_shot(handler):
    handler.set(TimerType.ELAPSED_REALTIME, START)
    assert handler.wait_for_alarm(0) == 1 << TimerType.ELAPSED_REALTIME
    assert handler.wait_for_alarm(0) == 0


def test_zero_disarms(handler):
    handler.set(TimerType.ELAPSED_REALTIME, START)
    handler.set(TimerType.ELAPSED_REALTIME, 0)
    assert handler.wait_for_alarm(0) == 0


def test_several_deadlines_combine(handler):
    handler.set(TimerType.ELAPSED_REALTIME, START)
    handler.set(TimerType.ELAPSED_REALTIME_WAKEUP, START)
    expected = (1 << TimerType.ELAPSED_REALTIME) | (1 << TimerType.ELAPSED_REALTIME_WAKEUP)
    assert handler.wait_for_alarm(0) == expected


def test_time_change_signal(handler):
    handler.notify_time_changed()
    assert handler.wait_for_alarm(0) == ALARM_TIME_CHANGE_MASK
    assert handler.wait_for_alarm(0) == 0


def test_blocking_wait_is_woken_by_other_thread(handler):
    timer = threading.Timer(0.05, handler.notify_time_changed)
    timer.start()
    try:
        assert handler.wait_for_alarm(5) == ALARM_TIME_CHANGE_MASK
    finally:
        timer.cancel()


def test_closed_handler_returns_zero(clock):
    handler = TimerHandler(clock)
    handler.set(TimerType.ELAPSED_REALTIME, START)
    handler.close()
    assert handler.wait_for_alarm(None) == 0


def test_close_releases_blocked_waiter(clock):
    handler = TimerHandler(clock)
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(handler.wait_for_alarm, None)
        handler.close()
        assert future.result(timeout=5) == 0