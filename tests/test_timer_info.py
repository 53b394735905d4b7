from timerd.timer_info import TimerInfo
from timerd.types import TimerType


def make(timer_id=1, timer_type=TimerType.ELAPSED_REALTIME, when=500):
    return TimerInfo(timer_id, timer_type, when, 10_000, 0, 20_000, 0, None, 0, 1000)


def test_derived_fields_follow_constructor_arguments():
    info = make(when=1234)
    assert info.orig_when == 1234
    assert info.when == 1234
    assert info.expected_when_elapsed == info.when_elapsed
    assert info.expected_max_when_elapsed == info.max_when_elapsed
    assert info.count == 0


def test_wakeup_flag_from_type():
    assert make(timer_type=TimerType.RTC_WAKEUP).wakeup
    assert make(timer_type=TimerType.ELAPSED_REALTIME_WAKEUP).wakeup
    assert not make(timer_type=TimerType.RTC).wakeup
    assert not make(timer_type=TimerType.ELAPSED_REALTIME).wakeup


def test_equality_is_by_id():
    first = make(timer_id=5, when=1)
    second = make(timer_id=5, when=2)
    third = make(timer_id=6, when=1)
    assert first == second
    assert first != third
    assert len({first, second, third}) == 2


def test_mutating_when_keeps_orig_when():
    info = make(when=100)
    info.when = 900
    assert info.orig_when == 100


def test_matches_never_true():
    assert make().matches("com.example.app") is False
    assert make().matches("") is False