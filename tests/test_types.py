from timerd.types import TimerEntry, TimerFlag, TimerType


def test_timer_type_values_match_interface():
    assert TimerType(0) is TimerType.RTC_WAKEUP
    assert TimerType(1) is TimerType.RTC
    assert TimerType(2) is TimerType.ELAPSED_REALTIME_WAKEUP
    assert TimerType(3) is TimerType.ELAPSED_REALTIME


def test_is_wakeup():
    assert TimerType.RTC_WAKEUP.is_wakeup()
    assert TimerType.ELAPSED_REALTIME_WAKEUP.is_wakeup()
    assert not TimerType.RTC.is_wakeup()
    assert not TimerType.ELAPSED_REALTIME.is_wakeup()


def test_is_rtc():
    assert TimerType.RTC.is_rtc()
    assert TimerType.RTC_WAKEUP.is_rtc()
    assert not TimerType.ELAPSED_REALTIME.is_rtc()
    assert not TimerType.ELAPSED_REALTIME_WAKEUP.is_rtc()


def test_flags_are_distinct_bits():
    combined = TimerFlag(0)
    for flag in TimerFlag:
        assert not (combined & flag)
        combined |= flag
    assert TimerFlag.STANDALONE in combined
    assert TimerFlag.IDLE_UNTIL == 1 << 4


def test_timer_entry_holds_fields():
    calls = []
    entry = TimerEntry(7, TimerType.RTC, 100, 200, int(TimerFlag.STANDALONE), calls.append, 1000)
    entry.callback(entry.id)
    assert calls == [7]
    assert entry.window_length == 100
    assert entry.interval == 200
    assert entry.uid == 1000
    assert entry.flag & TimerFlag.STANDALONE