# timerd

`timerd` is the core of an alarm timer service as a plain Python library.
Timers are registered with a manager, started at a trigger time and grouped
into batches, so that alarms whose delivery windows overlap fire together.
Callbacks for an application (identified by uid) can be held back by a proxy
and delivered later, or dropped.

## Installation

```
pip install .
```

There are no runtime dependencies beyond the standard library.

## Modules

- `timerd.types`: `TimerType` (`RTC_WAKEUP`, `RTC`, `ELAPSED_REALTIME_WAKEUP`,
  `ELAPSED_REALTIME`, with `is_wakeup()` and `is_rtc()`), `TimerFlag` (bit
  flags; `STANDALONE` keeps a timer in a batch of its own) and the
  `TimerEntry` record kept for each created timer.
- `timerd.timer_info`: `TimerInfo`, one scheduled alarm. Nominal times,
  windows and intervals are in milliseconds. Elapsed times are boot-clock
  nanoseconds. Two `TimerInfo` objects are equal when their ids are equal.
- `timerd.batch`: `Batch`, alarms kept in order of elapsed trigger time,
  together with the window that they all fit in (`start`, `end`, `flags`).
- `timerd.scheduling`: the scheduling rules. They are `add_batch`,
  `max_trigger_time`, `clamp_window` (a window over 12 hours becomes one hour)
  and `clamp_interval` (repeat intervals are raised to at least 5 s, or 1 s
  for system uids, and capped at one year).
- `timerd.proxy`: `ProxyRegistry`, which holds back callbacks for proxied uids.
- `timerd.handler`: `TimerHandler`. It keeps one absolute deadline for each
  alarm type and offers a time-changed signal. One waiter blocks in
  `wait_for_alarm()`.
- `timerd.manager`: `TimerManager`. It creates, starts, stops and destroys
  timers. It re-batches on clock changes and delivers callbacks.
- `timerd.dump`: text renderings used by the manager's dump methods.
- `timerd.fileutils`: small filesystem helpers.
- `timerd.errors`: the `TimeError` result codes and the `TimeServiceError`
  exception that carries one.

## Usage

```python
from timerd.handler import TimerHandler
from timerd.manager import TimerManager
from timerd.types import TimerType

fired = []
handler = TimerHandler(None)          # boot clock by default

with TimerManager(handler, None, True) as manager:
    timer_id = manager.create_timer(
        TimerType.ELAPSED_REALTIME, 0, 0, 0, fired.append, 10000
    )
    now_ms = handler.clock() // 1_000_000
    manager.start_timer(timer_id, now_ms + 10_000)
    ...
    manager.stop_timer(timer_id)      # unschedule, keep registered
    manager.destroy_timer(timer_id)   # unschedule and forget
```

Trigger times are milliseconds. RTC types take wall-clock time. Elapsed types
take time since boot. For a uid that `is_system_uid` does not report as a
system uid, a timer fires no sooner than 5 seconds from now. The default for
`is_system_uid` reports no uid as a system uid. A trigger time already in the
past is ignored.

`start_timer`, `stop_timer` and `destroy_timer` return `False` for unknown
timer ids.

To drive the manager yourself, pass `start_thread=False` and call
`manager.process_alarms(handler.wait_for_alarm(timeout))`. It returns the
timers that fired.

### Proxying callbacks

```python
manager.proxy_timer(10000, True, False)   # hold callbacks for uid 10000
manager.proxy_timer(10000, False, True)   # stop proxying and deliver held callbacks
manager.proxy_timer(10000, False, False)  # stop proxying and drop held callbacks
manager.reset_all_proxy()                 # deliver everything held and clear all proxies
```

Releasing a uid that is not proxied returns `False`.

### Inspecting state

`manager.batches()` returns the pending batches in start order.
`show_timer_entry_map`, `show_timer_entry_by_id` and
`show_timer_trigger_by_id` write readable dumps to a text stream:

```python
import sys
manager.show_timer_entry_map(sys.stdout)
```

### File helpers

`timerd.fileutils` provides these helpers:

- `is_exist_dir`
- `is_exist_file`
- `mk_recursive_dir`
- `remove_file` (recursive; a missing path is not an error)
- `rename_file`
- `chown_file`
- `write_file`
- `is_valid_path`
- `get_path_dir`

Failures raise `OSError` or `ValueError`.

## What it does not do

`timerd` is a library only. It has no command, no remote service interface
and no permission checks. It does not persist timers across restarts.
`TimerHandler` waits in-process on the wall clock and the boot clock. It does
not arm kernel timers, so it cannot wake a suspended machine.
`TimeServiceError` and `TimeError` are provided for callers. The manager
itself reports failure through return values.

## Running the tests

```
pip install .[test]
pytest
```