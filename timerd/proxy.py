"""Holding back timer callbacks for proxied uids and releasing them later."""

from __future__ import annotations

import logging
import threading

from timerd.timer_info import TimerInfo

_log = logging.getLogger(__name__)


class ProxyRegistry:
    """Tracks proxied uids and the expired timers withheld from them."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._uids: set[int] = set()
        self._pending: dict[int, list[TimerInfo]] = {}

    def is_proxied(self, uid: int) -> bool:
        with self._lock:
            return uid in self._uids

    def deliver(self, alarm: TimerInfo) -> bool:
        """Run the alarm's callback, or hold it if its uid is proxied.

        Returns True when the callback ran.
        """
        if alarm.callback is None:
            return False
        with self._lock:
            if alarm.uid not in self._uids:
                alarm.callback(alarm.id)
                _log.info("trigger id: %d", alarm.id)
                return True
            _log.info("alarm %d is proxied", alarm.id)
            self._pending.setdefault(alarm.uid, []).append(alarm)
            return False

    def proxy_timer(self, uid: int, is_proxy: bool, need_retrigger: bool) -> bool:
        """Start or stop proxying ``uid``.

        Stopping fails when the uid is not proxied. On stop, withheld timers are
        fired when ``need_retrigger`` is set and dropped otherwise.
        """
        with self._lock:
            if is_proxy:
                self._uids.add(uid)
                return True
            if uid not in self._uids:
                _log.error("uid %d is not in the proxy list", uid)
                return False
            self._uids.discard(uid)
            held = self._pending.pop(uid, [])
            if need_retrigger:
                self._fire(held)
            return True

    def reset_all(self) -> bool:
        """Fire every withheld timer and stop proxying all uids."""
        with self._lock:
            for alarms in self._pending.values():
                self._fire(alarms)
            self._pending.clear()
            self._uids.clear()
            return True

    def remove(self, timer_id: int, uid: int) -> None:
        """Forget withheld occurrences of ``timer_id`` for ``uid``."""
        with self._lock:
            alarms = self._pending.get(uid)
            if alarms is None:
                return
            kept = [alarm for alarm in alarms if alarm.id != timer_id]
            if kept:
                self._pending[uid] = kept
            else:
                del self._pending[uid]

    def pending(self, uid: int) -> list[TimerInfo]:
        """The timers currently withheld for ``uid``."""
        with self._lock:
            return list(self._pending.get(uid, []))

    @staticmethod
    def _fire(alarms: list[TimerInfo]) -> None:
        for alarm in alarms:
            if alarm.callback is None:
                _log.error("proxied timer %d has no callback", alarm.id)
                continue
            alarm.callback(alarm.id)