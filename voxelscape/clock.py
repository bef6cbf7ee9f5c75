"""A game clock that advances the in-game time once per timer interval."""

from __future__ import annotations

import logging
import threading
import time
import weakref
from datetime import datetime, timedelta
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[datetime], None]
SkipCallback = Callable[[datetime, timedelta], None]


class Clock:
    """In-game time that moves forward by ``time_per_tick`` on every tick.

    After :meth:`start` a background timer ticks the clock every
    ``tick_interval`` real seconds unless the clock is paused.
    """

    TICK_INTERVAL = 1.0

    def __init__(
        self,
        current_time: datetime = datetime.min,
        time_per_tick: timedelta = timedelta(minutes=1),
    ) -> None:
        self.current_time = current_time
        self.time_per_tick = time_per_tick
        self.tick_interval = self.TICK_INTERVAL
        self._tick_callbacks: List[TickCallback] = []
        self._skip_callbacks: List[SkipCallback] = []
        self._lock = threading.RLock()
        self._paused = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the repeating timer that ticks the clock."""
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("the clock has already been started")
            self._thread = threading.Thread(
                target=Clock._run, args=(weakref.ref(self),), name="clock", daemon=True
            )
            self._thread.start()

    @staticmethod
    def _run(ref: "weakref.ReferenceType[Clock]") -> None:
        while True:
            clock = ref()
            if clock is None:
                return
            interval = clock.tick_interval
            del clock
            time.sleep(interval)
            clock = ref()
            if clock is None:
                return
            clock._timer_fired()
            del clock

    def _timer_fired(self) -> None:
        with self._lock:
            if not self._paused:
                self.tick()

    def tick(self) -> None:
        """Advance by ``time_per_tick`` and notify the tick callbacks."""
        with self._lock:
            self.current_time += self.time_per_tick
            now = self.current_time
            logger.debug("clock time: %s", now)
            for callback in list(self._tick_callbacks):
                callback(now)

    def set_paused(self, paused: bool = True) -> None:
        """Pause or resume the timer."""
        with self._lock:
            self._paused = paused

    def skip_time(self, delta: timedelta) -> datetime:
        """Jump forward by ``delta``, notify the skip callbacks, return the new time."""
        with self._lock:
            before = self.current_time
            self.current_time += delta
            now = self.current_time
            for callback in list(self._skip_callbacks):
                callback(before, delta)
            return now

    def skip_to(self, target: datetime) -> timedelta:
        """Skip by the current time minus ``target`` and return that span."""
        with self._lock:
            delta = self.current_time - target
            self.skip_time(delta)
            return delta

    def on_tick(self, callback: TickCallback) -> TickCallback:
        """Call ``callback(new_time)`` after every tick."""
        with self._lock:
            self._tick_callbacks.append(callback)
        return callback

    def on_time_skip(self, callback: SkipCallback) -> SkipCallback:
        """Call ``callback(time_before_skip, skipped)`` after every skip."""
        with self._lock:
            self._skip_callbacks.append(callback)
        return callback