import threading
import time
from datetime import datetime, timedelta

import pytest

from voxelscape.clock import Clock

START = datetime(1920, 5, 1, 12, 0)


def test_default_time_per_tick_is_one_minute():
    clock = Clock(START)
    clock.tick()
    assert clock.current_time == START + timedelta(minutes=1)


def test_tick_notifies_callbacks():
    clock = Clock(START, timedelta(hours=2))
    seen = []
    clock.on_tick(seen.append)
    clock.tick()
    clock.tick()
    assert seen == [START + timedelta(hours=2), START + timedelta(hours=4)]
    assert clock.current_time == seen[-1]


def test_skip_time_returns_new_time_and_notifies():
    clock = Clock(START)
    skips = []
    clock.on_time_skip(lambda before, delta: skips.append((before, delta)))
    delta = timedelta(days=3)
    result = clock.skip_time(delta)
    assert result == START + delta
    assert clock.current_time == result
    assert skips == [(START, delta)]


def test_skip_to_advances_by_current_minus_target():
    clock = Clock(START)
    target = START - timedelta(days=1)
    delta = clock.skip_to(target)
    assert delta == START - target
    assert clock.current_time == START + delta


def test_timer_ticks_and_pauses():
    clock = Clock(START)
    clock.tick_interval = 0.01
    ticked = threading.Event()
    clock.on_tick(lambda _: ticked.set())
    clock.start()
    assert ticked.wait(2.0)

    clock.set_paused(True)
    frozen = clock.current_time
    time.sleep(0.1)
    assert clock.current_time == frozen

    ticked.clear()
    clock.set_paused(False)
    assert ticked.wait(2.0)
    assert clock.current_time > frozen
    clock.set_paused(True)


def test_start_twice_raises():
    clock = Clock(START)
    clock.tick_interval = 10.0
    clock.start()
    with pytest.raises(RuntimeError):
        clock.start()