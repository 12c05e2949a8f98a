import threading
import time

import pytest

from engine.scheduler import TickScheduler


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


def test_start_and_stop():
    calls = []
    sched = TickScheduler(lambda: calls.append(1), name="test")
    sched.start(10)
    assert sched.is_running
    assert wait_for(lambda: len(calls) >= 3)
    sched.stop()
    assert not sched.is_running
    n = len(calls)
    time.sleep(0.05)
    assert len(calls) == n
    assert sched.tick_count == n


def test_no_callback_after_stop_returns():
    started = threading.Event()
    calls = []

    def slow():
        started.set()
        time.sleep(0.05)
        calls.append(1)

    sched = TickScheduler(slow)
    sched.start(5)
    assert started.wait(1.0)
    sched.stop()
    # the in-flight tick completed before stop() returned
    n = len(calls)
    assert n >= 1
    time.sleep(0.05)
    assert len(calls) == n


def test_ticks_never_overlap():
    active = []
    overlaps = []

    def update():
        if active:
            overlaps.append(1)
        active.append(1)
        time.sleep(0.01)
        active.pop()

    sched = TickScheduler(update)
    sched.start(1)
    time.sleep(0.1)
    sched.stop()
    assert not overlaps


def test_start_while_running_is_ignored():
    sched = TickScheduler(lambda: None)
    sched.start(20)
    thread = sched._thread
    sched.start(5)
    assert sched._thread is thread
    assert sched.interval_ms == 20
    sched.stop()


def test_reset_stops_and_calls_hook():
    hook = []
    sched = TickScheduler(lambda: None, on_reset=lambda: hook.append(1))
    sched.start(5)
    assert wait_for(lambda: sched.tick_count > 0)
    sched.reset()
    assert not sched.is_running
    assert sched.tick_count == 0
    assert hook == [1]


def test_stop_from_inside_update():
    calls = []
    holder = {}

    def update():
        calls.append(1)
        holder["sched"].stop()

    sched = TickScheduler(update)
    holder["sched"] = sched
    sched.start(5)
    assert wait_for(lambda: not sched.is_running)
    time.sleep(0.05)
    assert len(calls) == 1


def test_exception_in_update_is_logged_and_loop_continues(caplog):
    calls = []

    def update():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")

    sched = TickScheduler(update, name="faulty")
    sched.start(5)
    assert wait_for(lambda: len(calls) >= 3)
    sched.stop()
    assert "Exception in scheduler faulty loop" in caplog.text


def test_invalid_interval():
    sched = TickScheduler(lambda: None)
    with pytest.raises(ValueError):
        sched.start(0)
    assert not sched.is_running


def test_stop_when_never_started():
    sched = TickScheduler(lambda: None)
    sched.stop()
    assert not sched.is_running
