from __future__ import annotations

import pyglet
import pytest

from boxbreath.interactive.runtime.frame_clock import ManualClock
from boxbreath.interactive.runtime.scheduler import PygletScheduler, ScheduledHandle


def _scheduler() -> tuple[PygletScheduler, pyglet.clock.Clock, ManualClock]:
    manual = ManualClock()
    clock = pyglet.clock.Clock(time_function=manual.now)
    return PygletScheduler(clock), clock, manual


def test_call_every_fires_until_cancelled() -> None:
    scheduler, clock, manual = _scheduler()
    calls: list[float] = []

    handle = scheduler.call_every(1.0, lambda: calls.append(manual.now()))
    assert handle.active is True

    manual.advance(1.5)
    clock.tick()
    assert len(calls) >= 1

    handle.cancel()
    fired = len(calls)
    manual.advance(5.0)
    clock.tick()
    assert len(calls) == fired
    assert handle.active is False


def test_call_later_fires_once() -> None:
    scheduler, clock, manual = _scheduler()
    calls: list[str] = []

    handle = scheduler.call_later(0.0, lambda: calls.append("frame"))
    manual.advance(0.01)
    clock.tick()
    manual.advance(1.0)
    clock.tick()

    assert calls == ["frame"]
    assert handle.active is False


def test_cancelled_call_later_never_fires() -> None:
    scheduler, clock, manual = _scheduler()
    calls: list[str] = []

    handle = scheduler.call_later(0.5, lambda: calls.append("frame"))
    handle.cancel()
    handle.cancel()
    manual.advance(2.0)
    clock.tick()

    assert calls == []


def test_call_every_rejects_non_positive_interval() -> None:
    scheduler, _clock, _manual = _scheduler()
    with pytest.raises(ValueError):
        scheduler.call_every(0.0, lambda: None)


def test_handle_cancel_runs_unschedule_once() -> None:
    handle = ScheduledHandle()
    seen: list[int] = []
    handle._bind(lambda: seen.append(1))

    handle.cancel()
    handle.cancel()
    assert seen == [1]
