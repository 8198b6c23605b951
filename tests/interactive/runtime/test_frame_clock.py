import time

import pytest

from boxbreath.interactive.runtime.frame_clock import ManualClock, MonotonicClock


def test_manual_clock_advances_only_when_told():
    clock = ManualClock(t0=1.0)
    assert clock.now() == pytest.approx(1.0)
    assert clock.now() == pytest.approx(1.0)

    assert clock.advance(0.25) == pytest.approx(1.25)
    clock.advance(0.0)
    assert clock.now() == pytest.approx(1.25)


def test_manual_clock_rejects_negative_step():
    clock = ManualClock()
    with pytest.raises(ValueError):
        clock.advance(-0.1)


def test_monotonic_clock_returns_elapsed_seconds():
    start_time = time.perf_counter() - 1.0
    clock = MonotonicClock(start_time=start_time)
    a = clock.now()
    b = clock.now()
    assert 0.5 < a < 1.5
    assert b >= a
