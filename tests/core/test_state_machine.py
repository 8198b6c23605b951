from __future__ import annotations

from dataclasses import replace

import pytest

from boxbreath.core.session import (
    Phase,
    SessionConfig,
    SessionEffect,
    SessionState,
    SessionStatus,
    clamp_phase_duration,
    parse_time_limit,
)
from boxbreath.core.state_machine import SessionStateMachine


def _tick_n(machine: SessionStateMachine, n: int, *, t0: float = 0.0) -> list[tuple[SessionEffect, ...]]:
    return [machine.tick(t0 + float(i + 1)) for i in range(n)]


def _without_timestamps(state: SessionState) -> SessionState:
    return replace(state, last_tick_timestamp=None, last_phase_change_timestamp=None)


@pytest.mark.parametrize("duration", [3, 4, 5, 6])
def test_start_enters_first_phase_with_full_countdown(duration: int) -> None:
    machine = SessionStateMachine()
    effects = machine.start(SessionConfig(phase_duration_seconds=duration), 10.0)

    s = machine.state
    assert machine.status is SessionStatus.RUNNING
    assert s.is_running and s.has_started
    assert s.phase_index == 0
    assert s.phase_remaining == duration
    assert s.elapsed_total_seconds == 0
    assert s.last_tick_timestamp == 10.0
    assert s.last_phase_change_timestamp == 10.0
    assert effects == (SessionEffect.PLAY_CUE, SessionEffect.ACQUIRE_POWER)


@pytest.mark.parametrize("duration", [3, 4, 5, 6])
def test_duration_ticks_advance_to_hold(duration: int) -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=duration), 0.0)

    effects = _tick_n(machine, duration)

    s = machine.state
    assert s.phase_index == int(Phase.HOLD)
    assert s.phase_remaining == duration
    assert s.elapsed_total_seconds == duration
    assert s.time_limit_reached is False
    # キュー音はフェーズ境界の tick だけで鳴る。
    assert [SessionEffect.PLAY_CUE in e for e in effects] == [False] * (duration - 1) + [True]
    assert s.last_phase_change_timestamp == float(duration)


def test_countdown_decrements_between_boundaries() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=4), 0.0)

    machine.tick(1.0)
    assert machine.state.phase_remaining == 3
    assert machine.state.last_tick_timestamp == 1.0
    assert machine.state.last_phase_change_timestamp == 0.0


def test_phase_wraps_after_wait_without_limit() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3), 0.0)

    _tick_n(machine, 12)

    s = machine.state
    assert s.phase_index == int(Phase.INHALE)
    assert s.phase_remaining == 3
    assert s.elapsed_total_seconds == 12
    assert machine.status is SessionStatus.RUNNING


def test_zero_minute_limit_completes_when_wait_begins() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=4, time_limit_minutes=0), 0.0)

    _tick_n(machine, 11)
    s = machine.state
    assert s.is_running is True
    assert s.session_complete is False
    assert s.time_limit_reached is True
    assert s.phase_index == int(Phase.EXHALE)
    assert s.phase_remaining == 1
    assert machine.status is SessionStatus.COMPLETING

    effects = machine.tick(12.0)
    s = machine.state
    assert s.session_complete is True
    assert s.is_running is False
    assert s.has_started is False
    assert s.phase_index == int(Phase.WAIT)
    assert s.phase_remaining == 4
    assert s.elapsed_total_seconds == 12
    assert s.last_phase_change_timestamp == 12.0
    assert machine.status is SessionStatus.COMPLETE
    assert effects == (SessionEffect.PLAY_CUE, SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER)


def test_limit_reached_mid_cycle_runs_until_wait_begins() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3, time_limit_minutes=1), 0.0)

    # 60 tick 目で制限に到達。3 秒 x 4 = 12 秒周期なので 60 はちょうどサイクル境界。
    _tick_n(machine, 59)
    assert machine.state.time_limit_reached is False
    machine.tick(60.0)
    assert machine.state.time_limit_reached is True
    assert machine.state.phase_index == int(Phase.INHALE)
    assert machine.state.is_running is True

    # Inhale / Hold / Exhale の 9 tick を走り、Wait に入る tick で終わる。
    _tick_n(machine, 8, t0=60.0)
    assert machine.state.is_running is True
    assert machine.state.phase_index == int(Phase.EXHALE)
    machine.tick(69.0)
    assert machine.state.session_complete is True
    assert machine.state.phase_index == int(Phase.WAIT)
    assert machine.state.elapsed_total_seconds == 69


def test_wait_without_limit_reached_keeps_running() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3, time_limit_minutes=1), 0.0)

    _tick_n(machine, 9)
    assert machine.state.phase_index == int(Phase.WAIT)
    assert machine.state.session_complete is False
    assert machine.status is SessionStatus.RUNNING


def test_time_limit_reached_is_monotonic() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3, time_limit_minutes=0), 0.0)

    seen: list[bool] = []
    for i in range(12):
        machine.tick(float(i + 1))
        seen.append(machine.state.time_limit_reached)
    assert seen == sorted(seen)
    assert all(seen)


def test_stop_is_idempotent_and_keeps_config() -> None:
    machine = SessionStateMachine()
    cfg = SessionConfig(phase_duration_seconds=5, time_limit_minutes=2)
    machine.start(cfg, 0.0)
    _tick_n(machine, 3)

    first = machine.stop(3.5)
    snapshot = machine.state
    second = machine.stop(4.0)

    assert first == (SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER)
    assert second == ()
    assert machine.state == snapshot
    assert machine.status is SessionStatus.STOPPED
    assert snapshot.is_running is False
    assert snapshot.phase_remaining == 5
    assert snapshot.config == cfg


def test_start_reset_start_reproduces_initial_state() -> None:
    machine = SessionStateMachine()
    cfg = SessionConfig(phase_duration_seconds=6)

    machine.start(cfg, 1.0)
    first = machine.state
    _tick_n(machine, 7, t0=1.0)
    machine.reset(9.0)
    machine.start(cfg, 20.0)

    assert _without_timestamps(machine.state) == _without_timestamps(first)


def test_tick_is_noop_when_idle() -> None:
    machine = SessionStateMachine()
    before = machine.state

    assert machine.tick(1.0) == ()
    assert machine.state == before
    assert machine.status is SessionStatus.IDLE


def test_tick_is_noop_after_completion() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3, time_limit_minutes=0), 0.0)
    _tick_n(machine, 12)
    assert machine.status is SessionStatus.COMPLETE
    done = machine.state

    assert machine.tick(13.0) == ()
    assert machine.state == done


def test_start_requires_reset_after_completion() -> None:
    machine = SessionStateMachine()
    machine.start(SessionConfig(phase_duration_seconds=3, time_limit_minutes=0), 0.0)
    _tick_n(machine, 12)

    assert machine.start(None, 13.0) == ()
    assert machine.status is SessionStatus.COMPLETE

    assert machine.reset(14.0) == (SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER)
    assert machine.status is SessionStatus.IDLE
    assert machine.config.time_limit_minutes is None
    assert machine.config.phase_duration_seconds == 3
    assert machine.start(None, 15.0) != ()


def test_start_while_running_is_ignored() -> None:
    machine = SessionStateMachine()
    machine.start(None, 0.0)
    machine.tick(1.0)
    before = machine.state

    assert machine.start(SessionConfig(phase_duration_seconds=6), 1.5) == ()
    assert machine.state == before


def test_set_phase_duration_clamps_and_resets_countdown_when_idle() -> None:
    machine = SessionStateMachine()

    assert machine.set_phase_duration(10) is True
    assert machine.config.phase_duration_seconds == 6
    assert machine.state.phase_remaining == 6

    assert machine.set_phase_duration(1) is True
    assert machine.config.phase_duration_seconds == 3
    assert machine.state.phase_remaining == 3


def test_set_phase_duration_is_ignored_while_running() -> None:
    machine = SessionStateMachine(SessionConfig(phase_duration_seconds=4))
    machine.start(None, 0.0)
    machine.tick(1.0)

    assert machine.set_phase_duration(6) is False
    assert machine.state.phase_remaining == 3
    assert machine.state.config.phase_duration_seconds == 4


def test_set_time_limit_only_applies_when_not_running() -> None:
    machine = SessionStateMachine()
    assert machine.set_time_limit(5) is True
    assert machine.config.time_limit_minutes == 5

    machine.start(None, 0.0)
    assert machine.state.config.time_limit_minutes == 5
    assert machine.set_time_limit(None) is False
    assert machine.config.time_limit_minutes == 5


def test_session_config_rejects_out_of_range_values() -> None:
    with pytest.raises(ValueError):
        SessionConfig(phase_duration_seconds=2)
    with pytest.raises(ValueError):
        SessionConfig(phase_duration_seconds=7)
    with pytest.raises(ValueError):
        SessionConfig(time_limit_minutes=-1)
    assert SessionConfig(time_limit_minutes=3).time_limit_seconds == 180
    assert SessionConfig().time_limit_seconds is None


def test_duration_and_limit_input_helpers() -> None:
    assert clamp_phase_duration("5") == 5
    assert clamp_phase_duration(0) == 3
    assert clamp_phase_duration(99) == 6

    assert parse_time_limit("") is None
    assert parse_time_limit(None) is None
    assert parse_time_limit("1a2") == 12
    assert parse_time_limit("abc") is None
    assert parse_time_limit(0) == 0
    assert parse_time_limit(-3) is None


def test_phase_labels() -> None:
    assert [p.label for p in Phase] == ["Inhale", "Hold", "Exhale", "Wait"]
