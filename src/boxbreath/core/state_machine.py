"""
どこで: `src/boxbreath/core/state_machine.py`。
何を: フェーズ/セッションの離散状態機械（1 秒ごとの権威 tick と start/stop/reset）を提供する。
なぜ: タイマーや音声・電源ヒントから切り離し、状態遷移を単体でテストできるようにするため。
"""

from __future__ import annotations

from dataclasses import replace

from boxbreath.core.session import (
    PHASE_COUNT,
    Phase,
    SessionConfig,
    SessionEffect,
    SessionState,
    SessionStatus,
    clamp_phase_duration,
)

_Effects = tuple[SessionEffect, ...]

_ACTIVE = (SessionStatus.RUNNING, SessionStatus.COMPLETING)


class SessionStateMachine:
    """正準 `SessionState` を唯一所有し、遷移させる。

    Notes
    -----
    各コマンドは現在時刻 `now`（単調増加秒）を明示的に受け取り、
    呼び出し側が実行すべき `SessionEffect` の tuple を返す。
    無効なコマンド（Idle 中の tick など）は no-op で、空 tuple を返す。
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        cfg = config if config is not None else SessionConfig()
        self._config = cfg
        self._state = SessionState.idle(cfg)
        self._status = SessionStatus.IDLE

    @property
    def state(self) -> SessionState:
        """現在の不変スナップショットを返す。"""

        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def config(self) -> SessionConfig:
        """次回 start で使われる設定を返す。"""

        return self._config

    @property
    def is_active(self) -> bool:
        return self._status in _ACTIVE

    def start(self, config: SessionConfig | None, now: float) -> _Effects:
        """Idle/Stopped から Running へ遷移する。

        Parameters
        ----------
        config : SessionConfig | None
            このセッションの設定。None の場合は現在の設定を使う。
        now : float
            単調増加の現在時刻（秒）。両タイムスタンプの起点になる。
        """

        if self._status not in (SessionStatus.IDLE, SessionStatus.STOPPED):
            return ()

        cfg = config if config is not None else self._config
        self._config = cfg
        t = float(now)
        self._state = SessionState(
            config=cfg,
            is_running=True,
            has_started=True,
            phase_index=int(Phase.INHALE),
            phase_remaining=int(cfg.phase_duration_seconds),
            elapsed_total_seconds=0,
            time_limit_reached=False,
            session_complete=False,
            last_tick_timestamp=t,
            last_phase_change_timestamp=t,
        )
        self._status = SessionStatus.RUNNING
        return (SessionEffect.PLAY_CUE, SessionEffect.ACQUIRE_POWER)

    def stop(self, now: float) -> _Effects:
        """Running/Completing から Stopped へ遷移する（設定は保持）。"""

        del now
        if self._status not in _ACTIVE:
            return ()

        self._state = SessionState.idle(self._config)
        self._status = SessionStatus.STOPPED
        return (SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER)

    def reset(self, now: float) -> _Effects:
        """任意の状態から Idle へ戻す。

        stop と違い、時間制限の設定も消す（フェーズ秒数は保持）。
        """

        del now
        self._config = replace(self._config, time_limit_minutes=None)
        self._state = SessionState.idle(self._config)
        self._status = SessionStatus.IDLE
        return (SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER)

    def tick(self, now: float) -> _Effects:
        """権威 tick を 1 回分進める。"""

        if self._status not in _ACTIVE:
            return ()

        s = self._state
        t = float(now)
        effects: list[SessionEffect] = []

        elapsed = s.elapsed_total_seconds + 1
        limit_reached = s.time_limit_reached
        limit_s = s.config.time_limit_seconds
        if limit_s is not None and not limit_reached and elapsed >= limit_s:
            limit_reached = True

        phase_index = s.phase_index
        remaining = s.phase_remaining
        phase_changed_at = s.last_phase_change_timestamp
        complete = False

        if remaining == 1:
            effects.append(SessionEffect.PLAY_CUE)
            phase_changed_at = t
            phase_index = (phase_index + 1) % PHASE_COUNT
            remaining = s.phase_duration
            # 制限超過後は Wait に入った時点でセッションを終える。
            complete = phase_index == int(Phase.WAIT) and limit_reached
        else:
            remaining -= 1

        self._state = replace(
            s,
            is_running=not complete,
            has_started=not complete,
            phase_index=phase_index,
            phase_remaining=remaining,
            elapsed_total_seconds=elapsed,
            time_limit_reached=limit_reached,
            session_complete=complete,
            last_tick_timestamp=t,
            last_phase_change_timestamp=phase_changed_at,
        )

        if complete:
            self._status = SessionStatus.COMPLETE
            effects.extend((SessionEffect.HALT_TIMERS, SessionEffect.RELEASE_POWER))
        elif limit_reached:
            self._status = SessionStatus.COMPLETING
        return tuple(effects)

    def set_phase_duration(self, seconds: int) -> bool:
        """フェーズ秒数を変更する（実行中は無視）。

        Returns
        -------
        bool
            変更を受け付けた場合 True。
        """

        if self.is_active:
            return False
        d = clamp_phase_duration(seconds)
        self._config = replace(self._config, phase_duration_seconds=d)
        self._state = replace(self._state, config=self._config, phase_remaining=d)
        return True

    def set_time_limit(self, minutes: int | None) -> bool:
        """時間制限（分）を変更する（実行中は無視）。"""

        if self.is_active:
            return False
        if minutes is not None and int(minutes) < 0:
            minutes = None
        self._config = replace(self._config, time_limit_minutes=minutes)
        self._state = replace(self._state, config=self._config)
        return True


__all__ = ["SessionStateMachine"]
