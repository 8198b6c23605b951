# どこで: `src/boxbreath/interactive/runtime/session_controller.py`。
# 何を: 状態機械・2 つのタイマー（1 秒 tick / フレーム）・コラボレータを束ね、表示層からのコマンドを受ける。
# なぜ: タイマーハンドルをグローバルに置かず 1 つのオブジェクトが所有し、開始/キャンセル規律を 1 箇所に固定するため。

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from boxbreath.core.interpolate import PULSE_DURATION_S, FrameSample, sample_frame
from boxbreath.core.render_plan import DrawPlan, Viewport, plan_frame
from boxbreath.core.session import (
    SessionConfig,
    SessionEffect,
    SessionState,
    SessionStatus,
    parse_time_limit,
)
from boxbreath.core.state_machine import SessionStateMachine
from boxbreath.core.status_view import DEFAULT_PRESETS_MINUTES, StatusView, build_status_view
from boxbreath.interactive.runtime.collaborators import CuePlayer, LoggingPowerHint, NullCuePlayer, PowerHint
from boxbreath.interactive.runtime.frame_clock import Clock
from boxbreath.interactive.runtime.scheduler import ScheduledHandle, Scheduler

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FrameUpdate:
    """表示層へ渡す 1 回分の更新。

    `source` は "tick" / "frame" / "command" のいずれか。
    """

    source: str
    state: SessionState
    status: SessionStatus
    sample: FrameSample
    plan: DrawPlan
    view: StatusView


FrameListener = Callable[[FrameUpdate], None]


class SessionController:
    """1 セッションの実行を制御する。

    Notes
    -----
    - 権威 tick は `call_every(tick_interval_s)` で 1 本だけ持つ。start では必ず旧タイマーを
      取り消してから新しいものを登録する。
    - フレームは `call_later(frame_interval_s)` の単発登録を毎フレーム張り直し、
      実行中でなくなった時点で張り直しをやめる。
    - stop/reset/完了では両方のハンドルを同期的に取り消す。
    - tick とフレームは同じイベントループ上で直列に走るため、ロックは不要。
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler,
        clock: Clock,
        cue_player: CuePlayer | None = None,
        power_hint: PowerHint | None = None,
        config: SessionConfig | None = None,
        viewport: Viewport | None = None,
        reduced_motion: bool = False,
        sound_enabled: bool = False,
        tick_interval_s: float = 1.0,
        frame_interval_s: float = 0.0,
        pulse_duration_s: float = PULSE_DURATION_S,
        presets_minutes: tuple[int, ...] = DEFAULT_PRESETS_MINUTES,
    ) -> None:
        self._scheduler = scheduler
        self._clock = clock
        self._cue_player: CuePlayer = cue_player if cue_player is not None else NullCuePlayer()
        self._power_hint: PowerHint = power_hint if power_hint is not None else LoggingPowerHint()
        self._machine = SessionStateMachine(config)
        self._viewport = viewport if viewport is not None else Viewport(0.0, 0.0, 1.0)
        self._reduced_motion = bool(reduced_motion)
        self._sound_enabled = bool(sound_enabled)
        self._tick_interval_s = float(tick_interval_s)
        self._frame_interval_s = max(0.0, float(frame_interval_s))
        self._pulse_duration_s = float(pulse_duration_s)
        self._presets_minutes = tuple(int(m) for m in presets_minutes)

        self._tick_handle: ScheduledHandle | None = None
        self._frame_handle: ScheduledHandle | None = None
        self._listeners: list[FrameListener] = []
        self._time_limit_text: str | None = None
        self._last_update: FrameUpdate | None = None

    # --- 参照 ---

    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def status(self) -> SessionStatus:
        return self._machine.status

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @property
    def reduced_motion(self) -> bool:
        return self._reduced_motion

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def presets_minutes(self) -> tuple[int, ...]:
        return self._presets_minutes

    @property
    def last_update(self) -> FrameUpdate | None:
        return self._last_update

    @property
    def tick_scheduled(self) -> bool:
        return self._tick_handle is not None and self._tick_handle.active

    @property
    def frame_scheduled(self) -> bool:
        return self._frame_handle is not None and self._frame_handle.active

    def add_listener(self, listener: FrameListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FrameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- コマンド ---

    def start(self, config: SessionConfig | None = None) -> bool:
        """セッションを開始する。開始できなかった場合は False。"""

        now = self._clock.now()
        effects = self._machine.start(config, now)
        if not effects:
            return False
        self._time_limit_text = None
        self._arm_tick_timer()
        self._dispatch(effects)
        self._arm_frame()
        self._publish("command", now)
        return True

    def start_with_preset(self, minutes: int) -> bool:
        """時間制限を `minutes` 分にして開始する。"""

        # 完了後は reset まで設定を書き換えない。
        if self._machine.status not in (SessionStatus.IDLE, SessionStatus.STOPPED):
            return False
        self._machine.set_time_limit(int(minutes))
        return self.start()

    def stop(self) -> bool:
        now = self._clock.now()
        effects = self._machine.stop(now)
        if not effects:
            return False
        self._dispatch(effects)
        self._publish("command", now)
        return True

    def toggle(self) -> bool:
        """実行中なら stop、そうでなければ start する。"""

        if self._machine.is_active:
            return self.stop()
        return self.start()

    def reset(self) -> None:
        now = self._clock.now()
        effects = self._machine.reset(now)
        self._time_limit_text = None
        self._dispatch(effects)
        self._publish("command", now)

    def set_phase_duration(self, seconds: int) -> bool:
        if not self._machine.set_phase_duration(seconds):
            return False
        self._publish("command", self._clock.now())
        return True

    def set_time_limit(self, minutes: int | None) -> bool:
        if not self._machine.set_time_limit(minutes):
            return False
        self._time_limit_text = None
        self._publish("command", self._clock.now())
        return True

    def set_time_limit_text(self, text: str) -> bool:
        """入力欄のテキストから時間制限を設定する（数字以外は捨てる）。"""

        if self._machine.is_active:
            return False
        digits = "".join(ch for ch in str(text) if ch.isdigit())
        self._machine.set_time_limit(parse_time_limit(digits))
        self._time_limit_text = digits
        self._publish("command", self._clock.now())
        return True

    def set_sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = bool(enabled)
        self._publish("command", self._clock.now())

    def set_reduced_motion(self, reduced: bool) -> None:
        self._reduced_motion = bool(reduced)
        self._publish("command", self._clock.now())

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport
        if not self._machine.state.is_running:
            # 実行中は次のフレームで反映されるため、停止中だけ即座に描き直す。
            self._publish("command", self._clock.now())

    def close(self) -> None:
        """タイマーを取り消し、電源ヒントを解放する。"""

        self._cancel_timers()
        self._safe_call(self._power_hint.release, "Failed to release power hint")
        self._listeners.clear()

    # --- タイマー ---

    def _arm_tick_timer(self) -> None:
        self._cancel_tick_timer()
        self._tick_handle = self._scheduler.call_every(self._tick_interval_s, self._on_tick)

    def _arm_frame(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
        self._frame_handle = self._scheduler.call_later(self._frame_interval_s, self._on_frame)

    def _cancel_tick_timer(self) -> None:
        handle = self._tick_handle
        self._tick_handle = None
        if handle is not None:
            handle.cancel()

    def _cancel_timers(self) -> None:
        self._cancel_tick_timer()
        handle = self._frame_handle
        self._frame_handle = None
        if handle is not None:
            handle.cancel()

    def _on_tick(self) -> None:
        if not self._machine.is_active:
            self._cancel_tick_timer()
            return
        now = self._clock.now()
        effects = self._machine.tick(now)
        self._dispatch(effects)
        self._publish("tick", now)

    def _on_frame(self) -> None:
        self._frame_handle = None
        if not self._machine.state.is_running:
            return
        self._publish("frame", self._clock.now())
        if self._machine.state.is_running and self._frame_handle is None:
            self._frame_handle = self._scheduler.call_later(self._frame_interval_s, self._on_frame)

    # --- 副作用 / 通知 ---

    def _dispatch(self, effects: tuple[SessionEffect, ...]) -> None:
        for effect in effects:
            if effect is SessionEffect.HALT_TIMERS:
                self._cancel_timers()
            elif effect is SessionEffect.PLAY_CUE:
                if self._sound_enabled:
                    self._safe_call(self._cue_player.play_cue, "Failed to play cue")
            elif effect is SessionEffect.ACQUIRE_POWER:
                self._safe_call(self._power_hint.acquire, "Failed to acquire power hint")
            elif effect is SessionEffect.RELEASE_POWER:
                self._safe_call(self._power_hint.release, "Failed to release power hint")

    @staticmethod
    def _safe_call(fn: Callable[[], None], message: str) -> None:
        try:
            fn()
        except Exception:
            _logger.exception(message)

    def _publish(self, source: str, now: float) -> None:
        state = self._machine.state
        sample = sample_frame(
            state,
            now,
            self._reduced_motion,
            pulse_duration_s=self._pulse_duration_s,
        )
        plan = plan_frame(state, sample, self._viewport, self._reduced_motion)
        view = build_status_view(
            state,
            sound_enabled=self._sound_enabled,
            time_limit_text=self._time_limit_text,
            presets_minutes=self._presets_minutes,
        )
        update = FrameUpdate(
            source=source,
            state=state,
            status=self._machine.status,
            sample=sample,
            plan=plan,
            view=view,
        )
        self._last_update = update
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception:
                _logger.exception("Frame listener failed")


__all__ = ["FrameListener", "FrameUpdate", "SessionController"]
