"""
どこで: `src/boxbreath/core/interpolate.py`。
何を: 権威 tick の間を埋める連続進捗（フェーズ内 0..1）とフェーズ切替パルスを計算する。
なぜ: 1 秒ごとの離散状態を書き換えずに、毎フレームの滑らかな描画を得るため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from boxbreath.core.session import SessionState

PULSE_DURATION_S = 0.5


@dataclass(frozen=True, slots=True)
class FrameSample:
    """1 フレーム分の補間結果。"""

    now: float
    progress: float
    eased_progress: float
    pulse: float


def _clamp01(v: float) -> float:
    return 0.0 if v < 0.0 else 1.0 if v > 1.0 else float(v)


def ease_in_out(p: float) -> float:
    """余弦の ease-in-out（`0.5 - cos(pi * p) / 2`）を返す。"""

    return 0.5 - math.cos(math.pi * _clamp01(p)) / 2.0


def interpolate(state: SessionState, now: float, reduced_motion: bool = False) -> float:
    """現在フェーズ内の線形進捗（0..1）を返す。

    Parameters
    ----------
    reduced_motion : bool
        受け取るだけで進捗には影響しない。動きを抑える設定はパルスと描画側で効かせる。

    Notes
    -----
    `last_tick_timestamp` を毎回の基準にするため、フレーム側の誤差は
    次の tick で自動的に打ち消される。
    実行中でない場合は、完了なら 1、それ以外は 0 に固定する。
    """

    del reduced_motion

    if not state.is_running or state.last_tick_timestamp is None:
        return 1.0 if state.session_complete else 0.0

    d = float(state.phase_duration)
    since_tick = float(now) - float(state.last_tick_timestamp)
    effective_remaining = float(state.phase_remaining) - since_tick
    return _clamp01((d - effective_remaining) / d)


def pulse_intensity(
    state: SessionState,
    now: float,
    reduced_motion: bool = False,
    *,
    duration_s: float = PULSE_DURATION_S,
) -> float:
    """フェーズ切替直後の強調パルス（0..1）を返す。

    描画のスケール変調にだけ使い、状態遷移には関与しない。
    """

    if reduced_motion or state.last_phase_change_timestamp is None:
        return 0.0
    elapsed = float(now) - float(state.last_phase_change_timestamp)
    if elapsed < 0.0 or elapsed >= float(duration_s):
        return 0.0
    return math.sin(math.pi * elapsed / float(duration_s))


def sample_frame(
    state: SessionState,
    now: float,
    reduced_motion: bool = False,
    *,
    pulse_duration_s: float = PULSE_DURATION_S,
) -> FrameSample:
    """進捗・easing 済み進捗・パルスをまとめて返す。"""

    progress = interpolate(state, now, reduced_motion)
    return FrameSample(
        now=float(now),
        progress=progress,
        eased_progress=ease_in_out(progress),
        pulse=pulse_intensity(state, now, reduced_motion, duration_s=pulse_duration_s),
    )


__all__ = [
    "FrameSample",
    "PULSE_DURATION_S",
    "ease_in_out",
    "interpolate",
    "pulse_intensity",
    "sample_frame",
]
