"""
どこで: `src/boxbreath/core/session.py`。
何を: セッション設定・正準状態・状態機械の出力（副作用要求）の値型を定義する。
なぜ: 状態機械/補間/描画計画/表示が同じ不変スナップショットを共有できるようにするため。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum

MIN_PHASE_DURATION_S = 3
MAX_PHASE_DURATION_S = 6
DEFAULT_PHASE_DURATION_S = 4
PHASE_COUNT = 4


class Phase(IntEnum):
    """1 サイクルを構成する 4 つのフェーズ（値は phase_index）。"""

    INHALE = 0
    HOLD = 1
    EXHALE = 2
    WAIT = 3

    @property
    def label(self) -> str:
        return _PHASE_LABELS[int(self)]


_PHASE_LABELS = ("Inhale", "Hold", "Exhale", "Wait")


class SessionStatus(Enum):
    """状態機械の論理状態。"""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETING = "completing"
    COMPLETE = "complete"
    STOPPED = "stopped"


class SessionEffect(Enum):
    """状態遷移に伴ってコラボレータへ通知すべき副作用。

    状態機械は副作用を直接実行せず、遷移ごとにこの列を返す。
    """

    PLAY_CUE = "play_cue"
    ACQUIRE_POWER = "acquire_power"
    RELEASE_POWER = "release_power"
    HALT_TIMERS = "halt_timers"


def clamp_phase_duration(seconds: object) -> int:
    """フェーズ秒数を `int()` 化し 3..6 に clamp して返す。"""

    s = int(seconds)  # type: ignore[call-overload]
    if s < MIN_PHASE_DURATION_S:
        return MIN_PHASE_DURATION_S
    if s > MAX_PHASE_DURATION_S:
        return MAX_PHASE_DURATION_S
    return s


def parse_time_limit(text: str | int | None) -> int | None:
    """入力欄のテキストから時間制限（分）を得る。

    Notes
    -----
    数字以外の文字は捨てる。数字が 1 文字も残らなければ制限なし（None）。
    """

    if text is None:
        return None
    if isinstance(text, int):
        return text if text >= 0 else None
    digits = re.sub(r"[^0-9]", "", str(text))
    if not digits:
        return None
    return int(digits)


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """1 セッション分の不変パラメータ。

    Parameters
    ----------
    phase_duration_seconds : int
        各フェーズの秒数（3..6）。
    time_limit_minutes : int | None
        セッション時間制限（分）。None は無制限。0 は「開始直後に到達」を意味する。

    Raises
    ------
    ValueError
        範囲外の値が渡された場合。
    """

    phase_duration_seconds: int = DEFAULT_PHASE_DURATION_S
    time_limit_minutes: int | None = None

    def __post_init__(self) -> None:
        d = int(self.phase_duration_seconds)
        if not MIN_PHASE_DURATION_S <= d <= MAX_PHASE_DURATION_S:
            raise ValueError(
                f"phase_duration_seconds は {MIN_PHASE_DURATION_S}..{MAX_PHASE_DURATION_S} "
                f"である必要がある: got={self.phase_duration_seconds!r}"
            )
        limit = self.time_limit_minutes
        if limit is not None and int(limit) < 0:
            raise ValueError(f"time_limit_minutes は 0 以上である必要がある: got={limit!r}")

    @property
    def time_limit_seconds(self) -> int | None:
        if self.time_limit_minutes is None:
            return None
        return int(self.time_limit_minutes) * 60


@dataclass(frozen=True, slots=True)
class SessionState:
    """セッションの正準状態（不変スナップショット）。

    状態機械だけが新しいインスタンスへ差し替える。
    フレーム描画側はこのスナップショットを読むだけで、書き換えない。
    """

    config: SessionConfig = field(default_factory=SessionConfig)
    is_running: bool = False
    has_started: bool = False
    phase_index: int = 0
    phase_remaining: int = DEFAULT_PHASE_DURATION_S
    elapsed_total_seconds: int = 0
    time_limit_reached: bool = False
    session_complete: bool = False
    last_tick_timestamp: float | None = None
    last_phase_change_timestamp: float | None = None

    @property
    def phase(self) -> Phase:
        return Phase(self.phase_index)

    @property
    def phase_duration(self) -> int:
        return int(self.config.phase_duration_seconds)

    @classmethod
    def idle(cls, config: SessionConfig) -> "SessionState":
        """開始前（または停止後）の既定状態を返す。"""

        return cls(config=config, phase_remaining=int(config.phase_duration_seconds))


__all__ = [
    "DEFAULT_PHASE_DURATION_S",
    "MAX_PHASE_DURATION_S",
    "MIN_PHASE_DURATION_S",
    "PHASE_COUNT",
    "Phase",
    "SessionConfig",
    "SessionEffect",
    "SessionState",
    "SessionStatus",
    "clamp_phase_duration",
    "parse_time_limit",
]
