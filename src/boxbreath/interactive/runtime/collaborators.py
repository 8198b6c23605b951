# どこで: `src/boxbreath/interactive/runtime/collaborators.py`。
# 何を: 音声キュー（短いサイン音）と電源ヒント（画面スリープ抑止の要求）の差し替え可能な実装を提供する。
# なぜ: 副作用を状態機械から外に出し、失敗しても本体の進行に影響させないため。

from __future__ import annotations

import logging
from typing import Any, Protocol

_logger = logging.getLogger(__name__)

CUE_FREQUENCY_HZ = 528.0
CUE_DURATION_S = 0.15
CUE_GAIN = 0.15


class CuePlayer(Protocol):
    def play_cue(self) -> None:
        """キューを鳴らす（待たない）。"""
        ...


class PowerHint(Protocol):
    def acquire(self) -> None: ...

    def release(self) -> None: ...


class NullCuePlayer:
    """何も鳴らさない CuePlayer。"""

    def play_cue(self) -> None:
        return None


class ToneCuePlayer:
    """pyglet のシンセでサイン音を 1 回鳴らす。

    Notes
    -----
    `pyglet.media` はオーディオドライバのロードを伴うため、初回再生時に遅延 import する。
    失敗はログに残して無視する。
    """

    def __init__(
        self,
        *,
        frequency_hz: float = CUE_FREQUENCY_HZ,
        duration_s: float = CUE_DURATION_S,
        gain: float = CUE_GAIN,
    ) -> None:
        self._frequency_hz = float(frequency_hz)
        self._duration_s = float(duration_s)
        self._gain = float(gain)
        self._source: Any | None = None

    def _tone(self) -> Any:
        if self._source is None:
            from pyglet.media import StaticSource
            from pyglet.media.synthesis import LinearDecayEnvelope, Sine

            # 減衰エンベロープで 0.15 秒の「ポン」という音にする。
            tone = Sine(
                self._duration_s,
                frequency=self._frequency_hz,
                envelope=LinearDecayEnvelope(peak=self._gain),
            )
            self._source = StaticSource(tone)
        return self._source

    def play_cue(self) -> None:
        try:
            self._tone().play()
        except Exception:
            _logger.exception("Error playing cue tone")


class LoggingPowerHint:
    """画面スリープ抑止を要求したことだけを記録する PowerHint。

    デスクトップでは portable な wake lock が無いため、保持状態の管理とログ出力のみ行う。
    """

    def __init__(self) -> None:
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        if self._held:
            return
        self._held = True
        _logger.info("Power hint acquired")

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        _logger.info("Power hint released")


__all__ = [
    "CUE_DURATION_S",
    "CUE_FREQUENCY_HZ",
    "CUE_GAIN",
    "CuePlayer",
    "LoggingPowerHint",
    "NullCuePlayer",
    "PowerHint",
    "ToneCuePlayer",
]
