# どこで: `src/boxbreath/interactive/runtime/frame_clock.py`。
# 何を: 権威 tick とフレーム描画が共有する単調増加の時刻源を提供する。
# なぜ: 「通常は実時間」「テストでは手動で進める時刻」を差し替えられるようにするため。

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> float:
        """単調増加の現在時刻（秒）を返す。"""
        ...


class MonotonicClock:
    """実時間ベースの時計。

    Notes
    -----
    `now()` は `perf_counter()` の開始時刻からの差分（秒）。
    """

    def __init__(self, *, start_time: float | None = None) -> None:
        self._start_time = float(time.perf_counter() if start_time is None else start_time)

    def now(self) -> float:
        """現在時刻（秒）を返す。"""

        return float(time.perf_counter() - self._start_time)


class ManualClock:
    """手動で進める時計。

    Notes
    -----
    `now()` は `t0 + advance() の累計`。ヘッドレス実行やテストで、
    tick とフレームの時刻を決定的にするために使う。
    """

    def __init__(self, *, t0: float = 0.0) -> None:
        self._t = float(t0)

    def now(self) -> float:
        return float(self._t)

    def advance(self, dt: float) -> float:
        """時刻を `dt` 秒進め、新しい時刻を返す。"""

        step = float(dt)
        if step < 0:
            raise ValueError("dt は 0 以上である必要がある")
        self._t += step
        return float(self._t)


__all__ = ["Clock", "ManualClock", "MonotonicClock"]
