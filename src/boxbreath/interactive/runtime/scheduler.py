# どこで: `src/boxbreath/interactive/runtime/scheduler.py`。
# 何を: 権威 tick（周期）とフレーム（単発の再スケジュール）を、個別にキャンセルできるハンドルで登録する。
# なぜ: 2 つのタイマーの開始/キャンセル規律を明示し、キャンセル後に古いコールバックが状態を触らないようにするため。

from __future__ import annotations

from typing import Callable, Protocol

import pyglet


class ScheduledHandle:
    """スケジュール済みコールバック 1 件のハンドル。

    `cancel()` は冪等。キャンセル後（または単発の発火後）は `active` が False になる。
    """

    def __init__(self) -> None:
        self._active = True
        self._unschedule: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def _bind(self, unschedule: Callable[[], None]) -> None:
        self._unschedule = unschedule

    def _finish(self) -> None:
        self._active = False
        self._unschedule = None

    def cancel(self) -> None:
        """登録を同期的に取り消す。"""

        if not self._active:
            return
        unschedule = self._unschedule
        self._finish()
        if unschedule is not None:
            unschedule()


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledHandle:
        """`interval` 秒ごとに `callback()` を呼ぶ。"""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        """`delay` 秒後（0 なら次のループ周回）に 1 回だけ `callback()` を呼ぶ。"""
        ...


class PygletScheduler:
    """`pyglet.clock` を使う Scheduler 実装。

    Notes
    -----
    pyglet の `unschedule` は関数単位で外すため、登録ごとに専用のクロージャを作る。
    さらにクロージャ側でもハンドルの active を確認し、取り消し後の発火を握りつぶす。
    """

    def __init__(self, clock: pyglet.clock.Clock | None = None) -> None:
        self._clock = clock if clock is not None else pyglet.clock.get_default()

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledHandle:
        period = float(interval)
        if period <= 0:
            raise ValueError(f"interval は正の値である必要がある: got={interval!r}")
        handle = ScheduledHandle()

        def _fire(_dt: float) -> None:
            if handle.active:
                callback()

        self._clock.schedule_interval(_fire, period)
        handle._bind(lambda: self._clock.unschedule(_fire))
        return handle

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle:
        handle = ScheduledHandle()

        def _fire(_dt: float) -> None:
            if not handle.active:
                return
            handle._finish()
            callback()

        self._clock.schedule_once(_fire, max(0.0, float(delay)))
        handle._bind(lambda: self._clock.unschedule(_fire))
        return handle


__all__ = ["PygletScheduler", "ScheduledHandle", "Scheduler"]
