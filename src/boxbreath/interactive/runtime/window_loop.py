# どこで: `src/boxbreath/interactive/runtime/window_loop.py`。
# 何を: pyglet のウィンドウを 1 つの app loop（`pyglet.app.run()`）で回す最小ランナーを提供する。
# なぜ: OS 依存のイベント配送を pyglet に任せ、セッションのタイマーと描画を同じ clock 上で直列に回すため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import pyglet


@dataclass(frozen=True, slots=True)
class WindowTask:
    """1つの pyglet window と「flip しない描画関数」を束ねる。"""

    # 注: pyglet の Window 型は環境/バージョン差があるため Any に寄せる。
    window: Any

    # 1フレーム分の描画処理（back buffer へ描くだけ）。
    draw_frame: Callable[[], None]


class WindowLoop:
    """ウィンドウを閉じるまで描画を回す。

    セッションの tick / フレーム更新は controller が同じ `pyglet.clock` に登録するため、
    ここでは「描く頻度」だけを管理する。
    """

    def __init__(self, tasks: list[WindowTask], *, fps: float) -> None:
        """ループを初期化する。

        Parameters
        ----------
        tasks : list[WindowTask]
            1 フレームごとに描画したいウィンドウと描画処理。
        fps : float
            目標フレームレート。`<=0` の場合はスロットリングしない。
        """

        self._tasks = list(tasks)
        self._fps = float(fps)

    def run(self) -> None:
        """ウィンドウが閉じられるまでループを実行する。"""

        tasks = list(self._tasks)

        def request_exit(*_: object) -> None:
            pyglet.app.exit()

        for task in tasks:
            task.window.push_handlers(on_close=request_exit, on_draw=task.draw_frame)

        def draw_all(dt: float) -> None:
            for task in tasks:
                # 閉じられたウィンドウへ draw すると例外になり得るため、開いているものだけ描く。
                if task.window not in pyglet.app.windows:
                    continue
                task.window.draw(dt)

        if self._fps <= 0:
            pyglet.clock.schedule(draw_all)
        else:
            pyglet.clock.schedule_interval(draw_all, 1.0 / float(self._fps))

        try:
            pyglet.app.run(interval=None)
        finally:
            pyglet.clock.unschedule(draw_all)


__all__ = ["WindowLoop", "WindowTask"]
