"""
どこで: `src/boxbreath/core/path.py`。
何を: 宣言的なパスコマンド（move / line / quad）と、その折れ線への平坦化を提供する。
なぜ: 描画計画を純粋データに保ちつつ、レンダラー側は折れ線だけ描ければ済むようにするため。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import numpy as np

Point = tuple[float, float]
PathOp = Literal["move", "line", "quad"]


@dataclass(frozen=True, slots=True)
class PathCommand:
    """パスの 1 コマンド。

    Notes
    -----
    - `move`: `points=(p,)` で現在点を移動する。
    - `line`: `points=(p,)` で現在点から直線を引く。
    - `quad`: `points=(control, end)` で 2 次ベジェを引く。
    """

    op: PathOp
    points: tuple[Point, ...]


def move_to(x: float, y: float) -> PathCommand:
    return PathCommand("move", ((float(x), float(y)),))


def line_to(x: float, y: float) -> PathCommand:
    return PathCommand("line", ((float(x), float(y)),))


def quad_to(cx: float, cy: float, x: float, y: float) -> PathCommand:
    return PathCommand("quad", ((float(cx), float(cy)), (float(x), float(y))))


def rounded_rect(x: float, y: float, w: float, h: float, r: float) -> tuple[PathCommand, ...]:
    """角丸長方形の閉じたパスを返す（y 軸下向き）。"""

    return (
        move_to(x + r, y),
        line_to(x + w - r, y),
        quad_to(x + w, y, x + w, y + r),
        line_to(x + w, y + h - r),
        quad_to(x + w, y + h, x + w - r, y + h),
        line_to(x + r, y + h),
        quad_to(x, y + h, x, y + h - r),
        line_to(x, y + r),
        quad_to(x, y, x + r, y),
    )


def _quad_points(p0: np.ndarray, c: np.ndarray, p1: np.ndarray, segments: int) -> np.ndarray:
    t = np.linspace(0.0, 1.0, int(segments) + 1, dtype=np.float64)[1:, None]
    u = 1.0 - t
    return u * u * p0 + 2.0 * u * t * c + t * t * p1


def flatten_path(commands: Sequence[PathCommand], *, quad_segments: int = 8) -> list[np.ndarray]:
    """パスを折れ線（`(N, 2)` float64 配列）のリストへ平坦化する。

    `move` ごとに新しい折れ線を開始する。点が 1 つしかない折れ線も返す
    （線幅 + round cap の描画で点として見えるため）。
    """

    if int(quad_segments) < 1:
        raise ValueError("quad_segments は 1 以上である必要がある")

    polylines: list[np.ndarray] = []
    current: list[np.ndarray] = []

    for cmd in commands:
        if cmd.op == "move":
            if current:
                polylines.append(np.vstack(current))
            current = [np.asarray([cmd.points[0]], dtype=np.float64)]
            continue
        if not current:
            # move 無しで始まる場合は原点から描く。
            current = [np.zeros((1, 2), dtype=np.float64)]
        last = current[-1][-1]
        if cmd.op == "line":
            current.append(np.asarray([cmd.points[0]], dtype=np.float64))
        elif cmd.op == "quad":
            control = np.asarray(cmd.points[0], dtype=np.float64)
            end = np.asarray(cmd.points[1], dtype=np.float64)
            current.append(_quad_points(last, control, end, int(quad_segments)))
        else:
            raise ValueError(f"未知のパスコマンドです: {cmd.op!r}")

    if current:
        polylines.append(np.vstack(current))
    return polylines


__all__ = ["PathCommand", "Point", "flatten_path", "line_to", "move_to", "quad_to", "rounded_rect"]
