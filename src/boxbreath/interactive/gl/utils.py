from __future__ import annotations

# どこで: `src/boxbreath/interactive/gl/utils.py`。
# 何を: 描画で使う小さなユーティリティ（座標反転・グラデーション近似・線形グラデーション）を提供する。
# なぜ: renderer から GL 非依存の計算を切り出し、座標系の定義を一箇所に集約するため。

import numpy as np

from boxbreath.core.palette import ColorRGBA
from boxbreath.core.render_plan import RadialGradient


def flip_y(points: "np.ndarray", height: float) -> "np.ndarray":
    """y 軸下向きの `(N, 2)` 座標を、y 軸上向き（pyglet）へ変換して返す。"""

    out = np.array(points, dtype=np.float64, copy=True)
    out[:, 1] = float(height) - out[:, 1]
    return out


def gradient_color_at(gradient: RadialGradient, t: float) -> ColorRGBA:
    """グラデーション上の位置 `t`（0..1）の色を線形補間で返す。"""

    stops = gradient.stops
    if not stops:
        return (0.0, 0.0, 0.0, 0.0)
    tt = float(t)
    if tt <= stops[0].offset:
        return stops[0].color
    for a, b in zip(stops, stops[1:]):
        if tt <= b.offset:
            span = float(b.offset - a.offset)
            w = 0.0 if span <= 0 else (tt - float(a.offset)) / span
            ca = np.asarray(a.color, dtype=np.float64)
            cb = np.asarray(b.color, dtype=np.float64)
            c = ca + (cb - ca) * w
            return float(c[0]), float(c[1]), float(c[2]), float(c[3])
    return stops[-1].color


def radial_layers(gradient: RadialGradient, *, bands: int = 12) -> list[tuple[float, ColorRGBA]]:
    """放射グラデーションを、外側から重ねる同心円（半径, 色）の列に近似する。

    Notes
    -----
    半径 ρ の画素は ρ 以上の円すべてに覆われる。各円の alpha を隣接する帯の
    alpha 差にすると、重ねた合計がおおむね目標の alpha になる。
    """

    n = max(1, int(bands))
    ts = np.linspace(0.0, 1.0, n + 1)
    colors = [gradient_color_at(gradient, float(t)) for t in ts]
    inner = float(gradient.inner_radius)
    outer = float(gradient.outer_radius)

    layers: list[tuple[float, ColorRGBA]] = []
    for k in range(n, 0, -1):
        radius = inner + (outer - inner) * float(ts[k])
        r, g, b, a_in = colors[k - 1]
        alpha = float(a_in) - float(colors[k][3])
        if alpha <= 0.0 or radius <= 0.0:
            continue
        layers.append((radius, (r, g, b, alpha)))
    return layers


def linear_gradient_colors(
    points: "np.ndarray",
    *,
    origin: tuple[float, float],
    direction: tuple[float, float],
    color_start: ColorRGBA,
    color_end: ColorRGBA,
) -> list[ColorRGBA]:
    """折れ線の各区間（中点）に、線形グラデーション上の色を割り当てて返す。

    1 点だけの折れ線には 1 色を返す。
    """

    pts = np.asarray(points, dtype=np.float64)
    mids = (pts[:-1] + pts[1:]) / 2.0 if len(pts) > 1 else pts
    d = np.asarray(direction, dtype=np.float64)
    denom = float(d @ d) or 1.0
    t = np.clip(((mids - np.asarray(origin, dtype=np.float64)) @ d) / denom, 0.0, 1.0)
    start = np.asarray(color_start, dtype=np.float64)
    end = np.asarray(color_end, dtype=np.float64)
    out: list[ColorRGBA] = []
    for w in t:
        c = start + (end - start) * float(w)
        out.append((float(c[0]), float(c[1]), float(c[2]), float(c[3])))
    return out
