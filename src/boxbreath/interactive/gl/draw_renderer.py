# どこで: `src/boxbreath/interactive/gl/draw_renderer.py`。
# 何を: DrawPlan を pyglet.shapes で描く薄いレンダラーを提供する。
# なぜ: 描画内容の決定（render_plan）と、ピクセルへ落とす処理を分離し、ここを差し替え可能に保つため。

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pyglet
from pyglet import shapes
from pyglet.window import Window

from boxbreath.core.palette import ColorRGBA, rgba01_to_rgba255
from boxbreath.core.path import flatten_path, rounded_rect
from boxbreath.core.render_plan import DrawPlan, IndicatorPlan, RadialGradient, TrailPlan
from boxbreath.interactive.gl import utils as render_utils


class DrawRenderer:
    """DrawPlan を 1 フレーム分描く。

    Notes
    -----
    DrawPlan は y 軸下向きの論理座標。pyglet は y 軸上向きなので、ここで反転する。
    shapes は要素数が少ないため毎フレーム作り直し、キャッシュしない。
    HiDPI のフレームバッファ倍率は pyglet の投影に任せ、ここでは論理座標のまま描く。
    """

    def __init__(self, window: Window, *, background_color: tuple[float, float, float]) -> None:
        self._window = window
        r, g, b = background_color
        self._background_color = (float(r), float(g), float(b))
        self._batch: pyglet.graphics.Batch | None = None
        # Batch は shape への参照を持たないため、draw まで生かしておく。
        self._shapes: list[object] = []
        self._height = 0.0

    def clear(self) -> None:
        """背景色でクリアする。"""

        r, g, b = self._background_color
        pyglet.gl.glClearColor(r, g, b, 1.0)
        self._window.clear()

    def render(self, plan: DrawPlan) -> None:
        """DrawPlan を描く（空の計画では何もしない）。"""

        if plan.is_empty or plan.square is None:
            return

        self._batch = pyglet.graphics.Batch()
        self._shapes = []
        self._height = float(plan.height)

        if plan.background_glow is not None:
            self._radial(plan.background_glow)

        sq = plan.square
        for line in flatten_path(rounded_rect(sq.left, sq.top, sq.size, sq.size, sq.corner_radius)):
            self._polyline(line, sq.stroke_width, [sq.stroke_color] * max(1, len(line) - 1), round_caps=False)

        if plan.trail is not None:
            self._trail(plan.trail, origin=(sq.left, sq.top), diagonal=(sq.size, sq.size))

        if plan.indicator is not None:
            self._indicator(plan.indicator)

        self._batch.draw()
        self._batch = None
        self._shapes = []

    # --- 要素ごとの描画 ---

    def _circle(self, x: float, y: float, radius: float, color: ColorRGBA) -> None:
        self._shapes.append(
            shapes.Circle(
                float(x),
                self._height - float(y),
                float(radius),
                color=rgba01_to_rgba255(color),
                batch=self._batch,
            )
        )

    def _polyline(
        self,
        points: np.ndarray,
        width: float,
        colors: Sequence[ColorRGBA],
        *,
        round_caps: bool,
    ) -> None:
        pts = render_utils.flip_y(points, self._height)
        for i in range(len(pts) - 1):
            self._shapes.append(
                shapes.Line(
                    float(pts[i][0]),
                    float(pts[i][1]),
                    float(pts[i + 1][0]),
                    float(pts[i + 1][1]),
                    float(width),
                    color=rgba01_to_rgba255(colors[i]),
                    batch=self._batch,
                )
            )
        if round_caps:
            # 端点と折れ目を円で埋め、round cap/join の代わりにする。
            for i, p in enumerate(points):
                self._circle(p[0], p[1], float(width) / 2.0, colors[min(i, len(colors) - 1)])

    def _radial(self, gradient: RadialGradient) -> None:
        for radius, color in render_utils.radial_layers(gradient):
            self._circle(gradient.center[0], gradient.center[1], radius, color)

    def _trail(
        self,
        trail: TrailPlan,
        *,
        origin: tuple[float, float],
        diagonal: tuple[float, float],
    ) -> None:
        glow_width = float(trail.width) + float(trail.glow_blur) * 0.5
        gr, gg, gb, ga = trail.glow_color
        glow_color = (gr, gg, gb, ga * 0.35)

        for line in flatten_path(trail.commands, quad_segments=6):
            colors = render_utils.linear_gradient_colors(
                line,
                origin=origin,
                direction=diagonal,
                color_start=trail.color_start,
                color_end=trail.color_end,
            )
            self._polyline(line, glow_width, [glow_color] * len(colors), round_caps=True)
            self._polyline(line, trail.width, colors, round_caps=True)

    def _indicator(self, dot: IndicatorPlan) -> None:
        self._radial(dot.glow)
        x, y = dot.center
        r, g, b, _ = dot.color
        self._circle(x, y, dot.radius + dot.shadow_blur * 0.3, (r, g, b, 0.25))
        self._circle(x, y, dot.radius, dot.color)
        hr, hg, hb, _ = dot.highlight_color
        self._circle(x - dot.radius * 0.3, y - dot.radius * 0.3, dot.radius * 0.35, (hr, hg, hb, 0.8))


__all__ = ["DrawRenderer"]
