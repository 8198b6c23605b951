"""
どこで: `src/boxbreath/core/render_plan.py`。
何を: セッションのスナップショットと補間結果から、1 フレーム分の宣言的な描画計画（DrawPlan）を作る。
なぜ: ジオメトリ/色/不透明度の決定を純粋関数に閉じ込め、ピクセル描画（レンダラー）を薄く保つため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from boxbreath.core.interpolate import FrameSample
from boxbreath.core.palette import (
    TRANSPARENT,
    WHITE_HEX,
    ColorRGBA,
    hex_to_rgba01,
    phase_color_hex,
)
from boxbreath.core.path import PathCommand, Point, line_to, move_to, quad_to
from boxbreath.core.session import PHASE_COUNT, Phase, SessionState

DEFAULT_MAX_PIXEL_RATIO = 2.5

_TOP_MARGIN = 20.0
_BASE_SIZE_RATIO = 0.55
_CORNER_RATIO = 0.08
_IDLE_BREATH = 0.3

# 角の並び: 左下 → 左上 → 右上 → 右下（phase_index の開始角）。
_CORNER_UNITS = np.array([[0.0, 1.0], [0.0, 0.0], [1.0, 0.0], [1.0, 1.0]], dtype=np.float64)
# 角丸の内側へ寄せる向き。
_INSET_DIRS = np.array([[1.0, -1.0], [1.0, 1.0], [-1.0, 1.0], [-1.0, -1.0]], dtype=np.float64)


@dataclass(frozen=True, slots=True)
class Viewport:
    """描画先の論理サイズとピクセル比。

    Raises
    ------
    ValueError
        幅/高さが負、または pixel_ratio が正でない場合。
    """

    width: float
    height: float
    pixel_ratio: float = 1.0

    def __post_init__(self) -> None:
        if float(self.width) < 0 or float(self.height) < 0:
            raise ValueError(f"viewport の幅/高さは 0 以上である必要がある: {self.width}x{self.height}")
        if float(self.pixel_ratio) <= 0:
            raise ValueError(f"pixel_ratio は正の値である必要がある: got={self.pixel_ratio!r}")

    @property
    def has_area(self) -> bool:
        return float(self.width) > 0 and float(self.height) > 0

    @classmethod
    def capped(
        cls,
        width: float,
        height: float,
        pixel_ratio: float | None,
        *,
        max_pixel_ratio: float = DEFAULT_MAX_PIXEL_RATIO,
    ) -> "Viewport":
        """pixel_ratio を max_pixel_ratio で頭打ちにして作る（未取得なら 1）。"""

        ratio = float(pixel_ratio) if pixel_ratio else 1.0
        return cls(float(width), float(height), min(ratio, float(max_pixel_ratio)))


@dataclass(frozen=True, slots=True)
class GradientStop:
    offset: float
    color: ColorRGBA


@dataclass(frozen=True, slots=True)
class RadialGradient:
    """中心から外側へ色が変わる放射グラデーション。"""

    center: Point
    inner_radius: float
    outer_radius: float
    stops: tuple[GradientStop, ...]


@dataclass(frozen=True, slots=True)
class SquarePlan:
    """呼吸に合わせて伸縮する角丸正方形。"""

    left: float
    top: float
    size: float
    corner_radius: float
    stroke_color: ColorRGBA
    stroke_width: float


@dataclass(frozen=True, slots=True)
class TrailPlan:
    """完了済みの辺（+ 実行中は現在の辺の途中まで）をなぞる軌跡。"""

    commands: tuple[PathCommand, ...]
    width: float
    color_start: ColorRGBA
    color_end: ColorRGBA
    glow_color: ColorRGBA
    glow_blur: float
    live: bool


@dataclass(frozen=True, slots=True)
class IndicatorPlan:
    """外周を移動する点。"""

    center: Point
    radius: float
    color: ColorRGBA
    highlight_color: ColorRGBA
    shadow_blur: float
    glow: RadialGradient


@dataclass(frozen=True, slots=True)
class DrawPlan:
    """1 フレーム分の描画計画。

    `is_empty` の場合は背景クリアのみ行い、何も描かない。
    """

    width: float
    height: float
    pixel_ratio: float
    is_empty: bool = True
    phase_index: int = 0
    progress: float = 0.0
    breath_influence: float = 0.0
    pulse_boost: float = 0.0
    accent_color: ColorRGBA = TRANSPARENT
    background_glow: RadialGradient | None = None
    square: SquarePlan | None = None
    trail: TrailPlan | None = None
    indicator: IndicatorPlan | None = None


def empty_plan(viewport: Viewport) -> DrawPlan:
    """何も描かない計画を返す。"""

    return DrawPlan(
        width=float(viewport.width),
        height=float(viewport.height),
        pixel_ratio=float(viewport.pixel_ratio),
    )


def breath_influence(phase_index: int, eased_progress: float, now: float, reduced_motion: bool) -> float:
    """正方形/点の大きさに掛ける呼吸成分（0..1）を返す。

    Inhale は広がり、Exhale は縮み、Hold/Wait はゆっくり揺らぐ（reduced motion 時は中間で固定）。
    """

    if phase_index == Phase.INHALE:
        return float(eased_progress)
    if phase_index == Phase.EXHALE:
        return 1.0 - float(eased_progress)
    if reduced_motion:
        return _IDLE_BREATH
    return _IDLE_BREATH + 0.2 * (0.5 + 0.5 * math.sin(float(now) * 1000.0 / 350.0))


def square_corners(left: float, top: float, size: float) -> np.ndarray:
    """正方形の 4 隅（左下, 左上, 右上, 右下）を `(4, 2)` で返す。"""

    return np.array([left, top], dtype=np.float64) + _CORNER_UNITS * float(size)


def indicator_path_points(left: float, top: float, size: float, corner_radius: float) -> np.ndarray:
    """点が辿る 4 頂点（角丸の内側へ寄せた隅）を返す。"""

    return square_corners(left, top, size) + _INSET_DIRS * float(corner_radius)


def trail_commands(
    corners: np.ndarray,
    corner_radius: float,
    phase_index: int,
    *,
    head: Point | None,
) -> tuple[PathCommand, ...]:
    """完了済みの辺をなぞるパスを返す。

    Parameters
    ----------
    corners : np.ndarray
        `square_corners()` の戻り値。
    corner_radius : float
        角丸半径。
    phase_index : int
        現在フェーズ。`1..phase_index` 番目の角までを完了済みとして描く。
    head : Point | None
        現在の辺の途中（点の位置）まで伸ばす場合の終点。
    """

    r = float(corner_radius)
    bl, tl, tr, br = (tuple(float(v) for v in c) for c in corners)
    cmds: list[PathCommand] = [move_to(bl[0] + r, bl[1] - r)]
    for i in range(1, int(phase_index) + 1):
        if i == 1:
            cmds.append(line_to(tl[0] + r, tl[1] + r))
            cmds.append(quad_to(tl[0], tl[1], tl[0] + r, tl[1]))
        elif i == 2:
            cmds.append(line_to(tr[0] - r, tr[1]))
            cmds.append(quad_to(tr[0], tr[1], tr[0], tr[1] + r))
        elif i == 3:
            cmds.append(line_to(br[0], br[1] - r))
            cmds.append(quad_to(br[0], br[1], br[0] - r, br[1]))
    if head is not None:
        cmds.append(line_to(head[0], head[1]))
    return tuple(cmds)


def plan_frame(
    state: SessionState,
    sample: FrameSample,
    viewport: Viewport,
    reduced_motion: bool = False,
) -> DrawPlan:
    """スナップショット + 補間結果 + ビューポートから DrawPlan を作る。

    Parameters
    ----------
    state : SessionState
        正準状態のスナップショット。
    sample : FrameSample
        `sample_frame()` の結果。`eased_progress` と `pulse` を使う。
    viewport : Viewport
        論理サイズ（y 軸下向き）とピクセル比。
    reduced_motion : bool
        True の場合、待機中の揺らぎ・パルス・軌跡の伸長を抑止する。

    Returns
    -------
    DrawPlan
        未開始かつ未完了、または面積 0 のビューポートでは空の計画。
    """

    if not viewport.has_area:
        return empty_plan(viewport)
    if not state.has_started and not state.session_complete:
        return empty_plan(viewport)

    width = float(viewport.width)
    height = float(viewport.height)
    allow_motion = not reduced_motion
    phase = int(state.phase_index) % PHASE_COUNT
    eased = float(sample.eased_progress)

    base_size = min(width, height) * _BASE_SIZE_RATIO
    size0 = min(base_size, height - _TOP_MARGIN * 2.0)
    vertical_offset = min(height * 0.12, 80.0)
    preferred_top = height / 2.0 + vertical_offset - size0 / 2.0
    top0 = max(_TOP_MARGIN, min(preferred_top, height - size0 - _TOP_MARGIN))
    left0 = (width - size0) / 2.0

    breath = breath_influence(phase, eased, sample.now, reduced_motion)
    pulse_boost = 0.8 * float(sample.pulse) if allow_motion else 0.0

    size = size0 * (1.0 + 0.06 * breath + 0.02 * pulse_boost)
    left = left0 + (size0 - size) / 2.0
    top = top0 + (size0 - size) / 2.0
    corner_radius = size * _CORNER_RATIO

    path_points = indicator_path_points(left, top, size, corner_radius)
    start = path_points[phase]
    end = path_points[(phase + 1) % PHASE_COUNT]
    head_xy = start + eased * (end - start)
    head: Point = (float(head_xy[0]), float(head_xy[1]))

    accent_hex = phase_color_hex(phase)
    next_hex = phase_color_hex((phase + 1) % PHASE_COUNT)
    accent = hex_to_rgba01(accent_hex, 1.0)
    live = allow_motion and bool(state.is_running)
    center: Point = (left + size / 2.0, top + size / 2.0)

    background_glow = RadialGradient(
        center=center,
        inner_radius=size * 0.1,
        outer_radius=size * 1.2,
        stops=(
            GradientStop(0.0, hex_to_rgba01(accent_hex, 0.12)),
            GradientStop(0.5, hex_to_rgba01(accent_hex, 0.04)),
            GradientStop(1.0, TRANSPARENT),
        ),
    )

    square = SquarePlan(
        left=left,
        top=top,
        size=size,
        corner_radius=corner_radius,
        stroke_color=hex_to_rgba01(WHITE_HEX, 0.06),
        stroke_width=1.0,
    )

    trail_alpha = 0.9 if live else 0.5
    trail = TrailPlan(
        commands=trail_commands(
            square_corners(left, top, size),
            corner_radius,
            phase,
            head=head if live else None,
        ),
        width=max(3.0, size * 0.018),
        color_start=hex_to_rgba01(accent_hex, trail_alpha),
        color_end=hex_to_rgba01(next_hex, trail_alpha),
        glow_color=hex_to_rgba01(accent_hex, 0.6),
        glow_blur=20.0 if live else 10.0,
        live=live,
    )

    base_radius = max(6.0, size * 0.028)
    radius = base_radius * (1.0 + 0.3 * breath + 0.2 * pulse_boost)
    if allow_motion and phase in (Phase.HOLD, Phase.WAIT):
        radius += base_radius * 0.1 * (0.5 + 0.5 * math.sin(float(sample.now) * 1000.0 / 180.0))

    indicator = IndicatorPlan(
        center=head,
        radius=radius,
        color=accent,
        highlight_color=hex_to_rgba01(WHITE_HEX, 1.0),
        shadow_blur=15.0,
        glow=RadialGradient(
            center=head,
            inner_radius=0.0,
            outer_radius=radius * 3.0,
            stops=(
                GradientStop(0.0, hex_to_rgba01(accent_hex, 0.4)),
                GradientStop(0.5, hex_to_rgba01(accent_hex, 0.1)),
                GradientStop(1.0, TRANSPARENT),
            ),
        ),
    )

    return DrawPlan(
        width=width,
        height=height,
        pixel_ratio=float(viewport.pixel_ratio),
        is_empty=False,
        phase_index=phase,
        progress=float(sample.progress),
        breath_influence=breath,
        pulse_boost=pulse_boost,
        accent_color=accent,
        background_glow=background_glow,
        square=square,
        trail=trail,
        indicator=indicator,
    )


__all__ = [
    "DEFAULT_MAX_PIXEL_RATIO",
    "DrawPlan",
    "GradientStop",
    "IndicatorPlan",
    "RadialGradient",
    "SquarePlan",
    "TrailPlan",
    "Viewport",
    "breath_influence",
    "empty_plan",
    "indicator_path_points",
    "plan_frame",
    "square_corners",
    "trail_commands",
]
