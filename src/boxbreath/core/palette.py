"""
どこで: `src/boxbreath/core/palette.py`。
何を: フェーズごとのアクセント色と、色表現（hex / RGB01 / RGB255）の変換ユーティリティを定義する。
なぜ: 描画計画とレンダラー・表示層で同じ色の定義を共有するため。
"""

from __future__ import annotations

from boxbreath.core.session import PHASE_COUNT

ColorRGB = tuple[float, float, float]
ColorRGBA = tuple[float, float, float, float]

# Inhale, Hold, Exhale, Wait
PHASE_COLORS_HEX: tuple[str, ...] = ("#ff9f43", "#feca57", "#54a0ff", "#5ed5a8")
FALLBACK_COLOR_HEX = PHASE_COLORS_HEX[0]
WHITE_HEX = "#ffffff"
TRANSPARENT: ColorRGBA = (0.0, 0.0, 0.0, 0.0)


def hex_to_rgb01(text: str) -> ColorRGB:
    """`#rrggbb` を 0..1 float の RGB に変換して返す。

    Raises
    ------
    ValueError
        6 桁の 16 進表記でない場合。
    """

    normalized = str(text).strip().lstrip("#")
    if len(normalized) != 6:
        raise ValueError(f"hex color must be #rrggbb: {text!r}")
    try:
        value = int(normalized, 16)
    except ValueError as exc:
        raise ValueError(f"hex color must be #rrggbb: {text!r}") from exc
    r = (value >> 16) & 255
    g = (value >> 8) & 255
    b = value & 255
    return float(r) / 255.0, float(g) / 255.0, float(b) / 255.0


def hex_to_rgba01(text: str, alpha: float) -> ColorRGBA:
    """`#rrggbb` と alpha から 0..1 float の RGBA を返す。"""

    r, g, b = hex_to_rgb01(text)
    a = float(alpha)
    a = 0.0 if a < 0.0 else 1.0 if a > 1.0 else a
    return r, g, b, a


def rgba01_to_rgba255(rgba: ColorRGBA) -> tuple[int, int, int, int]:
    """0..1 float の RGBA を 0..255 int の RGBA に変換して返す。"""

    out: list[int] = []
    for v in rgba:
        fv = float(v)
        fv = 0.0 if fv < 0.0 else 1.0 if fv > 1.0 else fv
        out.append(int(round(fv * 255.0)))
    return out[0], out[1], out[2], out[3]


def phase_color_hex(phase_index: int) -> str:
    """phase_index に対応するアクセント色（hex）を返す。"""

    i = int(phase_index)
    if 0 <= i < PHASE_COUNT:
        return PHASE_COLORS_HEX[i]
    return FALLBACK_COLOR_HEX


__all__ = [
    "ColorRGB",
    "ColorRGBA",
    "FALLBACK_COLOR_HEX",
    "PHASE_COLORS_HEX",
    "TRANSPARENT",
    "WHITE_HEX",
    "hex_to_rgb01",
    "hex_to_rgba01",
    "phase_color_hex",
    "rgba01_to_rgba255",
]
