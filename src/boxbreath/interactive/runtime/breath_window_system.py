# どこで: `src/boxbreath/interactive/runtime/breath_window_system.py`。
# 何を: セッションを描くメインウィンドウ（アニメーション + テキスト + キー操作）のサブシステムを提供する。
# なぜ: `src/boxbreath/api/runner.py` の `run()` を「配線」に寄せ、表示とキー入力の責務を独立させるため。

from __future__ import annotations

import logging

import pyglet
from pyglet.gl import Config
from pyglet.window import Window, key

from boxbreath.core.render_plan import DEFAULT_MAX_PIXEL_RATIO, Viewport
from boxbreath.core.status_view import StatusView
from boxbreath.interactive.gl.draw_renderer import DrawRenderer
from boxbreath.interactive.runtime.session_controller import FrameUpdate, SessionController

_logger = logging.getLogger(__name__)

WINDOW_CAPTION = "Box Breathing"

_TEXT_COLOR = (255, 255, 255, 235)
_MUTED_COLOR = (255, 255, 255, 150)
_ACCENT_COLOR = (94, 213, 168, 255)

_PRESET_KEYS = (key.F1, key.F2, key.F3)


def create_breath_window(
    *,
    window_size: tuple[int, int],
    window_position: tuple[int, int] | None = None,
) -> Window:
    """セッション表示用の pyglet ウィンドウを生成する。"""

    # 円や線の縁を滑らかにするために MSAA を有効化
    config = Config(double_buffer=True, sample_buffers=1, samples=4)  # type: ignore[abstract]
    width, height = window_size
    window = pyglet.window.Window(  # type: ignore[abstract]
        width=int(width),
        height=int(height),
        resizable=True,
        caption=WINDOW_CAPTION,
        config=config,
    )
    if window_position is not None:
        window.set_location(*window_position)
    return window


class BreathWindowSystem:
    """セッション表示（メインウィンドウ）のサブシステム。

    Notes
    -----
    - controller のリスナーとして最新の FrameUpdate を保持し、`draw_frame()` でそれを描く。
      状態の進行は controller のタイマーが担い、このクラスは描くだけ。
    - キー操作はすべて controller のコマンドへ変換する。
    """

    def __init__(
        self,
        controller: SessionController,
        *,
        window_size: tuple[int, int] = (480, 800),
        window_position: tuple[int, int] | None = None,
        background_color: tuple[float, float, float] = (0.06, 0.06, 0.1),
        max_pixel_ratio: float = DEFAULT_MAX_PIXEL_RATIO,
    ) -> None:
        self._controller = controller
        self._max_pixel_ratio = float(max_pixel_ratio)

        self.window = create_breath_window(window_size=window_size, window_position=window_position)
        self._renderer = DrawRenderer(self.window, background_color=background_color)

        self._batch = pyglet.graphics.Batch()
        self._title = self._label(font_size=22, bold=True)
        self._subtitle = self._label(font_size=12, color=_MUTED_COLOR)
        self._timer = self._label(font_size=18)
        self._instruction = self._label(font_size=26, bold=True)
        self._countdown = self._label(font_size=40, bold=True)
        self._tracker = self._label(font_size=11, color=_MUTED_COLOR)
        self._message = self._label(font_size=14, color=_ACCENT_COLOR)
        self._settings = self._label(font_size=11, color=_MUTED_COLOR, multiline=True)
        self._hint = self._label(font_size=10, color=_MUTED_COLOR)

        self._last_update: FrameUpdate | None = None
        controller.add_listener(self._on_update)
        self.window.push_handlers(
            on_key_press=self._on_key_press,
            on_text=self._on_text,
            on_resize=self._on_resize,
        )
        self._sync_viewport(self.window.width, self.window.height)

    def _label(
        self,
        *,
        font_size: float,
        bold: bool = False,
        color: tuple[int, int, int, int] = _TEXT_COLOR,
        multiline: bool = False,
    ) -> pyglet.text.Label:
        return pyglet.text.Label(
            "",
            font_size=font_size,
            weight="bold" if bold else "normal",
            color=color,
            anchor_x="center",
            anchor_y="center",
            align="center",
            multiline=multiline,
            width=self.window.width if multiline else None,
            batch=self._batch,
        )

    # --- controller / window イベント ---

    def _on_update(self, update: FrameUpdate) -> None:
        self._last_update = update

    def _pixel_ratio(self, width: int) -> float:
        getter = getattr(self.window, "get_framebuffer_size", None)
        if callable(getter) and width > 0:
            fb_w, _fb_h = getter()
            return float(fb_w) / float(width)
        return 1.0

    def _sync_viewport(self, width: int, height: int) -> None:
        viewport = Viewport.capped(
            float(width),
            float(height),
            self._pixel_ratio(int(width)),
            max_pixel_ratio=self._max_pixel_ratio,
        )
        self._controller.set_viewport(viewport)

    def _on_resize(self, width: int, height: int) -> None:
        # 戻り値を返さないので、pyglet 既定の on_resize（投影の更新）も続けて走る。
        self._sync_viewport(width, height)

    def _on_key_press(self, symbol: int, _modifiers: int) -> None:
        c = self._controller
        if symbol == key.SPACE:
            c.toggle()
            return
        if symbol in (key.ENTER, key.RETURN):
            c.start()
            return
        if symbol == key.R:
            c.reset()
            return
        if symbol == key.S:
            c.set_sound_enabled(not c.sound_enabled)
            return
        if symbol == key.M:
            c.set_reduced_motion(not c.reduced_motion)
            return
        if symbol == key.UP:
            c.set_phase_duration(c.state.config.phase_duration_seconds + 1)
            return
        if symbol == key.DOWN:
            c.set_phase_duration(c.state.config.phase_duration_seconds - 1)
            return
        if symbol == key.BACKSPACE:
            c.set_time_limit_text(self._time_limit_text()[:-1])
            return
        if symbol in _PRESET_KEYS:
            i = _PRESET_KEYS.index(symbol)
            presets = c.presets_minutes
            if i < len(presets):
                c.start_with_preset(presets[i])

    def _on_text(self, text: str) -> None:
        digits = "".join(ch for ch in text if ch.isdigit())
        if digits:
            self._controller.set_time_limit_text(self._time_limit_text() + digits)

    def _time_limit_text(self) -> str:
        update = self._controller.last_update
        if update is None:
            limit = self._controller.state.config.time_limit_minutes
            return "" if limit is None else str(limit)
        return update.view.time_limit_text

    # --- 描画 ---

    def _layout_labels(self, view: StatusView) -> None:
        w = float(self.window.width)
        h = float(self.window.height)
        cx = w / 2.0

        self._title.text = view.title
        self._title.position = (cx, h - 40.0, 0.0)
        self._subtitle.text = view.subtitle
        self._subtitle.position = (cx, h - 68.0, 0.0)

        self._timer.text = view.timer_text or ""
        self._timer.position = (cx, h - 100.0, 0.0)

        self._instruction.text = view.instruction or ""
        self._instruction.position = (cx, h / 2.0 + 24.0, 0.0)
        self._countdown.text = "" if view.countdown is None else str(view.countdown)
        self._countdown.position = (cx, h / 2.0 - 24.0, 0.0)

        self._tracker.text = "   ".join(
            f"[{item.label}]" if item.active else item.label for item in view.phase_tracker
        )
        self._tracker.position = (cx, 150.0, 0.0)

        message = view.complete_message or view.limit_message or view.prompt or ""
        self._message.text = message
        self._message.position = (cx, 120.0, 0.0)

        if view.show_settings:
            presets = "  ".join(f"F{i + 1}: {m} min" for i, m in enumerate(view.presets_minutes[:3]))
            limit = view.time_limit_text or "none"
            self._settings.text = (
                f"Phase duration: {view.phase_duration_seconds}s (Up/Down)\n"
                f"Time limit: {limit} min (type digits)\n"
                f"{presets}"
            )
        else:
            self._settings.text = ""
        self._settings.width = int(w)
        self._settings.position = (cx, 70.0, 0.0)

        action = view.primary_action or ("New session (R)" if view.show_reset else "")
        sound = "on" if view.sound_enabled else "off"
        hint = f"Space: {action}" if view.primary_action else action
        self._hint.text = f"{hint}   S: sound {sound}   M: motion"
        self._hint.position = (cx, 20.0, 0.0)

    def draw_frame(self) -> None:
        """1 フレーム分の描画を行う（`flip()` は呼ばない）。"""

        self._renderer.clear()
        update = self._last_update
        if update is None:
            return
        self._renderer.render(update.plan)
        self._layout_labels(update.view)
        self._batch.draw()

    def close(self) -> None:
        """リスナーを外し、ウィンドウを閉じる。"""

        self._controller.remove_listener(self._on_update)
        try:
            self.window.close()
        except Exception:
            _logger.exception("Failed to close window")


__all__ = ["BreathWindowSystem", "WINDOW_CAPTION", "create_breath_window"]
