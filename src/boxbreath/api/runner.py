"""
どこで: `src/boxbreath/api/runner.py`。公開 API のランナー実装。
何を: 設定・時計・スケジューラ・コラボレータ・コントローラ・ウィンドウを配線し、呼吸セッションを起動する。
なぜ: `python -m boxbreath` やスクリプトから 1 関数でセッション画面を開けるようにするため。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pyglet

from boxbreath.core.render_plan import Viewport
from boxbreath.core.runtime_config import runtime_config, set_config_path
from boxbreath.core.session import SessionConfig, clamp_phase_duration, parse_time_limit
from boxbreath.interactive.runtime.breath_window_system import BreathWindowSystem
from boxbreath.interactive.runtime.collaborators import LoggingPowerHint, ToneCuePlayer
from boxbreath.interactive.runtime.frame_clock import MonotonicClock
from boxbreath.interactive.runtime.scheduler import PygletScheduler
from boxbreath.interactive.runtime.session_controller import SessionController
from boxbreath.interactive.runtime.window_loop import WindowLoop, WindowTask

_logger = logging.getLogger(__name__)


def run(
    *,
    config_path: str | Path | None = None,
    phase_duration: int | None = None,
    time_limit: int | None = None,
    sound: bool | None = None,
    reduced_motion: bool | None = None,
    fps: float | None = None,
    autostart: bool = False,
) -> None:
    """pyglet ウィンドウを生成し、ボックス呼吸セッションを表示する。

    Parameters
    ----------
    config_path : str | Path | None
        設定ファイル（config.yaml）のパス。指定した場合は探索より優先する。
    phase_duration : int | None
        1 フェーズの秒数。3..6 に丸める。None の場合は設定値。
    time_limit : int | None
        時間制限（分）。None の場合は設定値（設定も None なら無制限）。
    sound : bool | None
        フェーズ切り替えのキュー音を鳴らすか。None の場合は設定値。
    reduced_motion : bool | None
        動きを抑えた描画にするか。None の場合は設定値。
    fps : float | None
        目標フレームレート。`<=0` の場合はスロットリングしない。None の場合は設定値。
    autostart : bool
        True の場合、ウィンドウを開いた直後にセッションを開始する。

    Returns
    -------
    None
        ウィンドウを閉じると制御を返す。
    """

    set_config_path(config_path)
    cfg = runtime_config()

    duration = clamp_phase_duration(cfg.phase_duration_seconds if phase_duration is None else phase_duration)
    limit = cfg.time_limit_minutes if time_limit is None else parse_time_limit(time_limit)
    effective_fps = float(cfg.fps if fps is None else fps)
    sound_enabled = bool(cfg.sound_enabled if sound is None else sound)
    reduced = bool(cfg.reduced_motion if reduced_motion is None else reduced_motion)

    pyglet.options["vsync"] = False

    width, height = cfg.window_size
    controller = SessionController(
        scheduler=PygletScheduler(),
        clock=MonotonicClock(),
        # ToneCuePlayer は初回再生まで pyglet.media を読み込まない。
        cue_player=ToneCuePlayer(),
        power_hint=LoggingPowerHint(),
        config=SessionConfig(phase_duration_seconds=duration, time_limit_minutes=limit),
        viewport=Viewport.capped(float(width), float(height), 1.0, max_pixel_ratio=cfg.max_pixel_ratio),
        reduced_motion=reduced,
        sound_enabled=sound_enabled,
        tick_interval_s=cfg.tick_interval_s,
        frame_interval_s=0.0 if effective_fps <= 0 else 1.0 / effective_fps,
        pulse_duration_s=cfg.pulse_duration_s,
        presets_minutes=cfg.presets_minutes,
    )

    window = BreathWindowSystem(
        controller,
        window_size=cfg.window_size,
        window_position=cfg.window_position,
        background_color=cfg.background_color,
        max_pixel_ratio=cfg.max_pixel_ratio,
    )

    # 作成順の逆で閉じる。
    closers: list[Callable[[], None]] = [controller.close, window.close]

    if autostart:
        controller.start()
    _logger.info(
        "Session window ready (phase=%ss, limit=%s, sound=%s, reduced_motion=%s)",
        duration,
        "none" if limit is None else f"{limit}min",
        sound_enabled,
        reduced,
    )

    loop = WindowLoop([WindowTask(window=window.window, draw_frame=window.draw_frame)], fps=effective_fps)
    try:
        loop.run()
    finally:
        for close in reversed(closers):
            close()
