"""
どこで: `src/boxbreath/core/status_view.py`。
何を: スナップショットから表示層向けのテキスト/操作可否（StatusView）を組み立てる。
なぜ: 「いま何を表示し、どの操作を出すか」の規則を GUI から切り離してテストできるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass

from boxbreath.core.palette import PHASE_COLORS_HEX
from boxbreath.core.session import Phase, SessionState

TITLE = "Box Breathing"
SUBTITLE = "Find your calm"
COMPLETING_MESSAGE = "Completing cycle…"
LIMIT_REACHED_MESSAGE = "Time limit reached"
COMPLETE_MESSAGE = "Session Complete"
START_PROMPT = "Tap to begin your session"
DEFAULT_PRESETS_MINUTES: tuple[int, ...] = (2, 5, 10)


def format_time(seconds: int) -> str:
    """経過秒を `MM:SS` 形式にする。"""

    s = max(0, int(seconds))
    mins, secs = divmod(s, 60)
    return f"{mins:02d}:{secs:02d}"


def instruction_for(phase_index: int) -> str:
    """フェーズの指示文（範囲外は空文字）を返す。"""

    try:
        return Phase(int(phase_index)).label
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class PhaseTrackerItem:
    label: str
    color_hex: str
    active: bool


@dataclass(frozen=True, slots=True)
class StatusView:
    """表示層が 1 回の描画で使うテキストと操作の一覧。"""

    title: str
    subtitle: str
    timer_text: str | None
    instruction: str | None
    countdown: int | None
    phase_tracker: tuple[PhaseTrackerItem, ...]
    limit_message: str | None
    complete_message: str | None
    primary_action: str | None
    show_reset: bool
    show_settings: bool
    prompt: str | None
    sound_enabled: bool
    phase_duration_seconds: int
    time_limit_text: str
    presets_minutes: tuple[int, ...]


def build_status_view(
    state: SessionState,
    *,
    sound_enabled: bool,
    time_limit_text: str | None = None,
    presets_minutes: tuple[int, ...] = DEFAULT_PRESETS_MINUTES,
) -> StatusView:
    """スナップショットから StatusView を作る。

    Parameters
    ----------
    state : SessionState
        正準状態のスナップショット。
    sound_enabled : bool
        音声キューの有効/無効（表示用）。
    time_limit_text : str | None
        入力途中の時間制限テキスト。None の場合は設定値から作る。
    presets_minutes : tuple[int, ...]
        プリセットボタンの分数。
    """

    running = bool(state.is_running)
    complete = bool(state.session_complete)
    settings_visible = not running and not complete

    tracker: tuple[PhaseTrackerItem, ...] = ()
    if running:
        tracker = tuple(
            PhaseTrackerItem(label=p.label, color_hex=PHASE_COLORS_HEX[int(p)], active=int(p) == state.phase_index)
            for p in Phase
        )

    limit_message: str | None = None
    if state.time_limit_reached and not complete:
        limit_message = COMPLETING_MESSAGE if running else LIMIT_REACHED_MESSAGE

    if time_limit_text is None:
        limit = state.config.time_limit_minutes
        time_limit_text = "" if limit is None else str(int(limit))

    return StatusView(
        title=TITLE,
        subtitle=SUBTITLE,
        timer_text=format_time(state.elapsed_total_seconds) if running else None,
        instruction=instruction_for(state.phase_index) if running else None,
        countdown=int(state.phase_remaining) if running else None,
        phase_tracker=tracker,
        limit_message=limit_message,
        complete_message=COMPLETE_MESSAGE if complete else None,
        primary_action=None if complete else ("Pause" if running else "Start"),
        show_reset=complete,
        show_settings=settings_visible,
        prompt=START_PROMPT if settings_visible else None,
        sound_enabled=bool(sound_enabled),
        phase_duration_seconds=int(state.config.phase_duration_seconds),
        time_limit_text=str(time_limit_text),
        presets_minutes=tuple(int(m) for m in presets_minutes),
    )


__all__ = [
    "COMPLETE_MESSAGE",
    "COMPLETING_MESSAGE",
    "DEFAULT_PRESETS_MINUTES",
    "LIMIT_REACHED_MESSAGE",
    "PhaseTrackerItem",
    "StatusView",
    "TITLE",
    "build_status_view",
    "format_time",
    "instruction_for",
]
