# どこで: `src/boxbreath/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: セッション既定値やウィンドウ/タイミング設定を、コードを触らずに変えられるようにするため。

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

from boxbreath.core.session import clamp_phase_duration

_T = TypeVar("_T")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """boxbreath の実行時設定。"""

    config_path: Path | None
    phase_duration_seconds: int
    time_limit_minutes: int | None
    sound_enabled: bool
    presets_minutes: tuple[int, ...]
    reduced_motion: bool
    tick_interval_s: float
    fps: float
    pulse_duration_s: float
    window_size: tuple[int, int]
    window_position: tuple[int, int] | None
    background_color: tuple[float, float, float]
    max_pixel_ratio: float
    log_level: str


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    `path` を None にすると明示指定を解除し、既定の探索に戻る。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        _CONFIG_CACHE = None
        return
    p = Path(os.path.expandvars(os.path.expanduser(str(path))))
    _EXPLICIT_CONFIG_PATH = p
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".boxbreath" / "config.yaml",
        home / ".config" / "boxbreath" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _merge_mapping(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    # mapping 同士はキー単位で後勝ち、それ以外は丸ごと置き換える。
    out = dict(base)
    for k, v in override.items():
        prev = out.get(k)
        if isinstance(prev, dict) and isinstance(v, dict):
            out[k] = _merge_mapping(prev, v)
        else:
            out[k] = v
    return out


def _as_int_pair(value: Any, *, key: str) -> tuple[int, int] | None:
    if value is None:
        return None
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}") from exc
    if len(seq) != 2:
        raise RuntimeError(f"{key} は [x, y] の配列である必要があります: got={value!r}")
    try:
        x = int(seq[0])
        y = int(seq[1])
    except Exception as exc:
        raise RuntimeError(f"{key} は [x, y] の整数配列である必要があります: got={value!r}") from exc
    return (x, y)


def _as_rgb01(value: Any, *, key: str) -> tuple[float, float, float] | None:
    if value is None:
        return None
    try:
        r, g, b = (float(v) for v in value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [r, g, b]（0..1）である必要があります: got={value!r}") from exc
    for v in (r, g, b):
        if not 0.0 <= v <= 1.0:
            raise RuntimeError(f"{key} は [r, g, b]（0..1）である必要があります: got={value!r}")
    return (r, g, b)


def _as_float(value: Any, *, key: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc


def _as_int(value: Any, *, key: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_bool(value: Any, *, key: str) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise RuntimeError(f"{key} は true/false である必要があります: got={value!r}")


def _require(value: _T | None, *, key: str) -> _T:
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    return value


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore[import-untyped]
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(f"PyYAML を import できません: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    try:
        blob = (
            resources.files("boxbreath")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc

    return _load_yaml_text(blob, source="boxbreath/resource/default_config.yaml")


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    上書き順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.boxbreath/config.yaml` / `~/.config/boxbreath/config.yaml`（最初に見つかった 1 つ）
    3) `set_config_path()` / `run(..., config_path=...)` の明示パス
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload = _merge_mapping(payload, _load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload = _merge_mapping(payload, _load_yaml_config(explicit_path))

    version = _require(_as_int(payload.get("version"), key="version"), key="version")
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    session = _as_mapping(payload.get("session"), key="session")
    phase_duration = _require(
        _as_int(session.get("phase_duration_seconds"), key="session.phase_duration_seconds"),
        key="session.phase_duration_seconds",
    )
    time_limit = _as_int(session.get("time_limit_minutes"), key="session.time_limit_minutes")
    if time_limit is not None and time_limit < 0:
        raise ValueError(f"session.time_limit_minutes は 0 以上である必要があります: got={time_limit}")
    sound_enabled = _as_bool(session.get("sound_enabled"), key="session.sound_enabled")
    presets_raw = session.get("presets_minutes")
    if presets_raw is None:
        presets_raw = []
    if not isinstance(presets_raw, list):
        raise RuntimeError(f"session.presets_minutes は配列である必要があります: got={presets_raw!r}")
    presets: list[int] = []
    for item in presets_raw:
        m = _as_int(item, key="session.presets_minutes[]")
        if m is None or m <= 0:
            raise ValueError(f"session.presets_minutes は正の整数である必要があります: got={item!r}")
        presets.append(m)

    motion = _as_mapping(payload.get("motion"), key="motion")
    reduced_motion = _as_bool(motion.get("reduced"), key="motion.reduced")

    timing = _as_mapping(payload.get("timing"), key="timing")
    tick_interval_s = _require(
        _as_float(timing.get("tick_interval_s"), key="timing.tick_interval_s"),
        key="timing.tick_interval_s",
    )
    fps = _require(_as_float(timing.get("fps"), key="timing.fps"), key="timing.fps")
    pulse_duration_s = _require(
        _as_float(timing.get("pulse_duration_s"), key="timing.pulse_duration_s"),
        key="timing.pulse_duration_s",
    )
    if tick_interval_s <= 0:
        raise ValueError(f"timing.tick_interval_s は正の値である必要があります: got={tick_interval_s}")
    if pulse_duration_s <= 0:
        raise ValueError(f"timing.pulse_duration_s は正の値である必要があります: got={pulse_duration_s}")

    ui = _as_mapping(payload.get("ui"), key="ui")
    window_size = _require(_as_int_pair(ui.get("window_size"), key="ui.window_size"), key="ui.window_size")
    window_position = _as_int_pair(ui.get("window_position"), key="ui.window_position")
    background_color = _require(
        _as_rgb01(ui.get("background_color"), key="ui.background_color"),
        key="ui.background_color",
    )
    max_pixel_ratio = _require(
        _as_float(ui.get("max_pixel_ratio"), key="ui.max_pixel_ratio"),
        key="ui.max_pixel_ratio",
    )
    if max_pixel_ratio <= 0:
        raise ValueError(f"ui.max_pixel_ratio は正の値である必要があります: got={max_pixel_ratio}")

    log = _as_mapping(payload.get("logging"), key="logging")
    log_level = str(log.get("level") or "WARNING").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise RuntimeError(f"logging.level は {', '.join(_LOG_LEVELS)} のいずれかです: got={log_level!r}")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        phase_duration_seconds=clamp_phase_duration(phase_duration),
        time_limit_minutes=time_limit,
        sound_enabled=bool(sound_enabled),
        presets_minutes=tuple(presets),
        reduced_motion=bool(reduced_motion),
        tick_interval_s=float(tick_interval_s),
        fps=float(fps),
        pulse_duration_s=float(pulse_duration_s),
        window_size=window_size,
        window_position=window_position,
        background_color=background_color,
        max_pixel_ratio=float(max_pixel_ratio),
        log_level=log_level,
    )
    _CONFIG_CACHE = cfg
    return cfg


__all__ = ["RuntimeConfig", "runtime_config", "set_config_path"]
