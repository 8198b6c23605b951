from pathlib import Path

import pytest

from boxbreath.core.runtime_config import runtime_config, set_config_path


@pytest.fixture(autouse=True)
def _reset_runtime_config() -> None:
    set_config_path(None)
    yield
    set_config_path(None)


def _isolate_config_discovery(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_packaged_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    cfg = runtime_config()
    assert cfg.config_path is None
    assert cfg.phase_duration_seconds == 4
    assert cfg.time_limit_minutes is None
    assert cfg.sound_enabled is False
    assert cfg.presets_minutes == (2, 5, 10)
    assert cfg.reduced_motion is False
    assert cfg.tick_interval_s == 1.0
    assert cfg.fps == 60.0
    assert cfg.pulse_duration_s == 0.5
    assert cfg.window_size == (480, 800)
    assert cfg.window_position is None
    assert cfg.max_pixel_ratio == 2.5
    assert cfg.log_level == "WARNING"


def test_runtime_config_is_cached(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)
    assert runtime_config() is runtime_config()


def test_discovered_config_overrides_nested_keys(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".boxbreath" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text(
        "session:\n  phase_duration_seconds: 5\nmotion:\n  reduced: true\n",
        encoding="utf-8",
    )

    cfg = runtime_config()
    assert cfg.config_path == discovered
    assert cfg.phase_duration_seconds == 5
    assert cfg.reduced_motion is True
    # 指定していない同じ節のキーは既定値が残る。
    assert cfg.presets_minutes == (2, 5, 10)
    assert cfg.sound_enabled is False


def test_home_config_is_discovered(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    home_cfg = tmp_path / ".config" / "boxbreath" / "config.yaml"
    home_cfg.parent.mkdir(parents=True, exist_ok=True)
    home_cfg.write_text("ui:\n  window_position: [10, 20]\n", encoding="utf-8")

    cfg = runtime_config()
    assert cfg.config_path == home_cfg
    assert cfg.window_position == (10, 20)


def test_explicit_config_overrides_discovered_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    discovered = tmp_path / ".boxbreath" / "config.yaml"
    discovered.parent.mkdir(parents=True, exist_ok=True)
    discovered.write_text("session:\n  time_limit_minutes: 3\n", encoding="utf-8")

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text(
        "session:\n  time_limit_minutes: 7\n  sound_enabled: true\ntiming:\n  fps: 30\n",
        encoding="utf-8",
    )
    set_config_path(explicit)

    cfg = runtime_config()
    assert cfg.config_path == explicit
    assert cfg.time_limit_minutes == 7
    assert cfg.sound_enabled is True
    assert cfg.fps == 30.0


def test_phase_duration_is_clamped(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("session:\n  phase_duration_seconds: 9\n", encoding="utf-8")
    set_config_path(explicit)

    assert runtime_config().phase_duration_seconds == 6


def test_unsupported_version_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("version: 2\n", encoding="utf-8")
    set_config_path(explicit)

    with pytest.raises(RuntimeError):
        runtime_config()


def test_negative_time_limit_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("session:\n  time_limit_minutes: -1\n", encoding="utf-8")
    set_config_path(explicit)

    with pytest.raises(ValueError):
        runtime_config()


def test_unknown_log_level_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("logging:\n  level: chatty\n", encoding="utf-8")
    set_config_path(explicit)

    with pytest.raises(RuntimeError):
        runtime_config()


def test_explicit_config_path_missing_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_config_discovery(tmp_path, monkeypatch)

    missing = tmp_path / "missing.yaml"
    set_config_path(missing)

    with pytest.raises(FileNotFoundError):
        runtime_config()
