from __future__ import annotations

import pytest

from boxbreath.__main__ import _parse_args


def test_defaults_defer_to_config() -> None:
    ns = _parse_args([])
    assert ns.config is None
    assert ns.phase_duration is None
    assert ns.time_limit is None
    assert ns.sound is None
    assert ns.reduced_motion is None
    assert ns.fps is None
    assert ns.start is False
    assert ns.verbose is False


def test_flags_are_parsed() -> None:
    ns = _parse_args(
        ["--phase-duration", "5", "--time-limit", "0", "--no-sound", "--reduced-motion", "--fps", "30", "-v"]
    )
    assert ns.phase_duration == 5
    assert ns.time_limit == 0
    assert ns.sound is False
    assert ns.reduced_motion is True
    assert ns.fps == 30.0
    assert ns.verbose is True


def test_negative_time_limit_is_rejected() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["--time-limit", "-2"])
