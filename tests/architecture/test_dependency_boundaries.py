"""層の向き（core → interactive → api）が守られているかを import 文から調べるテスト。"""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

_SRC = Path(__file__).resolve().parents[2] / "src"
_PACKAGE = _SRC / "boxbreath"


def _dotted_name(path: Path) -> tuple[str, bool]:
    """`src` 配下のファイルパスを (モジュール名, パッケージか) に変換する。"""

    parts = list(path.relative_to(_SRC).with_suffix("").parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts.pop()
    return ".".join(parts), is_package


def _from_targets(module: str, is_package: bool, node: ast.ImportFrom) -> set[str]:
    """`from X import a, b` が触れるモジュール候補（X, X.a, X.b）を絶対名で返す。"""

    if node.level:
        anchor = module.split(".") if is_package else module.split(".")[:-1]
        keep = len(anchor) - (node.level - 1)
        if keep <= 0:
            raise ValueError(f"{module}: 相対 import (level={node.level}) がパッケージ外を指す")
        base = ".".join(anchor[:keep] + ([node.module] if node.module else []))
    elif node.module is None:
        return set()
    else:
        base = node.module

    return {base} | {f"{base}.{a.name}" for a in node.names if a.name != "*"}


def _imports_of(path: Path) -> set[str]:
    module, is_package = _dotted_name(path)
    found: set[str] = set()
    for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"))):
        if isinstance(node, ast.Import):
            found.update(a.name for a in node.names)
        elif isinstance(node, ast.ImportFrom):
            found |= _from_targets(module, is_package, node)
    return found


def _violations(layer: Path, forbidden: tuple[str, ...]) -> list[str]:
    out: list[str] = []
    for path in sorted(layer.rglob("*.py")):
        bad = sorted(m for m in _imports_of(path) if m.startswith(forbidden))
        if bad:
            out.append(f"{path.relative_to(_SRC)}: {', '.join(bad)}")
    return out


def test_core_does_not_depend_on_interactive() -> None:
    # core はウィンドウも音も知らない。
    assert _violations(_PACKAGE / "core", ("boxbreath.interactive", "boxbreath.api", "pyglet")) == []


def test_interactive_does_not_depend_on_api() -> None:
    assert _violations(_PACKAGE / "interactive", ("boxbreath.api",)) == []


def _import_from(source: str) -> ast.ImportFrom:
    (node,) = ast.parse(source).body
    assert isinstance(node, ast.ImportFrom)
    return node


@pytest.mark.parametrize(
    ("source", "module", "is_package", "expected"),
    [
        (
            "from ..interactive import runtime\n",
            "boxbreath.core.render_plan",
            False,
            {"boxbreath.interactive", "boxbreath.interactive.runtime"},
        ),
        ("from boxbreath import api\n", "boxbreath.core.render_plan", False, {"boxbreath", "boxbreath.api"}),
        ("from .runner import run\n", "boxbreath.api", True, {"boxbreath.api.runner", "boxbreath.api.runner.run"}),
        ("from ..interactive import *\n", "boxbreath.core.session", False, {"boxbreath.interactive"}),
    ],
)
def test_from_targets_resolves_relative_and_absolute_imports(
    source: str, module: str, is_package: bool, expected: set[str]
) -> None:
    assert _from_targets(module, is_package, _import_from(source)) == expected


def test_from_targets_rejects_imports_above_the_top_package() -> None:
    with pytest.raises(ValueError):
        _from_targets("boxbreath.core", True, _import_from("from ...interactive import gl\n"))
