# どこで: `src/boxbreath/__main__.py`。
# 何を: `python -m boxbreath` の CLI（引数解析 + logging 初期化 + run 呼び出し）を提供する。
# なぜ: 設定ファイルを書かずに、よく使う値をコマンドラインから上書きして起動できるようにするため。

from __future__ import annotations

import argparse
import logging

from boxbreath.core.runtime_config import runtime_config, set_config_path


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    set_config_path(args.config)
    cfg = runtime_config()
    level = "DEBUG" if args.verbose else cfg.log_level
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # GUI 依存は引数解析と設定検証の後に読み込む。
    from boxbreath.api import run

    run(
        config_path=args.config,
        phase_duration=args.phase_duration,
        time_limit=args.time_limit,
        sound=args.sound,
        reduced_motion=args.reduced_motion,
        fps=args.fps,
        autostart=args.start,
    )
    return 0


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="boxbreath", description="Box breathing session timer")
    p.add_argument("--config", default=None, help="config.yaml のパス（探索より優先）")
    p.add_argument("--phase-duration", type=int, default=None, help="1 フェーズの秒数（3..6）")
    p.add_argument("--time-limit", type=int, default=None, help="時間制限（分）。0 は 1 サイクルで終了")
    p.add_argument(
        "--sound",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="フェーズ切り替えのキュー音",
    )
    p.add_argument(
        "--reduced-motion",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="動きを抑えた描画",
    )
    p.add_argument("--fps", type=float, default=None, help="目標フレームレート（<=0 で無制限）")
    p.add_argument("--start", action="store_true", help="起動直後にセッションを開始する")
    p.add_argument("--verbose", "-v", action="store_true", help="DEBUG ログを出す")
    ns = p.parse_args(argv)
    if ns.time_limit is not None and ns.time_limit < 0:
        p.error("--time-limit は 0 以上である必要があります")
    return ns


if __name__ == "__main__":
    raise SystemExit(main())
