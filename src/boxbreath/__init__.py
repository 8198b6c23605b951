# どこで: `src/boxbreath/__init__.py`。
# 何を: ルート `boxbreath` パッケージを定義する。
# なぜ: import 起点を `boxbreath` に統一するため。

from __future__ import annotations

from boxbreath.api import run
from boxbreath.core.session import Phase, SessionConfig, SessionState, SessionStatus
from boxbreath.core.state_machine import SessionStateMachine

__all__ = ["Phase", "SessionConfig", "SessionState", "SessionStateMachine", "SessionStatus", "run"]
