"""RocketFlagClient プロトコル"""

from __future__ import annotations

from typing import Protocol

from .models import FlagStatus, UserContext


class RocketFlagClientProtocol(Protocol):
    """フラグ取得クライアントプロトコル。"""

    def get_flag(self, flag_id: str, user_context: UserContext | None = None) -> FlagStatus: ...
