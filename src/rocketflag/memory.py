"""InMemoryRocketFlagClient 実装"""

from __future__ import annotations

from .exceptions import RocketFlagError, RocketFlagErrorCodes
from .models import FlagStatus, UserContext


class InMemoryRocketFlagClient:
    """テスト用インメモリ RocketFlag クライアント。"""

    def __init__(self) -> None:
        self._flags: dict[str, FlagStatus] = {}
        self.calls: list[tuple[str, dict[str, object]]] = []

    def set_flag(self, flag: FlagStatus) -> None:
        """フラグを設定する。"""
        self._flags[flag.id] = flag

    def get_flag(self, flag_id: str, user_context: UserContext | None = None) -> FlagStatus:
        self.calls.append((flag_id, dict(user_context or {})))
        flag = self._flags.get(flag_id)
        if flag is None:
            raise RocketFlagError(
                code=RocketFlagErrorCodes.SERVER,
                message="error from server: 404 Not Found",
                status_code=404,
            )
        return flag
