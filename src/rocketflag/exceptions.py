"""rocketflag ライブラリの例外型定義"""

from __future__ import annotations


class RocketFlagError(Exception):
    """rocketflag ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class RocketFlagErrorCodes:
    """RocketFlagError のエラーコード定数。"""

    URL_PARSE: str = "URL_PARSE_ERROR"
    REQUEST_BUILD: str = "REQUEST_BUILD_ERROR"
    REQUEST: str = "REQUEST_ERROR"
    SERVER: str = "SERVER_ERROR"
    DECODE: str = "DECODE_ERROR"
    INVALID_CONTEXT: str = "INVALID_CONTEXT"
    CONFIG: str = "CONFIG_ERROR"
