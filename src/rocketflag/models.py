"""rocketflag データモデル"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    import httpx

DEFAULT_API_URL = "https://api.rocketflag.app"
DEFAULT_VERSION = "v1"

ContextValue = str | int | float | bool
UserContext = Mapping[str, ContextValue]

_T = TypeVar("_T")


def _field(data: Mapping[str, Any], key: str, expected: type[_T], default: _T) -> _T:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise TypeError(
            f"field '{key}' must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


@dataclass(frozen=True)
class FlagStatus:
    """フィーチャーフラグの状態。"""

    name: str
    enabled: bool
    id: str

    @classmethod
    def from_dict(cls, data: Any) -> FlagStatus:
        """API レスポンスの JSON オブジェクトから FlagStatus を生成する。

        未知のフィールドは無視し、欠けているフィールドはゼロ値になる。
        型が一致しないフィールドは TypeError とする。
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        return cls(
            name=_field(data, "name", str, ""),
            enabled=_field(data, "enabled", bool, False),
            id=_field(data, "id", str, ""),
        )


@dataclass(frozen=True)
class ClientConfig:
    """構築済みのクライアント設定。構築後は変更しない。"""

    api_url: str
    version: str
    http_client: httpx.Client | httpx.AsyncClient
    timeout: float | None = None

    def flag_url(self, flag_id: str) -> str:
        return f"{self.api_url}/{self.version}/flags/{flag_id}"


@dataclass
class ClientConfigBuilder:
    """オプションを順に適用するための可変ビルダー。"""

    api_url: str = DEFAULT_API_URL
    version: str = DEFAULT_VERSION
    http_client: httpx.Client | httpx.AsyncClient | None = None
    # 自前で生成する httpx クライアントにのみ適用する
    timeout: float | None = None

    def build(self, default_http_client: httpx.Client | httpx.AsyncClient) -> ClientConfig:
        return ClientConfig(
            api_url=self.api_url,
            version=self.version,
            http_client=self.http_client if self.http_client is not None else default_http_client,
            timeout=self.timeout,
        )
