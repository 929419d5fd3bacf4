"""クライアント構築オプション"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import httpx

from .models import ClientConfigBuilder

ClientOption = Callable[[ClientConfigBuilder], None]


def with_api_url(api_url: str) -> ClientOption:
    """API のベース URL を設定する。URL の検証は get_flag 時に行う。"""

    def apply(builder: ClientConfigBuilder) -> None:
        builder.api_url = api_url

    return apply


def with_version(version: str) -> ClientOption:
    """API バージョンを設定する。"""

    def apply(builder: ClientConfigBuilder) -> None:
        builder.version = version

    return apply


def with_http_client(http_client: httpx.Client | httpx.AsyncClient) -> ClientOption:
    """リクエスト送信に使う httpx クライアントを設定する。

    指定されたクライアントは呼び出し側の所有物として扱い、close しない。
    """

    def apply(builder: ClientConfigBuilder) -> None:
        builder.http_client = http_client

    return apply


def with_timeout(seconds: float) -> ClientOption:
    """自前で生成する httpx クライアントのタイムアウト秒数を設定する。

    with_http_client で渡したクライアントには適用しない。
    """

    def apply(builder: ClientConfigBuilder) -> None:
        builder.timeout = seconds

    return apply


def apply_options(options: Iterable[ClientOption]) -> ClientConfigBuilder:
    """オプションを指定順に適用したビルダーを返す。同じ項目は後勝ち。"""
    builder = ClientConfigBuilder()
    for option in options:
        option(builder)
    return builder
