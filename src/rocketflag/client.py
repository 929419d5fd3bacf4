"""RocketFlag HTTP クライアント実装"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal
from types import TracebackType
from typing import TypeVar, cast

import httpx

from .exceptions import RocketFlagError, RocketFlagErrorCodes
from .models import ClientConfig, FlagStatus, UserContext
from .options import ClientOption, apply_options

logger = logging.getLogger(__name__)

_HttpClientT = TypeVar("_HttpClientT", httpx.Client, httpx.AsyncClient)

# RFC 3986 の reg-name と IP リテラル（httpx は角括弧を外して保持する）
_HOST_PATTERN = re.compile(r"[A-Za-z0-9\-._~!$&'()*+,;=:]+")


def _format_float(value: float) -> str:
    """最短桁で文字列化する。

    10 進指数が -4 未満または 6 以上なら指数形式（1e+06）、整数値は小数点なし（1）、
    非有限値は NaN / +Inf / -Inf とする。
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    # normalize で先頭・末尾の 0 を落とした最短桁を得る
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    point = len(digits) + int(exponent)
    prefix = "-" if sign else ""
    magnitude = point - 1
    if magnitude < -4 or magnitude >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if magnitude < 0 else '+'}{abs(magnitude):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _render_value(key: str, value: object) -> str:
    # bool は int のサブクラスなので先に判定する
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int)):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    raise RocketFlagError(
        code=RocketFlagErrorCodes.INVALID_CONTEXT,
        message=f"invalid user context value for '{key}': {type(value).__name__}",
    )


def _flag_url(config: ClientConfig, flag_id: str, user_context: UserContext | None) -> httpx.URL:
    """フラグ取得用の URL を組み立てる。クエリはコンテキストの反復順。"""
    params = [(key, _render_value(key, value)) for key, value in (user_context or {}).items()]
    raw = config.flag_url(flag_id)
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.URL_PARSE,
            message=f"error parsing URL: {e}",
            cause=e,
        ) from e
    if not url.scheme or not url.host:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.URL_PARSE,
            message=f"error parsing URL: {raw!r} is not an absolute URL",
        )
    # httpx はホストの不正文字をエラーにせずパーセントエンコードする
    if not _HOST_PATTERN.fullmatch(url.raw_host.decode("ascii")):
        raise RocketFlagError(
            code=RocketFlagErrorCodes.URL_PARSE,
            message=f"error parsing URL: invalid host {url.host!r}",
        )
    if params:
        url = url.copy_merge_params(params)
    return url


def _owned_client(factory: type[_HttpClientT], timeout: float | None) -> _HttpClientT:
    """インスタンス専用の httpx クライアントを生成する。未指定なら httpx のデフォルトタイムアウト。"""
    if timeout is None:
        return factory()
    return factory(timeout=timeout)


def _build_request(http_client: httpx.Client | httpx.AsyncClient, url: httpx.URL) -> httpx.Request:
    try:
        return http_client.build_request("GET", url)
    except Exception as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.REQUEST_BUILD,
            message=f"error creating request: {e}",
            cause=e,
        ) from e


def _request_error(e: httpx.HTTPError) -> RocketFlagError:
    return RocketFlagError(
        code=RocketFlagErrorCodes.REQUEST,
        message=f"error making request: {e}",
        cause=e,
    )


def _check_status(response: httpx.Response) -> None:
    if response.status_code != httpx.codes.OK:
        status = f"{response.status_code} {response.reason_phrase}".rstrip()
        raise RocketFlagError(
            code=RocketFlagErrorCodes.SERVER,
            message=f"error from server: {status}",
            status_code=response.status_code,
        )


def _decode(response: httpx.Response) -> FlagStatus:
    try:
        return FlagStatus.from_dict(response.json())
    except (ValueError, TypeError) as e:
        raise RocketFlagError(
            code=RocketFlagErrorCodes.DECODE,
            message=f"error decoding response: {e}",
            cause=e,
        ) from e


class RocketFlagClient:
    """httpx.Client を使った RocketFlag クライアント。

    オプションは指定順に適用され、同じ項目を設定した場合は後勝ちになる。
    with_http_client を指定しない場合はインスタンス専用の httpx.Client を生成し、
    close() で閉じる。構築時に通信は行わない。

    Example:
        with RocketFlagClient(with_version("v2")) as client:
            flag = client.get_flag("checkout-v2", {"cohort": "beta"})
    """

    def __init__(self, *options: ClientOption) -> None:
        builder = apply_options(options)
        self._owns_http_client = builder.http_client is None
        self._config = builder.build(
            _owned_client(httpx.Client, builder.timeout)
            if self._owns_http_client
            else cast(httpx.Client, builder.http_client)
        )
        self._http_client = cast(httpx.Client, self._config.http_client)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def get_flag(self, flag_id: str, user_context: UserContext | None = None) -> FlagStatus:
        """フラグの状態を取得する。

        Args:
            flag_id: フラグ ID
            user_context: クエリパラメータとして送るユーザーコンテキスト（cohort など）

        Returns:
            デコード済みの FlagStatus

        Raises:
            RocketFlagError: URL 不正、リクエスト失敗、200 以外のステータス、デコード失敗
        """
        url = _flag_url(self._config, flag_id, user_context)
        request = _build_request(self._http_client, url)
        logger.debug("GET %s", url)
        try:
            response = self._http_client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise _request_error(e) from e
        try:
            logger.debug("flag %s: HTTP %d", flag_id, response.status_code)
            _check_status(response)
            try:
                response.read()
            except httpx.HTTPError as e:
                raise _request_error(e) from e
            return _decode(response)
        finally:
            response.close()

    def close(self) -> None:
        """自前で生成した httpx.Client を閉じる。"""
        if self._owns_http_client:
            self._http_client.close()

    def __enter__(self) -> RocketFlagClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncRocketFlagClient:
    """httpx.AsyncClient を使った RocketFlag 非同期クライアント。"""

    def __init__(self, *options: ClientOption) -> None:
        builder = apply_options(options)
        self._owns_http_client = builder.http_client is None
        self._config = builder.build(
            _owned_client(httpx.AsyncClient, builder.timeout)
            if self._owns_http_client
            else cast(httpx.AsyncClient, builder.http_client)
        )
        self._http_client = cast(httpx.AsyncClient, self._config.http_client)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def get_flag(self, flag_id: str, user_context: UserContext | None = None) -> FlagStatus:
        """非同期でフラグの状態を取得する。

        send はレスポンス本文を読み切ってから返るため、待機は送信の 1 回のみ。
        """
        url = _flag_url(self._config, flag_id, user_context)
        request = _build_request(self._http_client, url)
        logger.debug("GET %s", url)
        try:
            response = await self._http_client.send(request)
        except httpx.HTTPError as e:
            raise _request_error(e) from e
        logger.debug("flag %s: HTTP %d", flag_id, response.status_code)
        _check_status(response)
        return _decode(response)

    async def aclose(self) -> None:
        """自前で生成した httpx.AsyncClient を閉じる。"""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> AsyncRocketFlagClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
