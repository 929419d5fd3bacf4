"""AsyncRocketFlagClient のユニットテスト（respx / MockTransport モック）"""

import httpx
import pytest
import respx
from rocketflag import (
    AsyncRocketFlagClient,
    FlagStatus,
    RocketFlagError,
    RocketFlagErrorCodes,
    with_api_url,
    with_http_client,
)

BASE_URL = "https://api.rocketflag.app"
FLAG_JSON = {"name": "test-flag", "enabled": True, "id": "123"}


@respx.mock
async def test_get_flag_success() -> None:
    """200 レスポンスから FlagStatus が返ること。"""
    respx.get(f"{BASE_URL}/v1/flags/123").mock(return_value=httpx.Response(200, json=FLAG_JSON))
    async with AsyncRocketFlagClient() as client:
        flag = await client.get_flag("123")
    assert flag == FlagStatus(name="test-flag", enabled=True, id="123")


async def test_get_flag_user_context_as_query() -> None:
    """ユーザーコンテキストがクエリパラメータになること。"""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=FLAG_JSON)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = AsyncRocketFlagClient(with_http_client(http_client))
    await client.get_flag("123", {"cohort": "beta", "id": 123, "active": False})
    assert requests[0].url.path == "/v1/flags/123"
    assert dict(requests[0].url.params) == {"cohort": "beta", "id": "123", "active": "false"}
    await http_client.aclose()


async def test_get_flag_url_parse_error() -> None:
    """不正な URL では URL_PARSE_ERROR となること。"""
    client = AsyncRocketFlagClient(with_api_url(":invalid-url"))
    with pytest.raises(RocketFlagError) as exc_info:
        await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.URL_PARSE
    await client.aclose()


async def test_get_flag_network_error() -> None:
    """ネットワークエラーの場合に REQUEST_ERROR となること。"""
    with respx.mock:
        respx.get(f"{BASE_URL}/v1/flags/123").mock(
            side_effect=httpx.ConnectError("Connection refused")
        )
        async with AsyncRocketFlagClient() as client:
            with pytest.raises(RocketFlagError) as exc_info:
                await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.REQUEST
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@respx.mock
async def test_get_flag_server_error() -> None:
    """500 の場合に SERVER_ERROR となること。"""
    respx.get(f"{BASE_URL}/v1/flags/123").mock(return_value=httpx.Response(500))
    async with AsyncRocketFlagClient() as client:
        with pytest.raises(RocketFlagError) as exc_info:
            await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.SERVER
    assert "500 Internal Server Error" in str(exc_info.value)


@respx.mock
async def test_get_flag_decode_error() -> None:
    """不正 JSON で DECODE_ERROR となること。"""
    respx.get(f"{BASE_URL}/v1/flags/123").mock(
        return_value=httpx.Response(200, text="invalid json")
    )
    async with AsyncRocketFlagClient() as client:
        with pytest.raises(RocketFlagError) as exc_info:
            await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.DECODE


async def test_aclose_keeps_supplied_http_client_open() -> None:
    """呼び出し側が渡した httpx.AsyncClient は閉じないこと。"""
    supplied = httpx.AsyncClient()
    async with AsyncRocketFlagClient(with_http_client(supplied)):
        pass
    assert supplied.is_closed is False
    await supplied.aclose()


async def test_get_flag_request_build_error() -> None:
    """リクエスト生成に失敗した場合に REQUEST_BUILD_ERROR となること。"""

    class BrokenClient(httpx.AsyncClient):
        def build_request(self, *args: object, **kwargs: object) -> httpx.Request:
            raise ValueError("invalid header value")

    http_client = BrokenClient()
    client = AsyncRocketFlagClient(with_http_client(http_client))
    with pytest.raises(RocketFlagError) as exc_info:
        await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.REQUEST_BUILD
    assert isinstance(exc_info.value.__cause__, ValueError)
    await http_client.aclose()


@pytest.mark.parametrize("value", [["a", "b"], {"nested": 1}, None])
async def test_get_flag_rejects_non_scalar_context(value: object) -> None:
    """スカラー以外のコンテキスト値は INVALID_CONTEXT となり通信しないこと。"""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=FLAG_JSON)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = AsyncRocketFlagClient(with_http_client(http_client))
    with pytest.raises(RocketFlagError) as exc_info:
        await client.get_flag("123", {"tags": value})  # type: ignore[dict-item]
    assert exc_info.value.code == RocketFlagErrorCodes.INVALID_CONTEXT
    assert requests == []
    await http_client.aclose()


async def test_get_flag_invalid_host() -> None:
    """ホストに不正文字を含む URL は URL_PARSE_ERROR となること。"""
    async with AsyncRocketFlagClient(with_api_url("https://api .x")) as client:
        with pytest.raises(RocketFlagError) as exc_info:
            await client.get_flag("123")
    assert exc_info.value.code == RocketFlagErrorCodes.URL_PARSE
