import asyncio
import json
import time

import httpx
import pytest

from yoto_cli.api.client import YotoApiClient
from yoto_cli.api.config import YotoApiConfig
from yoto_cli.api.exceptions import YotoAuthError, YotoNotFoundError, YotoResponseError
from yoto_cli.api.models import CardContent, Chapter, TokenData

CONFIG = YotoApiConfig(client_id="test-client")


def _client(handler, token: TokenData | None = None) -> YotoApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = YotoApiClient(CONFIG, http_client=http)
    if token:
        client.auth.set_token(token)
    return client


def _token(access: str = "tok", refresh: str | None = None, ttl: float = 3600) -> TokenData:
    return TokenData(access_token=access, refresh_token=refresh, expires_at=time.time() + ttl)


def test_update_content_posts_whole_document():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"card": json.loads(request.content)})

    async def run():
        async with _client(handler, _token()) as client:
            content = CardContent(chapters=[Chapter(key="00", title="One")])
            return await client.update_content("card1", "Title", content)

    card = asyncio.run(run())

    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/content"
    assert request.headers["Authorization"] == "Bearer tok"
    body = json.loads(request.content)
    assert body == {
        "cardId": "card1",
        "title": "Title",
        "content": {"chapters": [{"key": "00", "title": "One", "tracks": []}]},
    }
    assert card.content.chapters[0].title == "One"


def test_not_found_is_mapped():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="no such card")

    async def run():
        async with _client(handler, _token()) as client:
            await client.get_content("missing")

    with pytest.raises(YotoNotFoundError):
        asyncio.run(run())


def test_unexpected_shape_is_a_response_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"card": {"title": 5}})

    async def run():
        async with _client(handler, _token()) as client:
            await client.get_content("card1")

    with pytest.raises(YotoResponseError) as excinfo:
        asyncio.run(run())

    assert excinfo.value.errors


def test_upload_url_absent_when_already_stored():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"upload": {"uploadId": "u1", "uploadUrl": None}})

    async def run():
        async with _client(handler, _token()) as client:
            return await client.get_audio_upload_url("abc123", "song.mp3")

    response = asyncio.run(run())

    assert response.upload.upload_id == "u1"
    assert response.upload.upload_url is None
    assert requests[0].url.path == "/media/transcode/audio/uploadUrl"
    assert requests[0].url.params["sha256"] == "abc123"
    assert requests[0].url.params["filename"] == "song.mp3"


def test_requests_without_token_fail_before_sending():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[])

    async def run():
        async with _client(handler) as client:
            await client.get_my_content()

    with pytest.raises(YotoAuthError) as excinfo:
        asyncio.run(run())

    assert "yoto auth login" in str(excinfo.value)
    assert requests == []


def test_unauthorized_refreshes_once_and_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.url.host, request.url.path))
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "fresh", "expires_in": 3600})
        if request.headers["Authorization"] == "Bearer stale":
            return httpx.Response(401, text="expired")
        return httpx.Response(200, json={"cards": []})

    async def run():
        async with _client(handler, _token(access="stale", refresh="r1")) as client:
            cards = await client.get_my_content()
            return cards, client.auth.token_data

    cards, token = asyncio.run(run())

    assert cards == []
    assert token.access_token == "fresh"
    # refresh token kept when the server does not rotate it
    assert token.refresh_token == "r1"
    assert calls == [
        ("api.yotoplay.com", "/content/mine"),
        ("login.yotoplay.com", "/oauth/token"),
        ("api.yotoplay.com", "/content/mine"),
    ]


def test_device_command_payload():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    async def run():
        async with _client(handler, _token()) as client:
            await client.send_device_command("Y1", "volume", {"volume": 40})

    asyncio.run(run())

    assert requests[0].url.path == "/device-v2/Y1/command/volume"
    assert json.loads(requests[0].content) == {"volume": 40}
