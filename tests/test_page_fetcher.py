"""Tests for HTTP error mapping."""

import httpx
import pytest

from newsagg.ingestion import NetworkFailure, PageFetcher, ParseFailure

from conftest import mock_fetcher


@pytest.mark.parametrize(
    "status,message",
    [(404, "Not found (404)"), (403, "Access forbidden (403)"), (502, "Server error (502)"), (429, "HTTP 429")],
)
async def test_status_errors(status, message):
    fetcher = mock_fetcher({"https://x.ru/feed": status})

    with pytest.raises(NetworkFailure) as info:
        await fetcher.get("https://x.ru/feed")

    assert str(info.value) == message
    assert info.value.url == "https://x.ru/feed"


async def test_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    fetcher = PageFetcher(transport=httpx.MockTransport(handler))

    with pytest.raises(NetworkFailure, match="timed out"):
        await fetcher.get("https://x.ru/feed")


async def test_invalid_json():
    fetcher = mock_fetcher({"https://x.ru/api": "not json"})

    with pytest.raises(ParseFailure):
        await fetcher.get_json("https://x.ru/api")


async def test_sends_user_agent():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["user-agent"])
        return httpx.Response(200, text="ok")

    fetcher = PageFetcher(user_agent="TestAgent/1.0", transport=httpx.MockTransport(handler))

    assert await fetcher.get_text("https://x.ru/") == "ok"
    assert seen == ["TestAgent/1.0"]
