"""Tests for the web tool, against a local aiohttp server."""

from unittest.mock import patch

import pytest
from aiohttp import web
from aiohttp import test_utils

from tools.base import JSONValue
from tools.web_tool import WebTool, validate_url


def _args(**kwargs):
    return {key: JSONValue.from_json(value) for key, value in kwargs.items()}


def _app():
    async def hello(request):
        return web.Response(text="hello from the test server")

    async def missing(request):
        return web.Response(status=404, text="nope")

    async def binary(request):
        return web.Response(body=b"\xff\xfe\x00\x81", content_type="application/octet-stream")

    async def big(request):
        return web.Response(text="y" * 200)

    app = web.Application()
    app.router.add_get("/hello", hello)
    app.router.add_get("/missing", missing)
    app.router.add_get("/binary", binary)
    app.router.add_get("/big", big)
    return app


# ── Validation Tests ──────────────────────────────────────────────────────

class TestValidateURL:

    @pytest.mark.parametrize("url", [
        "ftp://example.com/file",
        "file:///etc/passwd",
        "javascript:alert(1)",
        "mailto:someone@example.com",
    ])
    def test_non_http_schemes_rejected(self, url):
        checked, error = validate_url(url)
        assert checked is None
        assert error == "Only http and https URLs are supported."

    @pytest.mark.parametrize("url", ["", "not a url", "example.com/page", "http://", "http://host:99999/"])
    def test_unparseable(self, url):
        checked, error = validate_url(url)
        assert checked is None
        assert error.startswith("Invalid URL")

    @pytest.mark.parametrize("url", ["http://example.com", "https://example.com/a?b=c", "HTTPS://Example.com"])
    def test_accepted(self, url):
        checked, error = validate_url(url)
        assert error is None
        assert checked


class TestWebTool:

    @pytest.mark.asyncio
    async def test_scheme_rejected_before_network(self):
        with patch("tools.web_tool.aiohttp.ClientSession") as session_cls:
            result = await WebTool().execute(_args(url="file:///etc/passwd"))
        assert result.is_error
        session_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_url(self):
        result = await WebTool().execute({})
        assert result.is_error
        assert "url" in result.content

    @pytest.mark.asyncio
    async def test_fetch_text(self):
        async with test_utils.TestServer(_app()) as server:
            result = await WebTool().execute(_args(url=str(server.make_url("/hello"))))
        assert not result.is_error
        assert result.content == "hello from the test server"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async with test_utils.TestServer(_app()) as server:
            result = await WebTool().execute(_args(url=str(server.make_url("/missing"))))
        assert result.is_error
        assert result.content == "HTTP 404"

    @pytest.mark.asyncio
    async def test_non_utf8_body(self):
        async with test_utils.TestServer(_app()) as server:
            result = await WebTool().execute(_args(url=str(server.make_url("/binary"))))
        assert result.is_error
        assert "UTF-8" in result.content

    @pytest.mark.asyncio
    async def test_truncation(self):
        async with test_utils.TestServer(_app()) as server:
            result = await WebTool(max_chars=50).execute(_args(url=str(server.make_url("/big"))))
        assert not result.is_error
        assert result.content.startswith("y" * 50 + "\n\n[Truncated")
        assert "y" * 51 not in result.content

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        async with test_utils.TestServer(_app()) as server:
            url = str(server.make_url("/hello"))
        # server is closed now
        result = await WebTool().execute(_args(url=url))
        assert result.is_error
        assert result.content.startswith("Failed to fetch URL:")
