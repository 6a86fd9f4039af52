#!/usr/bin/env python3
"""
Web Tool Module

Fetches a URL over HTTP(S) and returns the response body as text.

- Only http and https URLs are accepted; anything else is rejected before
  a connection is attempted
- 30 second total request timeout
- Non-2xx responses and bodies that are not UTF-8 are reported as errors
- Bodies longer than 50,000 characters are truncated

Usage:
    from tools.web_tool import WebTool

    result = await WebTool().execute({"url": JSONValue.string("https://example.com")})
"""

import asyncio
import logging
from typing import Optional, Tuple
from urllib.parse import urlsplit

import aiohttp

from tools.base import Arguments, Tool, ToolParameter, ToolResult

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
MAX_RESPONSE_CHARS = 50_000
ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> Tuple[Optional[str], Optional[str]]:
    """Check a URL without touching the network.

    Returns:
        (url, None) when the URL may be fetched, (None, error message) otherwise.
    """
    try:
        parts = urlsplit(url.strip())
        # accessing .port raises ValueError for out-of-range or non-numeric ports
        parts.port
    except ValueError:
        return None, f"Invalid URL: {url}"

    if not parts.scheme:
        return None, f"Invalid URL: {url}"
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return None, "Only http and https URLs are supported."
    if not parts.hostname:
        return None, f"Invalid URL: {url}"
    return parts.geturl(), None


class WebTool(Tool):
    name = "web"
    description = "Fetch a URL and return its text content."
    parameters = (
        ToolParameter(
            name="url",
            description="The URL to fetch. Must use http or https scheme.",
        ),
    )

    def __init__(self, timeout: float = REQUEST_TIMEOUT, max_chars: int = MAX_RESPONSE_CHARS):
        self.timeout = timeout
        self.max_chars = max_chars

    async def execute(self, arguments: Arguments) -> ToolResult:
        url_value = arguments.get("url")
        raw_url = url_value.string_value if url_value else None
        if raw_url is None:
            return ToolResult.failure("Missing required parameter: url")

        url, error = validate_url(raw_url)
        if error:
            return ToolResult.failure(error)

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(url) as response:
                    status = response.status
                    data = await response.read()
        except asyncio.TimeoutError:
            return ToolResult.failure(f"Failed to fetch URL: request timed out after {self.timeout:g}s")
        except aiohttp.ClientError as e:
            logger.debug("Fetch of %s failed: %s", url, e)
            return ToolResult.failure(f"Failed to fetch URL: {e}")

        if not 200 <= status <= 299:
            return ToolResult.failure(f"HTTP {status}")

        try:
            body = data.decode("utf-8")
        except UnicodeDecodeError:
            return ToolResult.failure("Response body is not valid UTF-8 text.")

        if len(body) > self.max_chars:
            return ToolResult.success(
                body[:self.max_chars] + f"\n\n[Truncated: response exceeded {self.max_chars} characters]"
            )
        return ToolResult.success(body)
