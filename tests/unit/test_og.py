"""Unit tests for social preview lookup."""

import httpx
import pytest

from sheepit.utils.og import extract_og_image, fetch_og_image

PAGE = "https://site.example.com/blog/post"


class TestExtractOgImage:
    def test_property_then_content(self):
        html = '<head><meta property="og:image" content="https://cdn.example.com/a.png"></head>'

        assert extract_og_image(html, PAGE) == "https://cdn.example.com/a.png"

    def test_content_then_property(self):
        html = "<meta content='https://cdn.example.com/b.png' property='og:image' />"

        assert extract_og_image(html, PAGE) == "https://cdn.example.com/b.png"

    def test_protocol_relative(self):
        html = '<meta property="og:image" content="//cdn.example.com/c.png">'

        assert extract_og_image(html, PAGE) == "https://cdn.example.com/c.png"

    def test_root_relative(self):
        html = '<meta property="og:image" content="/og.png">'

        assert extract_og_image(html, PAGE) == "https://site.example.com/og.png"

    def test_missing(self):
        assert extract_og_image("<html><head></head></html>", PAGE) is None


class TestFetchOgImage:
    @pytest.mark.asyncio
    async def test_fetches_page(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["User-Agent"] == "SheepIt-Bot/1.0"
            return httpx.Response(200, text='<meta property="og:image" content="/og.png">')

        image = await fetch_og_image(PAGE, transport=httpx.MockTransport(handler))

        assert image == "https://site.example.com/og.png"

    @pytest.mark.asyncio
    async def test_failures_return_none(self):
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        def not_found(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        assert await fetch_og_image(PAGE, transport=httpx.MockTransport(timeout)) is None
        assert await fetch_og_image(PAGE, transport=httpx.MockTransport(not_found)) is None
