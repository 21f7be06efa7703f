import httpx
import pytest

from knife4j_mcp.errors import FetchError
from knife4j_mcp.fetch import HttpFetcher


def _fetcher(handler) -> HttpFetcher:
    return HttpFetcher(timeout=5, transport=httpx.MockTransport(handler))


class TestHttpFetcher:
    async def test_returns_decoded_json(self):
        def handler(request):
            assert request.headers["accept"] == "application/json"
            return httpx.Response(200, json={"openapi": "3.0.0"})

        assert await _fetcher(handler).fetch("http://docs/v3/api-docs") == {"openapi": "3.0.0"}

    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "http://docs/new"})
            return httpx.Response(200, json={"swagger": "2.0"})

        assert await _fetcher(handler).fetch("http://docs/old") == {"swagger": "2.0"}

    async def test_http_error_status(self):
        fetcher = _fetcher(lambda request: httpx.Response(404))
        with pytest.raises(FetchError, match="HTTP 404") as exc_info:
            await fetcher.fetch("http://docs/missing")
        assert exc_info.value.url == "http://docs/missing"

    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError, match="connection refused"):
            await _fetcher(handler).fetch("http://docs/down")

    async def test_non_json_body(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, text="<html>login</html>"))
        with pytest.raises(FetchError, match="not valid JSON"):
            await fetcher.fetch("http://docs/html")
