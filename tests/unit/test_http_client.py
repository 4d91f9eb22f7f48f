"""
Unit tests for PageFetcher.
"""

import httpx
import pytest

from readerview.config import HTTPConfig
from readerview.crawler import PageFetcher
from readerview.exceptions import FetchError


def fetcher_for(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
    return PageFetcher(client=client), client


class TestPageFetcher:
    """Test cases for PageFetcher.fetch."""

    def test_follows_redirects(self):
        """The final URL after redirects is reported."""

        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "http://example.com/new"})
            return httpx.Response(200, content=b"<p>hello</p>")

        fetcher, _ = fetcher_for(handler)
        body, final_url = fetcher.fetch("http://example.com/old")
        assert body == b"<p>hello</p>"
        assert final_url == "http://example.com/new"

    def test_status_error(self):
        fetcher, _ = fetcher_for(lambda request: httpx.Response(404))
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch("http://example.com/missing")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "failed to fetch web page: 404 Not Found"
        assert exc_info.value.details == {"url": "http://example.com/missing", "status_code": 404}

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher, _ = fetcher_for(handler)
        with pytest.raises(FetchError) as exc_info:
            fetcher.fetch("http://example.com/")
        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message

    def test_injected_client_left_open(self):
        """Only clients the fetcher created are closed by it."""
        fetcher, client = fetcher_for(lambda request: httpx.Response(200))
        with fetcher:
            pass
        assert not client.is_closed

    def test_owned_client(self):
        fetcher = PageFetcher(HTTPConfig(timeout=3, user_agent="reader-test/1.0", max_redirects=2))
        assert fetcher._client.headers["User-Agent"] == "reader-test/1.0"
        assert fetcher._client.max_redirects == 2
        fetcher.close()
        assert fetcher._client.is_closed
