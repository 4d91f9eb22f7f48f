"""
Tests for the FastAPI front end.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from readerview.config import Config
from readerview.crawler import PageFetcher
from readerview.service import ReaderService
from readerview.web.main import create_app, parse_bool


@pytest.fixture
def pages(article_html):
    """Remote pages served by the mock transport, keyed by path."""
    return {
        "/story": (200, article_html),
        "/short": (200, "<h1>Hello World</h1><p>This is an article.</p>"),
        "/gone": (404, "missing"),
    }


@pytest.fixture
def client(pages):
    def handler(request):
        status, body = pages.get(request.url.path, (404, ""))
        return httpx.Response(status, text=body)

    fetcher = PageFetcher(client=httpx.Client(transport=httpx.MockTransport(handler)))
    app = create_app(service=ReaderService(fetcher=fetcher))
    with TestClient(app) as test_client:
        yield test_client


class TestReadArticle:
    """Test cases for GET /."""

    def test_form(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<form action="/"' in response.text

    def test_html(self, client):
        response = client.get("/", params={"url": "http://example.com/story"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.text.startswith('<div id="readability-page-1" class="page">')
        assert 'href="http://example.com/related"' in response.text

    def test_text(self, client):
        response = client.get("/", params={"url": "http://example.com/story", "text": "true"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "<p>" not in response.text
        assert "Paragraph 0" in response.text

    def test_metadata(self, client):
        response = client.get("/", params={"url": "http://example.com/story", "metadata": "1", "text": "1"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        metadata = json.loads(response.text)
        assert metadata["title"] == "Reading Without Clutter"
        assert metadata["image"] == "http://example.com/images/lead.jpg"

    def test_not_readerable(self, client):
        response = client.get("/", params={"url": "http://example.com/short"})
        assert response.status_code == 400
        assert response.text == "failed to detect readable content on the page"

    def test_fetch_failure(self, client):
        response = client.get("/", params={"url": "http://example.com/gone"})
        assert response.status_code == 400
        assert response.text == "failed to fetch web page: 404 Not Found"

    @pytest.mark.parametrize("url", ["/etc/passwd", "file:///etc/passwd", "-"])
    def test_local_sources_rejected(self, client, url):
        """Only remote pages can be requested over HTTP."""
        response = client.get("/", params={"url": url})
        assert response.status_code == 400
        assert response.text.startswith("not an http(s) URL")

    def test_malformed_url(self, client):
        response = client.get("/", params={"url": "http://[oops"})
        assert response.status_code == 400
        assert response.text == "not an http(s) URL: http://[oops"


class TestCreateApp:
    """Test cases for the application factory."""

    def test_default_service_lifecycle(self):
        """The default service is built at startup and closed at shutdown."""
        app = create_app(Config())
        with TestClient(app) as test_client:
            service = app.state.service
            assert test_client.get("/").status_code == 200
        assert service.fetcher._client.is_closed


class TestParseBool:
    """Test cases for query flag parsing."""

    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true(self, value):
        assert parse_bool(value)

    @pytest.mark.parametrize("value", [None, "", "0", "yes", "on", "false"])
    def test_false(self, value):
        assert not parse_bool(value)
