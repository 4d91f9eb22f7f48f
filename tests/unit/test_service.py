"""
Unit tests for the service layer shared by the CLI and the web app.
"""

import io
import json

import httpx
import pytest

from readerview.config import Config
from readerview.crawler import PageFetcher
from readerview.exceptions import DocumentTooLargeError, FetchError, NotReaderableError, ReaderViewError
from readerview.extractor.models import Article
from readerview.service import (
    FAKE_PAGE_URL,
    NOT_READERABLE_WARNING,
    OutputMode,
    ReaderService,
    is_http_url,
    render_article,
)

SHORT_PAGE = b"<h1>Hello World</h1><p>This is an article.</p>"
SHORT_CONTENT = '<div id="readability-page-1" class="page"><h2>Hello World</h2><p>This is an article.</p></div>'


@pytest.fixture
def service():
    service = ReaderService(Config())
    yield service
    service.close()


class TestHelpers:
    """Test cases for the module helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("http://example.com/a", True),
            ("https://example.com", True),
            ("file:///etc/passwd", False),
            ("page.html", False),
            ("http://", False),
            ("-", False),
            ("http://[oops", False),
        ],
    )
    def test_is_http_url(self, value, expected):
        assert is_http_url(value) is expected

    def test_output_mode_from_flags(self):
        """Metadata wins over text; html is the default."""
        assert OutputMode.from_flags() is OutputMode.HTML
        assert OutputMode.from_flags(text_only=True) is OutputMode.TEXT
        assert OutputMode.from_flags(metadata_only=True, text_only=True) is OutputMode.METADATA

    def test_render_article(self):
        article = Article(title="Título", byline="Ana", content="<p>x</p>", text_content="x", image="i.png")
        assert render_article(article, OutputMode.HTML) == "<p>x</p>"
        assert render_article(article, OutputMode.TEXT) == "x"
        rendered = render_article(article, OutputMode.METADATA)
        assert json.loads(rendered) == {
            "byline": "Ana",
            "excerpt": "",
            "favicon": "",
            "image": "i.png",
            "title": "Título",
        }
        assert "Título" in rendered
        assert rendered.startswith('{\n    "byline"')


class TestLoadSource:
    """Test cases for ReaderService.load_source."""

    def test_file(self, service, tmp_path):
        path = tmp_path / "page.html"
        path.write_bytes(SHORT_PAGE)
        source = service.load_source(str(path))
        assert source.markup == SHORT_PAGE
        assert source.page_url == FAKE_PAGE_URL

    def test_stdin(self, service):
        source = service.load_source("-", stdin=io.BytesIO(SHORT_PAGE))
        assert source.markup == SHORT_PAGE
        assert source.page_url == FAKE_PAGE_URL

    def test_missing_file(self, service, tmp_path):
        with pytest.raises(ReaderViewError) as exc_info:
            service.load_source(str(tmp_path / "missing.html"))
        assert exc_info.value.message.startswith("failed to open source file:")

    def test_url(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=SHORT_PAGE))
        service = ReaderService(fetcher=PageFetcher(client=httpx.Client(transport=transport)))
        source = service.load_source("http://example.com/story")
        assert source.markup == SHORT_PAGE
        assert source.page_url == "http://example.com/story"

    def test_fetcher_shared(self):
        """The fetcher exists from construction and is closed with the service."""
        service = ReaderService(Config(http={"user_agent": "reader-test/1.0"}))
        fetcher = service.fetcher
        assert fetcher.config.user_agent == "reader-test/1.0"
        service.close()
        assert fetcher._client.is_closed

    def test_url_failure(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        service = ReaderService(fetcher=PageFetcher(client=httpx.Client(transport=transport)))
        with pytest.raises(FetchError):
            service.load_source("http://example.com/story")


class TestGetContent:
    """Test cases for ReaderService.get_content."""

    def test_not_readerable(self, service):
        with pytest.raises(NotReaderableError) as exc_info:
            service.get_content("-", stdin=io.BytesIO(SHORT_PAGE))
        assert exc_info.value.message == "failed to detect readable content on the page"

    def test_forced(self, service):
        """Forcing skips the gate and emits a warning."""
        warnings = []
        content = service.get_content("-", force=True, stdin=io.BytesIO(SHORT_PAGE), warn=warnings.append)
        assert content == SHORT_CONTENT
        assert warnings == [NOT_READERABLE_WARNING]

    def test_text_mode(self, service):
        content = service.get_content("-", mode=OutputMode.TEXT, force=True, stdin=io.BytesIO(SHORT_PAGE))
        assert content == "Hello World\n\nThis is an article."

    def test_readerable_page(self, service, article_html):
        content = service.get_content("-", mode=OutputMode.METADATA, stdin=io.BytesIO(article_html.encode()))
        metadata = json.loads(content)
        assert metadata["title"] == "Reading Without Clutter"
        assert metadata["favicon"] == "http://fakehost.com/favicon.ico"

    def test_parser_settings_applied(self, article_html):
        service = ReaderService(Config(parser={"max_elements_to_parse": 5}))
        with pytest.raises(DocumentTooLargeError):
            service.get_content("-", stdin=io.BytesIO(article_html.encode()))
