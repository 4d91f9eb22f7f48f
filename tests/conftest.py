"""
Shared fixtures for the readerview test suite.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import pytest
import structlog

from readerview.config import ParserConfig
from readerview.config.config import LazyConfig
from readerview.extractor.dom import parse_html
from readerview.extractor.models import ParseContext
from readerview.observability.logging import PACKAGE_LOGGER

ARTICLE_PARAGRAPH = (
    "Readers have long preferred pages that put the story first, with the navigation, "
    "advertising and comment widgets moved out of the way, so that the text can be read "
    "at a comfortable pace without distraction."
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: end-to-end extraction over complete documents")


@pytest.fixture(autouse=True)
def isolate_logging_and_settings():
    """Keep package logger handlers and the lazy settings from leaking between tests."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    LazyConfig.reset()
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    LazyConfig.reset()


@pytest.fixture
def logger() -> Any:
    """A structlog logger that drops every event."""
    return structlog.wrap_logger(
        structlog.ReturnLogger(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
    )


@pytest.fixture
def make_context(logger) -> Callable[..., ParseContext]:
    """Build a ParseContext over freshly parsed markup."""

    def _make(markup: str, page_url: str = "http://example.com/articles/one.html", **config: Any) -> ParseContext:
        return ParseContext(
            doc=parse_html(markup),
            config=ParserConfig(**config),
            logger=logger,
            page_url=page_url,
        )

    return _make


@pytest.fixture
def article_html() -> str:
    """A small but complete article page with navigation chrome."""
    paragraphs = "\n".join(f"<p>{ARTICLE_PARAGRAPH} Paragraph {i}, with commas, here.</p>" for i in range(6))
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Reading Without Clutter | The Daily Page</title>
  <meta property="og:site_name" content="The Daily Page">
  <meta property="og:image" content="/images/lead.jpg">
  <meta name="description" content="Why reader mode matters.">
  <meta property="article:published_time" content="2024-03-05T10:30:00Z">
  <link rel="icon" href="/favicon.ico">
</head>
<body>
  <nav class="menu"><a href="/">Home</a> <a href="/news">News</a></nav>
  <div id="main">
    <article class="post">
      <h1>Reading Without Clutter</h1>
      <p class="byline">By Jane Reader</p>
      {paragraphs}
      <p><a href="/related">Related story</a> and an image <img src="photo.jpg" alt="A photo"></p>
    </article>
  </div>
  <div class="sidebar comments"><p>Comment one</p><p>Comment two</p></div>
  <footer class="footer">Copyright The Daily Page</footer>
</body>
</html>"""
