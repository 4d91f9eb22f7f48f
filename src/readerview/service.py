"""
Source loading and output rendering shared by the CLI and the web app.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Optional
from urllib.parse import urlparse

from .config.config import Config
from .crawler.http_client import PageFetcher
from .exceptions import NotReaderableError, ReaderViewError
from .extractor.dom import parse_html
from .extractor.models import Article
from .extractor.parser import Parser
from .extractor.readerable import is_probably_readerable
from .observability.logging import get_debug_logger, get_logger

logger = get_logger(__name__)

STDIN_PATH = "-"
# Page URL for documents read from files or stdin.
FAKE_PAGE_URL = "http://fakehost.com"
NOT_READERABLE_WARNING = "warning: the page might not have article contents"
METADATA_FIELDS = ("title", "byline", "excerpt", "image", "favicon")


class OutputMode(str, Enum):
    HTML = "html"
    TEXT = "text"
    METADATA = "metadata"

    @classmethod
    def from_flags(cls, metadata_only: bool = False, text_only: bool = False) -> OutputMode:
        if metadata_only:
            return cls.METADATA
        if text_only:
            return cls.TEXT
        return cls.HTML


@dataclass
class Source:
    markup: bytes
    page_url: str


def is_http_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme.startswith("http") and bool(parsed.netloc)


def render_article(article: Article, mode: OutputMode) -> str:
    if mode is OutputMode.METADATA:
        metadata = {name: getattr(article, name) for name in METADATA_FIELDS}
        return json.dumps(metadata, indent=4, sort_keys=True, ensure_ascii=False)
    if mode is OutputMode.TEXT:
        return article.text_content
    return article.content


class ReaderService:
    """Loads a page from a URL, a file or stdin and renders its article."""

    def __init__(self, config: Optional[Config] = None, fetcher: Optional[PageFetcher] = None) -> None:
        self.config = config or Config()
        # One fetcher per service; concurrent web requests share it.
        self.fetcher = fetcher or PageFetcher(self.config.http)

    def load_source(self, path: str, stdin: Optional[BinaryIO] = None) -> Source:
        if is_http_url(path):
            markup, final_url = self.fetcher.fetch(path)
            return Source(markup=markup, page_url=final_url)
        if path == STDIN_PATH:
            stream = stdin if stdin is not None else sys.stdin.buffer
            return Source(markup=stream.read(), page_url=FAKE_PAGE_URL)
        try:
            with open(path, "rb") as f:
                return Source(markup=f.read(), page_url=FAKE_PAGE_URL)
        except OSError as e:
            raise ReaderViewError(f"failed to open source file: {e}", details={"path": path}) from e

    def get_content(
        self,
        path: str,
        mode: OutputMode = OutputMode.HTML,
        force: bool = False,
        verbose: bool = False,
        stdin: Optional[BinaryIO] = None,
        warn: Optional[Callable[[str], None]] = None,
    ) -> str:
        """
        Extract the article of `path` and render it in `mode`.

        Raises:
            NotReaderableError: the page failed the readerable check and
                `force` is off
            ReaderViewError: the source could not be loaded or parsed
        """
        source = self.load_source(path, stdin=stdin)
        doc = parse_html(source.markup)

        if not is_probably_readerable(doc):
            if not force:
                raise NotReaderableError()
            if warn is not None:
                warn(NOT_READERABLE_WARNING)

        parser_logger = get_debug_logger() if verbose else None
        parser = Parser(self.config.parser, logger=parser_logger)
        article = parser.parse_and_mutate(doc, source.page_url)
        logger.debug("article extracted", source=path, length=article.length, mode=mode.value)
        return render_article(article, mode)

    def close(self) -> None:
        self.fetcher.close()
