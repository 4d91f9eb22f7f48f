"""
Parser: turns a page into an :class:`Article`.

Runs the extraction pipeline over a bs4 document: element ceiling check,
preprocessing, metadata, candidate scoring, post-processing and rendering.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from bs4 import BeautifulSoup

from ..config.config import ParserConfig
from ..metadata.date_extractor import parse_date
from ..metadata.metadata_extractor import get_article_metadata
from ..metadata.structured_data_parser import extract_json_ld
from ..observability.logging import get_debug_logger, get_logger
from .candidate_scorer import grab_article
from .content_processors import post_process_content
from .dom import clone_document, first_element_child, get_elements, inner_html, parse_html
from .models import Article, Metadata, ParseContext
from .preprocess import check_element_count, prep_document, remove_scripts, unwrap_noscript_images
from .render import inner_text

_LONE_SURROGATES = re.compile("[\ud800-\udfff]+")


def _replace_invalid(value: str, replacement: str) -> str:
    return _LONE_SURROGATES.sub(replacement, value)


class Parser:
    """
    Article extractor.

    A Parser holds only configuration and a logger; every call builds its own
    :class:`ParseContext`, so an instance may be shared between threads as
    long as each call owns its document.
    """

    def __init__(self, config: Optional[ParserConfig] = None, logger: Any = None, **overrides: Any) -> None:
        """
        Args:
            config: Parser settings; defaults to ``ParserConfig()``
            logger: structlog-style logger; by default the package logger, or
                a stderr logger when ``debug`` is on
            **overrides: Individual ParserConfig fields, validated
        """
        config = config or ParserConfig()
        if overrides:
            config = ParserConfig.model_validate({**config.model_dump(), **overrides})
        self.config = config

        if logger is None:
            logger = get_debug_logger() if config.debug else get_logger(__name__)
            logger = logger.bind(component="Parser")
        self.logger = logger

    def parse(self, markup: Union[str, bytes], page_url: Optional[str] = None) -> Article:
        """Parse raw markup and extract its article."""
        return self.parse_and_mutate(parse_html(markup), page_url)

    def parse_document(self, doc: BeautifulSoup, page_url: Optional[str] = None) -> Article:
        """Extract from a copy of `doc`; the caller's tree is untouched."""
        return self.parse_and_mutate(clone_document(doc), page_url)

    def parse_and_mutate(self, doc: BeautifulSoup, page_url: Optional[str] = None) -> Article:
        """
        Extract the article, modifying `doc` along the way.

        Raises:
            DocumentTooLargeError: the document exceeds ``max_elements_to_parse``
        """
        check_element_count(doc, self.config.max_elements_to_parse)
        ctx = ParseContext(doc=doc, config=self.config, logger=self.logger, page_url=page_url)

        unwrap_noscript_images(ctx)
        json_ld = Metadata()
        if not self.config.disable_json_ld:
            json_ld = extract_json_ld(doc, log=ctx.logger)
        remove_scripts(doc)
        prep_document(ctx)

        metadata = get_article_metadata(ctx, json_ld)
        ctx.article_title = metadata.title
        ctx.article_byline = metadata.byline

        article = grab_article(ctx)
        excerpt = metadata.excerpt
        content = ""
        text = ""
        node = None
        if article is None:
            ctx.logger.debug("no article content found")
        else:
            post_process_content(ctx, article)
            if not excerpt:
                paragraphs = get_elements(article, "p")
                if paragraphs:
                    excerpt = inner_text(paragraphs[0]).strip()
            node = first_element_child(article)
            content = inner_html(article)
            text = inner_text(article).strip()

        page_url = page_url or ""
        title = _replace_invalid(ctx.article_title, page_url) or page_url
        return Article(
            title=title,
            byline=_replace_invalid(ctx.article_byline, ""),
            content=content,
            text_content=text,
            length=len(text),
            excerpt=_replace_invalid(" ".join(excerpt.split()), ""),
            site_name=metadata.site_name,
            image=metadata.image,
            favicon=metadata.favicon,
            language=ctx.article_lang or metadata.language,
            direction=ctx.article_dir,
            published_time=parse_date(metadata.published_time, "published_time", ctx.logger),
            modified_time=parse_date(metadata.modified_time, "modified_time", ctx.logger),
            node=node,
        )
