"""
Structured Data Parser - Schema.org JSON-LD

Reads the first ``<script type="application/ld+json">`` block describing an
article and maps it onto the metadata fields. Must run before scripts are
stripped from the document.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..extractor.dom import get_elements, text_content
from ..extractor.models import Metadata
from .title_extractor import get_article_title, text_similarity

logger = logging.getLogger(__name__)

JSON_LD_TYPE = "application/ld+json"
SCHEMA_ORG = re.compile(r"^https?://schema\.org/?$")
ARTICLE_TYPES = re.compile(
    r"^Article|AdvertiserContentArticle|NewsArticle|AnalysisNewsArticle|AskPublicNewsArticle|"
    r"BackgroundNewsArticle|OpinionNewsArticle|ReportageNewsArticle|ReviewNewsArticle|Report|"
    r"SatiricalArticle|ScholarlyArticle|MedicalScholarlyArticle|SocialMediaPosting|BlogPosting|"
    r"LiveBlogPosting|DiscussionForumPosting|TechArticle|APIReference$"
)
CDATA_WRAPPER = re.compile(r"^\s*<!\[CDATA\[|\]\]>\s*$")


class SchemaOrgParser:
    """Mapping of a schema.org Article object onto metadata fields."""

    @staticmethod
    def is_schema_org(data: Dict[str, Any]) -> bool:
        context = data.get("@context")
        if isinstance(context, str):
            return SCHEMA_ORG.match(context) is not None
        if isinstance(context, dict):
            vocab = context.get("@vocab")
            return isinstance(vocab, str) and SCHEMA_ORG.match(vocab) is not None
        return False

    @staticmethod
    def is_article(data: Any) -> bool:
        if not isinstance(data, dict):
            return False
        types = data.get("@type")
        if isinstance(types, str):
            types = [types]
        if not isinstance(types, list):
            return False
        return any(isinstance(t, str) and ARTICLE_TYPES.search(t) for t in types)

    @classmethod
    def find_article(cls, parsed: Any) -> Optional[Dict[str, Any]]:
        if isinstance(parsed, list):
            parsed = next((item for item in parsed if cls.is_article(item)), None)
            if parsed is None:
                return None
        if not isinstance(parsed, dict) or not cls.is_schema_org(parsed):
            return None
        if "@type" not in parsed and isinstance(parsed.get("@graph"), list):
            parsed = next((item for item in parsed["@graph"] if cls.is_article(item)), None)
        return parsed if cls.is_article(parsed) else None

    @staticmethod
    def author_names(author: Any) -> str:
        if isinstance(author, dict) and isinstance(author.get("name"), str):
            return author["name"].strip()
        if isinstance(author, list) and author and isinstance(author[0], dict):
            names: List[str] = [
                item["name"].strip() for item in author if isinstance(item, dict) and isinstance(item.get("name"), str)
            ]
            return ", ".join(names)
        return ""

    @staticmethod
    def image_url(image: Any) -> str:
        if isinstance(image, str):
            return image.strip()
        if isinstance(image, dict) and isinstance(image.get("url"), str):
            return image["url"].strip()
        if isinstance(image, list) and image:
            return SchemaOrgParser.image_url(image[0])
        return ""

    @classmethod
    def to_metadata(cls, article: Dict[str, Any], doc: BeautifulSoup, title_hint: Optional[str]) -> Metadata:
        metadata = Metadata()

        name = article.get("name")
        headline = article.get("headline")
        if isinstance(name, str) and isinstance(headline, str) and name != headline:
            # Some sites put the site name in "name"; keep whichever resembles the page title.
            title = title_hint if title_hint is not None else get_article_title(doc)
            name_matches = text_similarity(name, title) > 0.75
            headline_matches = text_similarity(headline, title) > 0.75
            metadata.title = (headline if headline_matches and not name_matches else name).strip()
        elif isinstance(name, str):
            metadata.title = name.strip()
        elif isinstance(headline, str):
            metadata.title = headline.strip()

        metadata.byline = cls.author_names(article.get("author"))
        if isinstance(article.get("description"), str):
            metadata.excerpt = article["description"].strip()
        publisher = article.get("publisher")
        if isinstance(publisher, dict) and isinstance(publisher.get("name"), str):
            metadata.site_name = publisher["name"].strip()
        if isinstance(article.get("datePublished"), str):
            metadata.published_time = article["datePublished"].strip()
        if isinstance(article.get("dateModified"), str):
            metadata.modified_time = article["dateModified"].strip()
        metadata.image = cls.image_url(article.get("image"))
        return metadata


def extract_json_ld(doc: BeautifulSoup, title_hint: Optional[str] = None, log: Any = None) -> Metadata:
    """
    Metadata from the first JSON-LD block describing an article.

    Blocks that are not valid JSON are skipped. Returns an empty Metadata when
    no block qualifies.
    """
    for script in get_elements(doc, "script"):
        if script.get("type") != JSON_LD_TYPE:
            continue
        content = CDATA_WRAPPER.sub("", text_content(script))
        try:
            parsed = json.loads(content)
        except ValueError as e:
            if log is not None:
                log.debug("skipping malformed JSON-LD", error=str(e))
            else:
                logger.debug("Skipping malformed JSON-LD: %s", e)
            continue

        article = SchemaOrgParser.find_article(parsed)
        if article is None:
            continue
        return SchemaOrgParser.to_metadata(article, doc, title_hint)
    return Metadata()
