"""
Metadata Extractor - Meta tags merged with JSON-LD

Meta tag values win; JSON-LD fills the fields the meta tags leave empty and
the title heuristic runs last. The document is never mutated.
"""

from __future__ import annotations

import html
import re
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

from ..extractor.dom import attr_value, get_elements
from ..extractor.models import Metadata, ParseContext
from ..extractor.urls import is_absolute_url, resolve_base_url, to_absolute_uri
from .title_extractor import get_article_title

PROPERTY_PATTERN = re.compile(
    r"\s*(dc|dcterm|og|article|twitter)\s*:\s*"
    r"(author|creator|description|title|site_name|published_time|modified_time|image\S*)\s*",
    re.IGNORECASE,
)
NAME_PATTERN = re.compile(
    r"^\s*(?:(dc|dcterm|article|og|twitter|parsely|weibo:(article|webpage))\s*[-\.:]\s*)?"
    r"(author|creator|pub-date|description|title|site_name|published_time|modified_time|image)\s*$",
    re.IGNORECASE,
)
FAVICON_SIZE = re.compile(r"(\d+)x(\d+)", re.IGNORECASE)
WHITESPACE = re.compile(r"\s")

# Meta keys checked for each field, in order.
FIELD_KEYS: Dict[str, List[str]] = {
    "title": [
        "dc:title",
        "dcterm:title",
        "og:title",
        "weibo:article:title",
        "weibo:webpage:title",
        "title",
        "twitter:title",
        "parsely-title",
    ],
    "byline": ["dc:creator", "dcterm:creator", "author", "parsely-author"],
    "excerpt": [
        "dc:description",
        "dcterm:description",
        "og:description",
        "weibo:article:description",
        "weibo:webpage:description",
        "description",
        "twitter:description",
    ],
    "site_name": ["og:site_name"],
    "image": ["og:image", "og:image:url", "og:image:secure_url", "image", "twitter:image"],
    "published_time": ["article:published_time", "dcterm:published_time", "parsely-pub-date"],
    "modified_time": ["article:modified_time", "dcterm:modified_time"],
}


def collect_meta_values(doc: BeautifulSoup) -> Dict[str, str]:
    """Normalized meta key -> trimmed content, for the keys the fields use."""
    values: Dict[str, str] = {}
    for meta in get_elements(doc, "meta"):
        content = attr_value(meta, "content")
        if not content:
            continue

        element_property = attr_value(meta, "property")
        if element_property:
            match = PROPERTY_PATTERN.search(element_property)
            if match:
                values[WHITESPACE.sub("", match.group(0).lower())] = content.strip()
                continue

        element_name = attr_value(meta, "name")
        if element_name and NAME_PATTERN.match(element_name):
            key = WHITESPACE.sub("", element_name.lower()).replace(".", ":")
            values[key] = content.strip()
    return values


def _first_value(values: Dict[str, str], keys: List[str]) -> str:
    for key in keys:
        value = values.get(key)
        if value:
            return value
    return ""


def get_favicon(doc: BeautifulSoup, base_url: str, page_url: Optional[str] = None) -> str:
    """Largest square PNG icon, else the first icon of any kind."""
    favicon = ""
    favicon_size = -1
    first_icon = ""
    for link in get_elements(doc, "link"):
        rel = attr_value(link, "rel").strip().lower()
        href = attr_value(link, "href").strip()
        if not href or "icon" not in rel:
            continue
        first_icon = first_icon or href
        if attr_value(link, "type").strip() != "image/png" and ".png" not in href:
            continue
        size = 0
        for location in (attr_value(link, "sizes").strip(), href):
            match = FAVICON_SIZE.search(location)
            if match and match.group(1) == match.group(2):
                size = int(match.group(1))
                break
        if size > favicon_size:
            favicon_size = size
            favicon = href
    favicon = favicon or first_icon
    if not favicon:
        return ""
    return to_absolute_uri(favicon, base_url, page_url)


def get_language(doc: BeautifulSoup) -> str:
    root = doc.find("html")
    if root is not None:
        lang = attr_value(root, "lang").strip()
        if lang:
            return lang
    for meta in get_elements(doc, "meta"):
        if attr_value(meta, "http-equiv").strip().lower() == "content-language":
            content = attr_value(meta, "content").strip()
            if content:
                return content
    for meta in get_elements(doc, "meta"):
        if attr_value(meta, "property").strip().lower() == "og:locale":
            content = attr_value(meta, "content").strip()
            if content:
                return content
    return ""


def get_article_metadata(ctx: ParseContext, json_ld: Optional[Metadata] = None) -> Metadata:
    doc = ctx.doc
    json_ld = json_ld or Metadata()
    values = collect_meta_values(doc)
    metadata = Metadata()

    metadata.title = _first_value(values, FIELD_KEYS["title"]) or json_ld.title
    if not metadata.title:
        metadata.title = get_article_title(doc)

    metadata.byline = _first_value(values, FIELD_KEYS["byline"])
    article_author = values.get("article:author", "")
    if not metadata.byline and article_author and not is_absolute_url(article_author):
        metadata.byline = article_author
    metadata.byline = metadata.byline or json_ld.byline

    metadata.excerpt = _first_value(values, FIELD_KEYS["excerpt"]) or json_ld.excerpt
    metadata.site_name = _first_value(values, FIELD_KEYS["site_name"]) or json_ld.site_name
    metadata.published_time = _first_value(values, FIELD_KEYS["published_time"]) or json_ld.published_time
    metadata.modified_time = _first_value(values, FIELD_KEYS["modified_time"]) or json_ld.modified_time

    base_url = resolve_base_url(doc, ctx.page_url)
    image = _first_value(values, FIELD_KEYS["image"]) or json_ld.image
    metadata.image = to_absolute_uri(image, base_url, ctx.page_url) if image else ""
    metadata.favicon = get_favicon(doc, base_url, ctx.page_url)
    metadata.language = get_language(doc)

    for field_name in ("title", "byline", "excerpt", "site_name", "image", "published_time", "modified_time"):
        setattr(metadata, field_name, html.unescape(getattr(metadata, field_name)))

    ctx.logger.debug(
        "metadata extracted",
        title=metadata.title,
        byline=metadata.byline,
        site_name=metadata.site_name,
        from_json_ld=bool(json_ld.title or json_ld.byline),
    )
    return metadata
