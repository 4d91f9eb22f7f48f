"""
URL resolution against the document base.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from .dom import attr_value


def is_absolute_url(value: str) -> bool:
    """True for URLs with a scheme and a host; malformed URLs are never absolute."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def resolve_base_url(doc: BeautifulSoup, page_url: Optional[str]) -> str:
    """The page URL adjusted by ``<base href>``; empty when neither is usable."""
    page_url = page_url or ""
    base = doc.find("base", href=True)
    href = attr_value(base, "href").strip() if base is not None else ""
    if not href:
        return page_url
    try:
        resolved = urljoin(page_url, href) if page_url else href
    except ValueError:
        return page_url
    return resolved if is_absolute_url(resolved) else page_url


def to_absolute_uri(uri: str, base_url: str, page_url: Optional[str] = None) -> str:
    """Resolve `uri`; in-page fragments stay relative when there is no ``<base>``."""
    if not base_url:
        return uri
    if uri.startswith("#") and base_url == (page_url or ""):
        return uri
    try:
        return urljoin(base_url, uri)
    except ValueError:
        return uri
