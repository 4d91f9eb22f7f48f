"""
Title Extractor - Article title from the document ``<title>``

Used when neither meta tags nor JSON-LD provide a title. Site names glued to
the title ("Article Title | Site Name") are cut off, preferring the text of a
matching ``<h1>``.
"""

from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup

from ..extractor.dom import get_elements, get_inner_text
from ..extractor.patterns import TOKENIZE

TITLE_SEPARATORS = re.compile(r"\s[\|\-–—\\/>»·]\s")
_SHORT_TITLE = 15
_LONG_TITLE = 150


def word_count(text: str) -> int:
    return len(text.split())


def text_similarity(text_a: str, text_b: str) -> float:
    """Share of the tokens of `text_b` that also occur in `text_a`, in [0, 1]."""
    tokens_a = [token for token in TOKENIZE.split(text_a.lower()) if token]
    tokens_b = [token for token in TOKENIZE.split(text_b.lower()) if token]
    if not tokens_a or not tokens_b:
        return 0.0
    known = set(tokens_a)
    unique_b = [token for token in tokens_b if token not in known]
    distance_b = len(" ".join(unique_b)) / len(" ".join(tokens_b))
    return 1.0 - distance_b


def _matching_heading(parts: List[str], headings: List[str]) -> str:
    lowered = {heading.lower(): heading for heading in headings if heading}
    for part in parts:
        heading = lowered.get(part.lower())
        if heading is not None:
            return heading
    return ""


def _colon_title(title: str, headings: List[str]) -> str:
    if title in headings:
        return title
    candidate = title[title.rfind(":") + 1 :]
    if word_count(candidate) < 3:
        candidate = title[title.find(":") + 1 :]
    elif word_count(title[: title.find(":")]) > 5:
        candidate = title
    candidate = candidate.strip()
    if word_count(candidate) <= 4:
        return title
    return candidate


def get_article_title(doc: BeautifulSoup) -> str:
    title_node = doc.find("title")
    if title_node is None:
        return ""
    title = get_inner_text(title_node)
    if not title:
        return ""

    h1_texts = [get_inner_text(h1) for h1 in get_elements(doc, "h1")]

    if TITLE_SEPARATORS.search(title):
        parts = [part.strip() for part in TITLE_SEPARATORS.split(title) if part.strip()]
        heading = _matching_heading(parts, h1_texts)
        if heading:
            return heading
        best = parts[0]
        for part in parts[1:]:
            if word_count(part) > word_count(best):
                best = part
        return best

    if ": " in title:
        parts = [part.strip() for part in title.split(": ") if part.strip()]
        heading = _matching_heading(parts, h1_texts)
        if heading:
            return heading
        headings = h1_texts + [get_inner_text(h2) for h2 in get_elements(doc, "h2")]
        return _colon_title(title, headings)

    if (len(title) < _SHORT_TITLE or len(title) > _LONG_TITLE) and len(h1_texts) == 1 and h1_texts[0]:
        return h1_texts[0]
    return title
