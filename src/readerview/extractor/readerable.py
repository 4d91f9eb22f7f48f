"""
Quick structural check for whether a page is worth extracting.

Much cheaper than a full parse; the document is not modified.
"""

from __future__ import annotations

import math
from typing import List

from bs4 import BeautifulSoup, Tag

from .dom import get_elements, is_probably_visible, match_string, text_content
from .patterns import OK_MAYBE_ITS_A_CANDIDATE, UNLIKELY_CANDIDATES


def _candidate_nodes(doc: BeautifulSoup) -> List[Tag]:
    nodes = get_elements(doc, ["p", "pre", "article"])
    seen = {id(node) for node in nodes}
    for br in doc.select("div > br"):
        parent = br.parent
        if id(parent) not in seen:
            seen.add(id(parent))
            nodes.append(parent)
    return nodes


def is_probably_readerable(doc: BeautifulSoup, min_score: float = 20, min_content_length: int = 140) -> bool:
    """
    Decide whether the document probably contains an article.

    Every visible paragraph-like node with at least `min_content_length`
    characters adds ``sqrt(length - min_content_length)`` to the score; the
    page qualifies once the score exceeds `min_score`.
    """
    score = 0.0
    for node in _candidate_nodes(doc):
        if not is_probably_visible(node):
            continue
        matched = match_string(node)
        if UNLIKELY_CANDIDATES.search(matched) and not OK_MAYBE_ITS_A_CANDIDATE.search(matched):
            continue
        if node.name == "p" and node.find_parent("li") is not None:
            continue

        length = len(text_content(node).strip())
        if length < min_content_length:
            continue
        score += math.sqrt(length - min_content_length)
        if score > min_score:
            return True
    return False
