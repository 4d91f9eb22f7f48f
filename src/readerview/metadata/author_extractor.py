"""
Author Extractor - Byline detection in the page body

An element is a byline candidate when it is marked up as an author
(``rel="author"``, ``itemprop="author"``) or when its class/id says so.
"""

from __future__ import annotations

import re
from typing import Optional

from bs4 import Tag

from ..extractor.dom import attr_value, get_next_node, text_content

BYLINE = re.compile(r"\b(?:byline|author|dateline|writtenby|p-author)\b", re.IGNORECASE)
MAX_BYLINE_LENGTH = 100


def is_valid_byline(text: str) -> bool:
    text = text.strip()
    return 0 < len(text) < MAX_BYLINE_LENGTH


def _is_author_element(node: Tag, match_string: str) -> bool:
    if attr_value(node, "rel") == "author":
        return True
    if "author" in attr_value(node, "itemprop"):
        return True
    return BYLINE.search(match_string) is not None


def _item_prop_name(node: Tag) -> Optional[Tag]:
    """First descendant carrying ``itemprop="name"``."""
    end = get_next_node(node, ignore_self_and_kids=True)
    current = get_next_node(node)
    while current is not None and current is not end:
        if "name" in attr_value(current, "itemprop"):
            return current
        current = get_next_node(current)
    return None


def find_byline(node: Tag, match_string: str) -> Optional[str]:
    """
    Byline text when `node` looks like an author element, else None.

    A nested ``itemprop="name"`` element supplies the name when present.
    """
    if not _is_author_element(node, match_string):
        return None
    if not is_valid_byline(text_content(node)):
        return None
    name_node = _item_prop_name(node)
    return text_content(name_node if name_node is not None else node).strip()
