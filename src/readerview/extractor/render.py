"""
Plain-text rendering of a DOM subtree with awareness of block-level elements.

Approximates what a browser's ``innerText`` returns without a layout engine:
words are joined by at most one separator, block elements request newlines,
and ``<pre>`` content is copied verbatim.
"""

from __future__ import annotations

from typing import List

from bs4 import Tag
from bs4.element import PageElement

from .dom import is_text

NO_BREAK_SPACE = "\u00a0"

SKIPPED_TAGS = frozenset(
    ["head", "meta", "style", "script", "iframe", "audio", "video", "track", "source", "canvas", "svg", "map", "area"]
)
DOUBLE_NEWLINE_TAGS = frozenset(
    ["hr", "p", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "dl", "table"]
)
SINGLE_NEWLINE_TAGS = frozenset(
    [
        "div", "figure", "figcaption", "picture", "li", "dt", "dd", "header", "footer", "main",
        "section", "article", "aside", "nav", "address", "details", "summary", "dialog", "form",
        "fieldset", "caption", "thead", "tbody", "tfoot", "tr",
    ]
)
CELL_TAGS = frozenset(["td", "th"])


class _TextBuilder:
    """Accumulates words and separators.

    Separators are only queued; they reach the output right before the next
    word or verbatim text, so the result never starts or ends with one.
    """

    def __init__(self) -> None:
        self._parts: List[str] = []
        self._space = ""
        # Newlines requested since the last word; used for collapsing.
        self._newlines = 0
        # Newlines waiting to be written before the next word.
        self._pending = 0

    def queue_space(self, char: str) -> None:
        if not self._space:
            self._space = char

    def write_newline(self, count: int, collapse: bool) -> None:
        if collapse:
            if self._newlines >= count:
                return
            count -= self._newlines
        self._newlines += count
        if self._parts:
            self._pending += count

    def write_word(self, word: str) -> None:
        if self._parts:
            if self._pending:
                self._parts.append("\n" * self._pending)
            elif self._space and self._newlines == 0:
                self._parts.append(self._space)
        self._parts.append(word)
        self._reset()

    def write_verbatim(self, text: str) -> None:
        if not text:
            return
        if self._pending:
            self._parts.append("\n" * self._pending)
        self._parts.append(text)
        self._reset()

    def _reset(self) -> None:
        self._newlines = 0
        self._pending = 0
        self._space = ""

    def getvalue(self) -> str:
        return "".join(self._parts)


def _write_words(builder: _TextBuilder, text: str) -> None:
    start = -1
    for i, char in enumerate(text):
        if char.isspace():
            if start >= 0:
                builder.write_word(text[start:i])
                start = -1
            builder.queue_space(NO_BREAK_SPACE if char == NO_BREAK_SPACE else " ")
        elif start < 0:
            start = i
    if start >= 0:
        builder.write_word(text[start:])


def _render(builder: _TextBuilder, node: PageElement, keep_whitespace: bool) -> None:
    if is_text(node):
        if keep_whitespace:
            builder.write_verbatim(str(node))
        else:
            _write_words(builder, str(node))
        return
    if not isinstance(node, Tag):
        return

    name = node.name
    if name in SKIPPED_TAGS:
        return
    if name == "br":
        builder.write_newline(1, collapse=False)
    elif name in DOUBLE_NEWLINE_TAGS:
        builder.write_newline(2, collapse=True)
    elif name == "pre":
        builder.write_newline(2, collapse=True)
        keep_whitespace = True
    elif name in CELL_TAGS:
        builder.queue_space("\t")
    elif name in SINGLE_NEWLINE_TAGS:
        builder.write_newline(1, collapse=True)

    for child in node.contents:
        _render(builder, child, keep_whitespace)


def inner_text(node: PageElement) -> str:
    """Render `node` and its descendants to plain text."""
    builder = _TextBuilder()
    _render(builder, node, False)
    return builder.getvalue()
