"""
Post-processing of the extracted article subtree.

Implements dedicated processors applied in order:
- Links: absolute URLs for anchors and media, ``javascript:`` links unwrapped
- Structure: collapse single-child wrappers, drop empty elements
- Attributes: per-tag whitelist, class filtering
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional

from bs4 import BeautifulSoup, Tag

from .dom import (
    attr_value,
    get_elements,
    get_next_node,
    has_single_tag_inside,
    is_element_without_content,
    is_text,
    move_children,
    node_id,
    remove_and_get_next,
    element_children,
    text_content,
)
from .models import ParseContext
from .patterns import SRCSET_URL
from .urls import resolve_base_url, to_absolute_uri

PAGE_WRAPPER_PREFIX = "readability"
MEDIA_TAGS = ("img", "picture", "figure", "video", "audio", "source")


def _is_page_wrapper(node: Tag) -> bool:
    return node_id(node).startswith(PAGE_WRAPPER_PREFIX)


class LinkProcessor:
    """Resolves relative URLs against the document base."""

    def __init__(self, doc: BeautifulSoup, page_url: Optional[str]) -> None:
        self.doc = doc
        self.page_url = page_url or ""
        self.base_url = resolve_base_url(doc, page_url)

    def to_absolute(self, uri: str) -> str:
        if uri.startswith("data:"):
            return uri
        return to_absolute_uri(uri, self.base_url, self.page_url)

    def resolve_srcset(self, srcset: str) -> str:
        return SRCSET_URL.sub(
            lambda m: self.to_absolute(m.group(1)) + (m.group(2) or "") + m.group(3),
            srcset,
        )

    def _unwrap_script_link(self, link: Tag) -> None:
        if len(link.contents) == 1 and is_text(link.contents[0]):
            link.replace_with(text_content(link))
            return
        span = self.doc.new_tag("span")
        move_children(link, span)
        link.replace_with(span)

    def process(self, article: Tag) -> None:
        for link in get_elements(article, "a"):
            href = attr_value(link, "href")
            if not href:
                continue
            if href.startswith("javascript:"):
                self._unwrap_script_link(link)
            else:
                link["href"] = self.to_absolute(href)

        for media in get_elements(article, list(MEDIA_TAGS)):
            src = attr_value(media, "src")
            if src:
                media["src"] = self.to_absolute(src)
            poster = attr_value(media, "poster")
            if poster:
                media["poster"] = self.to_absolute(poster)
            srcset = attr_value(media, "srcset")
            if srcset:
                media["srcset"] = self.resolve_srcset(srcset)


class StructureProcessor:
    """Removes wrapper noise left over after cleaning."""

    # Elements that carry content without text.
    media_tags: FrozenSet[str] = frozenset(
        ["img", "picture", "video", "audio", "iframe", "embed", "object", "svg", "source", "canvas"]
    )
    keep_empty_tags: FrozenSet[str] = frozenset(
        [
            "area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr",
            "table", "thead", "tbody", "tfoot", "tr", "td", "th", "colgroup", "caption",
            "picture", "video", "audio", "iframe", "object", "svg", "canvas", "math",
        ]
    )

    def simplify_nested_elements(self, article: Tag) -> None:
        node: Optional[Tag] = article
        while node is not None:
            if node.parent is not None and node.name in ("div", "section") and not _is_page_wrapper(node):
                if is_element_without_content(node):
                    node = remove_and_get_next(node)
                    continue
                if has_single_tag_inside(node, "div") or has_single_tag_inside(node, "section"):
                    child = element_children(node)[0]
                    for name, value in node.attrs.items():
                        child[name] = value
                    node.replace_with(child.extract())
                    node = child
                    continue
            node = get_next_node(node)

    def _is_empty(self, node: Tag) -> bool:
        if node.name in self.keep_empty_tags or _is_page_wrapper(node):
            return False
        if node.find_parent("svg") is not None:
            return False
        if text_content(node).strip():
            return False
        return not get_elements(node, list(self.media_tags))

    def remove_empty_nodes(self, article: Tag) -> None:
        # Deepest first, so parents emptied by the removal go as well.
        for node in reversed(article.find_all(True)):
            if node.parent is not None and self._is_empty(node):
                node.extract()

    def process(self, article: Tag) -> None:
        self.simplify_nested_elements(article)
        self.remove_empty_nodes(article)


class AttributeProcessor:
    """Drops every attribute outside a small per-tag whitelist."""

    allowed: Dict[str, FrozenSet[str]] = {
        "a": frozenset(["href", "title"]),
        "img": frozenset(["src", "srcset", "alt", "title", "width", "height", "sizes"]),
        "source": frozenset(["src", "srcset", "type", "media", "sizes"]),
        "video": frozenset(["src", "poster", "controls", "width", "height"]),
        "audio": frozenset(["src", "controls"]),
        "iframe": frozenset(["src", "width", "height", "allowfullscreen"]),
        "embed": frozenset(["src", "type", "width", "height"]),
        "object": frozenset(["data", "type", "width", "height"]),
        "td": frozenset(["colspan", "rowspan"]),
        "th": frozenset(["colspan", "rowspan", "scope"]),
        "col": frozenset(["span"]),
        "colgroup": frozenset(["span"]),
        "ol": frozenset(["start", "reversed", "type"]),
        "li": frozenset(["value"]),
        "time": frozenset(["datetime"]),
        "del": frozenset(["cite", "datetime"]),
        "ins": frozenset(["cite", "datetime"]),
        "blockquote": frozenset(["cite"]),
        "q": frozenset(["cite"]),
        "abbr": frozenset(["title"]),
    }

    def __init__(self, classes_to_preserve: Iterable[str], keep_classes: bool = False) -> None:
        self.classes_to_preserve = frozenset(classes_to_preserve)
        self.keep_classes = keep_classes

    def _filter_classes(self, node: Tag) -> Optional[str]:
        if self.keep_classes:
            return attr_value(node, "class") or None
        kept = [name for name in attr_value(node, "class").split() if name in self.classes_to_preserve]
        return " ".join(kept) or None

    def clean_node(self, node: Tag) -> None:
        allowed = self.allowed.get(node.name, frozenset())
        attrs = {}
        for name in node.attrs:
            if name == "class":
                classes = self._filter_classes(node)
                if classes:
                    attrs[name] = classes
            elif name == "id":
                if _is_page_wrapper(node):
                    attrs[name] = node.attrs[name]
            elif name in allowed:
                attrs[name] = node.attrs[name]
        node.attrs = attrs

    def process(self, article: Tag) -> None:
        node: Optional[Tag] = article
        while node is not None:
            if node.name == "svg":
                # Vector markup depends on its attributes; leave it whole.
                node = get_next_node(node, ignore_self_and_kids=True)
                continue
            self.clean_node(node)
            node = get_next_node(node)
            if node is not None and not _is_inside(node, article):
                break


def _is_inside(node: Tag, root: Tag) -> bool:
    parent = node
    while parent is not None:
        if parent is root:
            return True
        parent = parent.parent
    return False


def post_process_content(ctx: ParseContext, article: Tag) -> None:
    """Finalize the article subtree in place."""
    LinkProcessor(ctx.doc, ctx.page_url).process(article)
    StructureProcessor().process(article)
    AttributeProcessor(ctx.config.classes_to_preserve, ctx.config.keep_classes).process(article)
    ctx.logger.debug("article post-processed", elements=len(article.find_all(True)))
