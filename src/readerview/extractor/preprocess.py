"""
Document preparation ahead of scoring.

Strips elements that never hold article text and normalizes markup quirks
(``<br>`` chains used as paragraph breaks, ``<font>``, lazy images hidden in
``<noscript>``).
"""

from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup, Comment, Tag

from ..exceptions import DocumentTooLargeError
from .dom import (
    count_elements,
    element_children,
    first_element_child,
    get_elements,
    is_phrasing_content,
    is_whitespace,
    next_significant_node,
    parse_html,
    previous_element_sibling,
    remove_nodes,
    replace_node_tags,
    set_node_tag,
    text_content,
)
from .models import ParseContext
from .patterns import IMAGE_EXTENSION

_IMAGE_SOURCE_ATTRIBUTES = frozenset(["src", "srcset", "data-src", "data-srcset"])


def check_element_count(doc: BeautifulSoup, limit: int) -> None:
    """Raise DocumentTooLargeError when `doc` has more than `limit` elements."""
    if limit <= 0:
        return
    element_count = count_elements(doc)
    if element_count > limit:
        raise DocumentTooLargeError(element_count, limit)


def _is_single_image(node: Tag) -> bool:
    if node.name == "img":
        return True
    children = element_children(node)
    if len(children) != 1 or text_content(node).strip():
        return False
    return _is_single_image(children[0])


def _has_image_source(img: Tag) -> bool:
    for name, value in img.attrs.items():
        if name in _IMAGE_SOURCE_ATTRIBUTES:
            return True
        if isinstance(value, str) and IMAGE_EXTENSION.search(value):
            return True
    return False


def unwrap_noscript_images(ctx: ParseContext) -> None:
    """
    Replace placeholder images with the real image kept in a following
    ``<noscript>``.

    Images with no usable source at all are dropped first; lazy-loading
    scripts would have filled them in, and nothing will here.
    """
    doc = ctx.doc
    for img in get_elements(doc, "img"):
        if not _has_image_source(img):
            img.extract()

    for noscript in get_elements(doc, "noscript"):
        fragment = parse_html(noscript.decode_contents())
        body: Optional[Tag] = fragment.body
        if body is None or not _is_single_image(body):
            continue

        previous = previous_element_sibling(noscript)
        if previous is None or not _is_single_image(previous):
            continue

        previous_img = previous if previous.name == "img" else previous.find("img")
        new_img = body.find("img")
        replacement = first_element_child(body)
        if previous_img is None or new_img is None or replacement is None:
            continue

        for name, value in list(previous_img.attrs.items()):
            if isinstance(value, list):
                value = " ".join(value)
            if value == "":
                continue
            if name in ("src", "srcset") or IMAGE_EXTENSION.search(value):
                if new_img.get(name) == value:
                    continue
                target = f"data-old-{name}" if new_img.has_attr(name) else name
                new_img[target] = value

        ctx.logger.debug("replacing image with noscript copy", src=new_img.get("src", ""))
        previous.replace_with(replacement.extract())


def remove_scripts(doc: BeautifulSoup) -> None:
    remove_nodes(get_elements(doc, ["script", "noscript"]))


def _replace_brs(doc: BeautifulSoup, element: Tag) -> None:
    """
    Turn ``<br><br>`` chains into paragraphs.

    ``<div>foo<br>bar<br><br><br>abc</div>`` becomes
    ``<div>foo<br>bar<p>abc</p></div>``.
    """
    for br in get_elements(element, "br"):
        node = br.next_sibling
        replaced = False

        # Drop every <br> in the chain after the first, skipping whitespace.
        node = next_significant_node(node)
        while isinstance(node, Tag) and node.name == "br":
            replaced = True
            sibling = node.next_sibling
            node.extract()
            node = next_significant_node(sibling)

        if not replaced:
            continue

        p = doc.new_tag("p")
        br.replace_with(p)

        node = p.next_sibling
        while node is not None:
            # Another chain ends this paragraph.
            if isinstance(node, Tag) and node.name == "br":
                following = next_significant_node(node.next_sibling)
                if isinstance(following, Tag) and following.name == "br":
                    break
            if not is_phrasing_content(node):
                break
            sibling = node.next_sibling
            p.append(node)
            node = sibling

        while p.contents and is_whitespace(p.contents[-1]):
            p.contents[-1].extract()

        if p.parent is not None and p.parent.name == "p":
            set_node_tag(p.parent, "div")


def prep_document(ctx: ParseContext) -> None:
    """Remove styles and comments, collapse ``<br>`` chains, rename ``<font>``."""
    doc = ctx.doc
    remove_nodes(get_elements(doc, "style"))
    for comment in doc.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    if doc.body is not None:
        _replace_brs(doc, doc.body)
    replace_node_tags(get_elements(doc, "font"), "span")
