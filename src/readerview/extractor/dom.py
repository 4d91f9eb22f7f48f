"""
DOM helpers over BeautifulSoup trees.

The extraction stages work directly on bs4 nodes parsed with the lxml tree
builder, so tag and attribute names are always lower-case. Two bs4 details
shape this module:

- ``Tag.__eq__`` compares markup, not identity, so every "same node" check in
  the package uses ``is`` and the helpers here never rely on ``in``/``index``
  over lists of tags.
- Comments, doctypes and CDATA are ``NavigableString`` subclasses; only plain
  text counts as text content.
"""

from __future__ import annotations

import copy
from typing import Callable, Iterable, List, Optional, Sequence, Union

from bs4 import BeautifulSoup, NavigableString, ParserRejectedMarkup, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import PageElement, PreformattedString
from bs4.formatter import HTMLFormatter

from ..exceptions import HTMLParseError
from .patterns import (
    DISPLAY_NONE,
    DIV_TO_P_ELEMS,
    HAS_CONTENT,
    HASH_URL,
    NEGATIVE,
    NORMALIZE_SPACES,
    PHRASING_ELEMS,
    POSITIVE,
    VISIBILITY_HIDDEN,
)

TREE_BUILDER = "lxml"

# Attributes shown in log previews of a node.
_PREVIEW_ATTRIBUTES = frozenset(["id", "class", "rel", "itemprop", "name", "type", "role", "for", "action", "method"])


def parse_html(markup: Union[str, bytes]) -> BeautifulSoup:
    """Parse markup into a document, wrapping parser rejections."""
    try:
        return BeautifulSoup(markup, TREE_BUILDER)
    except ParserRejectedMarkup as e:
        raise HTMLParseError(f"failed to parse input: {e}") from e


def clone_document(doc: BeautifulSoup) -> BeautifulSoup:
    """Deep copy of a document; the original is left untouched."""
    return copy.copy(doc)


def count_elements(doc: Tag) -> int:
    return len(doc.find_all(True))


class SourceOrderFormatter(HTMLFormatter):
    """Minimal-escaping formatter that keeps attributes in document order."""

    def __init__(self) -> None:
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml)

    def attributes(self, tag: Tag):
        if not tag.attrs:
            return []
        return list(tag.attrs.items())


SOURCE_ORDER = SourceOrderFormatter()


def inner_html(node: Tag) -> str:
    return node.decode_contents(formatter=SOURCE_ORDER)


def outer_html(node: Tag) -> str:
    return node.decode(formatter=SOURCE_ORDER)


# --- node kinds ---


def is_element(node: Optional[PageElement]) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def is_text(node: Optional[PageElement]) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def is_whitespace(node: PageElement) -> bool:
    if is_text(node):
        return str(node).strip() == ""
    return is_element(node) and node.name == "br"


def is_phrasing_content(node: PageElement) -> bool:
    if is_text(node):
        return True
    if not is_element(node):
        return False
    if node.name in PHRASING_ELEMS:
        return True
    return node.name in ("a", "del", "ins") and all(is_phrasing_content(child) for child in node.contents)


# --- attributes ---


def attr_value(node: Tag, name: str) -> str:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    value = node.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


def class_name(node: Tag) -> str:
    return attr_value(node, "class")


def node_id(node: Tag) -> str:
    return attr_value(node, "id")


def match_string(node: Tag) -> str:
    """The "class id" string the keyword matchers run against."""
    return f"{class_name(node)} {node_id(node)}"


def is_probably_visible(node: Tag) -> bool:
    style = attr_value(node, "style")
    if style and (DISPLAY_NONE.search(style) or VISIBILITY_HIDDEN.search(style)):
        return False
    if node.has_attr("hidden"):
        return False
    if attr_value(node, "aria-hidden") == "true" and "fallback-image" not in class_name(node):
        return False
    return True


# --- navigation ---


def element_children(node: Tag) -> List[Tag]:
    return [child for child in node.contents if isinstance(child, Tag)]


def first_element_child(node: Tag) -> Optional[Tag]:
    for child in node.contents:
        if isinstance(child, Tag):
            return child
    return None


def next_element_sibling(node: PageElement) -> Optional[Tag]:
    sibling = node.next_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.next_sibling
    return sibling


def previous_element_sibling(node: PageElement) -> Optional[Tag]:
    sibling = node.previous_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.previous_sibling
    return sibling


def next_significant_node(node: Optional[PageElement]) -> Optional[PageElement]:
    """Skip whitespace-only non-element siblings, starting at node itself."""
    while node is not None and not isinstance(node, Tag) and str(node).strip() == "":
        node = node.next_sibling
    return node


def get_next_node(node: Tag, ignore_self_and_kids: bool = False) -> Optional[Tag]:
    """Next element in document order, optionally skipping node's subtree."""
    if not ignore_self_and_kids:
        first = first_element_child(node)
        if first is not None:
            return first
    current: Optional[Tag] = node
    while current is not None:
        sibling = next_element_sibling(current)
        if sibling is not None:
            return sibling
        current = current.parent
    return None


def remove_and_get_next(node: Tag) -> Optional[Tag]:
    next_node = get_next_node(node, ignore_self_and_kids=True)
    node.extract()
    return next_node


def get_node_ancestors(node: PageElement, max_depth: int = 0) -> List[Tag]:
    ancestors: List[Tag] = []
    parent = node.parent
    while parent is not None:
        ancestors.append(parent)
        if max_depth and len(ancestors) == max_depth:
            break
        parent = parent.parent
    return ancestors


def has_ancestor_tag(
    node: PageElement,
    tag: str,
    max_depth: int = 3,
    predicate: Optional[Callable[[Tag], bool]] = None,
) -> bool:
    """True if an ancestor within max_depth levels (<= 0: unbounded) is a `tag`."""
    depth = 0
    while node.parent is not None:
        if max_depth > 0 and depth > max_depth:
            return False
        parent = node.parent
        if parent.name == tag and (predicate is None or predicate(parent)):
            return True
        node = parent
        depth += 1
    return False


def get_elements(node: Tag, names: Union[str, Sequence[str]]) -> List[Tag]:
    """Descendant elements with one of the given tag names, in document order."""
    if isinstance(names, str):
        names = [names]
    return list(node.find_all(list(names)))


# --- text measures ---


def text_content(node: PageElement) -> str:
    if is_text(node):
        return str(node)
    if not isinstance(node, Tag):
        return ""
    return "".join(str(descendant) for descendant in node.descendants if is_text(descendant))


def get_inner_text(node: PageElement, normalize_spaces: bool = True) -> str:
    text = text_content(node).strip()
    if normalize_spaces:
        return NORMALIZE_SPACES.sub(" ", text)
    return text


def get_char_count(node: Tag, separator: str = ",") -> int:
    return len(get_inner_text(node).split(separator)) - 1


def get_link_density(node: Tag) -> float:
    """Share of the node's text that sits inside anchors, clamped to [0, 1].

    In-page fragment links count for 0.3 of their length.
    """
    text_length = len(get_inner_text(node))
    if text_length == 0:
        return 0.0
    link_length = 0.0
    for link in node.find_all("a"):
        href = attr_value(link, "href")
        coefficient = 0.3 if href and HASH_URL.match(href) else 1.0
        link_length += len(get_inner_text(link)) * coefficient
    return min(1.0, link_length / text_length)


def get_text_density(node: Tag, tags: Iterable[str]) -> float:
    text_length = len(get_inner_text(node))
    if text_length == 0:
        return 0.0
    children_length = sum(len(get_inner_text(child)) for child in get_elements(node, list(tags)))
    return children_length / text_length


def get_class_weight(node: Tag, use_weight_classes: bool = True) -> int:
    """±25 for each of class and id matching the negative/positive keywords."""
    if not use_weight_classes:
        return 0
    weight = 0
    for value in (class_name(node), node_id(node)):
        if not value:
            continue
        if NEGATIVE.search(value):
            weight -= 25
        if POSITIVE.search(value):
            weight += 25
    return weight


# --- structure tests ---


def is_element_without_content(node: Tag) -> bool:
    if text_content(node).strip():
        return False
    children = element_children(node)
    return not children or len(children) == len(node.find_all("br")) + len(node.find_all("hr"))


def has_single_tag_inside(node: Tag, tag: str) -> bool:
    """Exactly one element child named `tag` and no non-blank text beside it."""
    children = element_children(node)
    if len(children) != 1 or children[0].name != tag:
        return False
    return not any(is_text(child) and HAS_CONTENT.search(str(child)) for child in node.contents)


def has_child_block_element(node: Tag) -> bool:
    return any(
        isinstance(child, Tag) and (child.name in DIV_TO_P_ELEMS or has_child_block_element(child))
        for child in node.contents
    )


# --- mutation ---


def set_node_tag(node: Tag, name: str) -> Tag:
    """Rename in place; children, attributes and identity are kept."""
    node.name = name
    return node


def remove_nodes(nodes: Sequence[Tag], predicate: Optional[Callable[[Tag], bool]] = None) -> None:
    """Remove nodes (last first) that are still attached and pass the predicate."""
    for node in reversed(nodes):
        if node.parent is not None and (predicate is None or predicate(node)):
            node.extract()


def replace_node_tags(nodes: Iterable[Tag], name: str) -> None:
    for node in nodes:
        set_node_tag(node, name)


def move_children(source: Tag, target: Tag) -> None:
    for child in list(source.contents):
        target.append(child)


# --- logging ---


def describe_node(node: Optional[PageElement]) -> str:
    """Short tag preview used as a log value, e.g. ``<div class="post" ...>``."""
    if node is None:
        return "<none>"
    if not isinstance(node, Tag):
        return str(node)

    preview = [f"<{node.name}"]
    has_other_attributes = False
    for name in node.attrs:
        value = attr_value(node, name)
        if name in _PREVIEW_ATTRIBUTES:
            preview.append(f' {name}="{value}"')
        elif name in ("src", "href"):
            if value.startswith("data:") and "," in value:
                value = value.split(",", 1)[0] + ",***"
            elif value.startswith("javascript:"):
                value = "javascript:***"
            preview.append(f' {name}="{value}"')
        elif not name.startswith("data-readability-"):
            has_other_attributes = True
    if has_other_attributes:
        preview.append(" ...")
    if not node.contents:
        preview.append("/")
    preview.append(">")
    return "".join(preview)
