"""
Cleanup of the merged article subtree.

Runs once per scoring pass on the candidate and its merged siblings. The
conditional steps only run while the ``clean_conditionally`` flag is on.
"""

from __future__ import annotations

import re
from typing import Callable, Tuple

from bs4 import Tag

from .dom import (
    attr_value,
    class_name,
    describe_node,
    element_children,
    first_element_child,
    get_char_count,
    get_class_weight,
    get_elements,
    get_inner_text,
    get_link_density,
    get_next_node,
    get_text_density,
    has_ancestor_tag,
    has_single_tag_inside,
    is_phrasing_content,
    match_string,
    next_significant_node,
    remove_and_get_next,
    remove_nodes,
    replace_node_tags,
    set_node_tag,
    text_content,
)
from .models import ParseContext
from .patterns import (
    AD_WORDS,
    B64_DATA_URL,
    DIV_TO_P_ELEMS,
    EMBED_TAGS,
    HEADINGS,
    IMAGE_EXTENSION,
    LAZY_SRC_VALUE,
    LAZY_SRCSET_VALUE,
    LOADING_WORDS,
    SHARE_ELEMENTS,
    VIDEOS,
)

_LEADING_INT = re.compile(r"^\s*(\d+)")
_DATA_TABLE_DESCENDANTS = ("col", "colgroup", "tfoot", "thead", "th")
_TEXTISH_TAGS = ("span", "li", "td") + tuple(sorted(DIV_TO_P_ELEMS))
# Shortest base64 payload that is more than a placeholder pixel.
_MIN_B64_IMAGE_LENGTH = 133
SHARE_ELEMENT_THRESHOLD = 500


def _parse_int(value: str) -> int:
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


def _is_allowed_embed(node: Tag) -> bool:
    """Embeds pointing at known video hosts are kept."""
    for name in node.attrs:
        if VIDEOS.search(attr_value(node, name)):
            return True
    return node.name == "object" and VIDEOS.search(node.decode_contents()) is not None


# --- data tables ---


def get_row_and_column_count(table: Tag) -> Tuple[int, int]:
    rows = 0
    columns = 0
    for tr in get_elements(table, "tr"):
        rows += _parse_int(attr_value(tr, "rowspan")) or 1
        columns_in_row = 0
        for cell in get_elements(tr, "td"):
            columns_in_row += _parse_int(attr_value(cell, "colspan")) or 1
        columns = max(columns, columns_in_row)
    return rows, columns


def _is_data_table(table: Tag) -> bool:
    if attr_value(table, "role") == "presentation":
        return False
    if attr_value(table, "datatable") == "0":
        return False
    if attr_value(table, "summary"):
        return True
    caption = table.find("caption")
    if caption is not None and caption.contents:
        return True
    if any(table.find(tag) is not None for tag in _DATA_TABLE_DESCENDANTS):
        return True
    # Nested tables are layout tables.
    if table.find("table") is not None:
        return False
    rows, columns = get_row_and_column_count(table)
    if rows == 1 or columns == 1:
        return False
    if rows >= 10 or columns > 4:
        return True
    return rows * columns > 10


def mark_data_tables(ctx: ParseContext, root: Tag) -> None:
    for table in get_elements(root, "table"):
        ctx.mark_data_table(table, _is_data_table(table))


# --- images ---


def fix_lazy_images(ctx: ParseContext, root: Tag) -> None:
    """Move image URLs kept in data attributes into ``src``/``srcset``."""
    for elem in get_elements(root, ["img", "picture", "figure"]):
        is_img = elem.name == "img"
        src = attr_value(elem, "src") if is_img else ""

        # A tiny base64 image next to a real URL is a placeholder.
        match = B64_DATA_URL.match(src) if src else None
        if match and match.group(1) != "image/svg+xml":
            has_other_image = any(
                name != "src" and IMAGE_EXTENSION.search(attr_value(elem, name)) for name in elem.attrs
            )
            if has_other_image and len(src) - len(match.group(0)) < _MIN_B64_IMAGE_LENGTH:
                del elem["src"]
                src = ""

        srcset = attr_value(elem, "srcset") if is_img else ""
        if (src or (srcset and srcset != "null")) and "lazy" not in class_name(elem).lower():
            continue

        for name in list(elem.attrs):
            if name in ("src", "srcset", "alt"):
                continue
            value = attr_value(elem, name)
            if LAZY_SRCSET_VALUE.search(value):
                copy_to = "srcset"
            elif LAZY_SRC_VALUE.match(value):
                copy_to = "src"
            else:
                continue
            if elem.name in ("img", "picture"):
                elem[copy_to] = value
            elif elem.name == "figure" and not get_elements(elem, ["img", "picture"]):
                img = ctx.doc.new_tag("img")
                img[copy_to] = value
                elem.append(img)


# --- removal helpers ---


def clean(root: Tag, tag: str) -> None:
    """Remove every `tag` element, sparing embeds of known video hosts."""
    is_embed = tag in EMBED_TAGS
    remove_nodes(get_elements(root, tag), lambda node: not (is_embed and _is_allowed_embed(node)))


def clean_matched_nodes(node: Tag, predicate: Callable[[Tag, str], bool]) -> None:
    """Remove descendants of `node` for which predicate(node, "class id") holds."""
    end = get_next_node(node, ignore_self_and_kids=True)
    current = get_next_node(node)
    while current is not None and current is not end:
        if predicate(current, match_string(current)):
            current = remove_and_get_next(current)
        else:
            current = get_next_node(current)


def clean_headers(ctx: ParseContext, root: Tag) -> None:
    remove_nodes(
        get_elements(root, ["h1", "h2"]),
        lambda heading: get_class_weight(heading, ctx.flags.use_weight_classes) < 0,
    )


def _should_clean(ctx: ParseContext, node: Tag, tag: str) -> bool:
    is_list = tag in ("ul", "ol")
    if not is_list:
        list_length = sum(len(get_inner_text(lst)) for lst in get_elements(node, ["ul", "ol"]))
        node_length = len(get_inner_text(node))
        is_list = node_length > 0 and list_length / node_length > 0.9

    if tag == "table" and ctx.is_data_table(node):
        return False
    if has_ancestor_tag(node, "table", -1, ctx.is_data_table):
        return False
    if has_ancestor_tag(node, "code"):
        return False
    if any(ctx.is_data_table(table) for table in get_elements(node, "table")):
        return False

    weight = get_class_weight(node, ctx.flags.use_weight_classes)
    if weight < 0:
        ctx.logger.debug("cleaning conditionally", node=describe_node(node), reason="negative weight")
        return True

    if get_char_count(node, ",") >= 10:
        return False

    p = len(get_elements(node, "p"))
    img = len(get_elements(node, "img"))
    li = len(get_elements(node, "li")) - 100
    inputs = len(get_elements(node, "input"))
    heading_density = get_text_density(node, HEADINGS)

    embed_count = 0
    for embed in get_elements(node, list(EMBED_TAGS)):
        if _is_allowed_embed(embed):
            return False
        embed_count += 1

    inner_text = get_inner_text(node)
    if AD_WORDS.match(inner_text) or LOADING_WORDS.match(inner_text):
        return True

    content_length = len(inner_text)
    link_density = get_link_density(node)
    text_density = get_text_density(node, _TEXTISH_TAGS)
    is_figure_child = has_ancestor_tag(node, "figure")

    reasons = []
    if not is_figure_child and img > 1 and p / img < 0.5:
        reasons.append("bad p to img ratio")
    if not is_list and li > p:
        reasons.append("too many li's outside of a list")
    if inputs > p // 3:
        reasons.append("too many inputs per p")
    if (
        not is_list
        and not is_figure_child
        and heading_density < 0.9
        and content_length < 25
        and (img == 0 or img > 2)
        and link_density > 0
    ):
        reasons.append("suspiciously short")
    if not is_list and weight < 25 and link_density > 0.2:
        reasons.append("low weight and a little linky")
    if weight >= 25 and link_density > 0.5:
        reasons.append("high weight and mostly links")
    if (embed_count == 1 and content_length < 75) or embed_count > 1:
        reasons.append("suspicious embed")
    if img == 0 and text_density == 0:
        reasons.append("no useful content")

    should_remove = bool(reasons)
    if should_remove:
        ctx.logger.debug("cleaning conditionally", node=describe_node(node), reasons=reasons)

    # Image galleries built as lists survive.
    if is_list and should_remove:
        if any(len(element_children(child)) > 1 for child in element_children(node)):
            return should_remove
        if img == len(get_elements(node, "li")):
            return False
    return should_remove


def clean_conditionally(ctx: ParseContext, root: Tag, tag: str) -> None:
    """Remove `tag` elements that look like boilerplate rather than prose."""
    if not ctx.flags.clean_conditionally:
        return
    remove_nodes(get_elements(root, tag), lambda node: _should_clean(ctx, node, tag))


def _unwrap_single_cell_tables(root: Tag) -> None:
    for table in get_elements(root, "table"):
        if table.parent is None:
            continue
        tbody = first_element_child(table) if has_single_tag_inside(table, "tbody") else table
        if tbody is None or not has_single_tag_inside(tbody, "tr"):
            continue
        row = first_element_child(tbody)
        if row is None or not has_single_tag_inside(row, "td"):
            continue
        cell = first_element_child(row)
        if cell is None:
            continue
        set_node_tag(cell, "p" if all(is_phrasing_content(child) for child in cell.contents) else "div")
        table.replace_with(cell.extract())


# --- entry point ---


def prep_article(ctx: ParseContext, article: Tag) -> None:
    """Clean the merged article subtree in place."""
    mark_data_tables(ctx, article)
    fix_lazy_images(ctx, article)

    clean_conditionally(ctx, article, "form")
    clean_conditionally(ctx, article, "fieldset")
    for tag in ("object", "embed", "footer", "link", "aside"):
        clean(article, tag)

    for child in element_children(article):
        clean_matched_nodes(
            child,
            lambda node, matched: SHARE_ELEMENTS.search(matched) is not None
            and len(text_content(node)) < SHARE_ELEMENT_THRESHOLD,
        )

    for tag in ("iframe", "input", "textarea", "select", "button"):
        clean(article, tag)
    clean_headers(ctx, article)

    clean_conditionally(ctx, article, "table")
    clean_conditionally(ctx, article, "ul")
    clean_conditionally(ctx, article, "div")

    replace_node_tags(get_elements(article, "h1"), "h2")

    remove_nodes(
        get_elements(article, "p"),
        lambda paragraph: not get_elements(paragraph, ["img", "embed", "object", "iframe"])
        and not get_inner_text(paragraph, normalize_spaces=False),
    )

    for br in get_elements(article, "br"):
        following = next_significant_node(br.next_sibling)
        if isinstance(following, Tag) and following.name == "p":
            br.extract()

    _unwrap_single_cell_tables(article)
