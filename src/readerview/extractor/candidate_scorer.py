"""
Candidate scoring: finds the subtree holding the article text.

Each pass walks the document, prunes what is clearly not content, scores
paragraph-like elements and pushes their score up to a few ancestors. The
best ancestor and its relevant siblings are merged into a new ``<div>`` and
cleaned. A pass producing too little text restores the body, relaxes one
flag and tries again; when every flag is relaxed, the longest attempt wins.
"""

from __future__ import annotations

import copy
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from ..metadata.author_extractor import find_byline
from ..metadata.title_extractor import text_similarity
from .cleaners import prep_article
from .dom import (
    attr_value,
    class_name,
    describe_node,
    element_children,
    first_element_child,
    get_class_weight,
    get_inner_text,
    get_link_density,
    get_next_node,
    get_node_ancestors,
    has_ancestor_tag,
    has_child_block_element,
    has_single_tag_inside,
    is_element_without_content,
    is_phrasing_content,
    is_probably_visible,
    is_whitespace,
    match_string,
    move_children,
    remove_and_get_next,
    set_node_tag,
)
from .models import Attempt, ParseContext
from .patterns import (
    ALTER_TO_DIV_EXCEPTIONS,
    COMMAS,
    OK_MAYBE_ITS_A_CANDIDATE,
    SENTENCE_END,
    TAGS_TO_SCORE,
    UNLIKELY_CANDIDATES,
    UNLIKELY_ROLES,
)

PAGE_ID = "readability-page-1"
PAGE_CLASS = "page"
MIN_PARAGRAPH_LENGTH = 25
ANCESTOR_DEPTH = 5
MIN_TOP_CANDIDATES = 3
EMPTY_CONTAINER_TAGS = frozenset(["div", "section", "header", "h1", "h2", "h3", "h4", "h5", "h6"])

_TAG_SCORES = {
    "div": 5,
    "pre": 3,
    "td": 3,
    "blockquote": 3,
    "address": -3,
    "ol": -3,
    "ul": -3,
    "dl": -3,
    "dd": -3,
    "dt": -3,
    "li": -3,
    "form": -3,
    "h1": -5,
    "h2": -5,
    "h3": -5,
    "h4": -5,
    "h5": -5,
    "h6": -5,
    "th": -5,
}


def _is_document(node: Optional[Tag]) -> bool:
    return isinstance(node, BeautifulSoup)


def _is_body_or_root(node: Optional[Tag]) -> bool:
    return node is None or _is_document(node) or node.name == "body"


def initialize_node(ctx: ParseContext, node: Tag) -> None:
    """Start a candidate's score from its tag and class weight."""
    score = _TAG_SCORES.get(node.name, 0)
    ctx.set_score(node, score + get_class_weight(node, ctx.flags.use_weight_classes))


def header_duplicates_title(ctx: ParseContext, node: Tag) -> bool:
    if node.name not in ("h1", "h2"):
        return False
    heading = get_inner_text(node, normalize_spaces=False)
    return text_similarity(ctx.article_title, heading) > 0.75


def _is_unlikely_candidate(node: Tag, matched: str) -> bool:
    return (
        UNLIKELY_CANDIDATES.search(matched) is not None
        and OK_MAYBE_ITS_A_CANDIDATE.search(matched) is None
        and not has_ancestor_tag(node, "table")
        and not has_ancestor_tag(node, "code")
        and node.name not in ("body", "a")
    )


def _wrap_phrasing_content(ctx: ParseContext, div: Tag) -> None:
    """Put runs of phrasing content directly inside a ``<div>`` into ``<p>``."""
    p: Optional[Tag] = None
    child = div.contents[0] if div.contents else None
    while child is not None:
        next_sibling = child.next_sibling
        if is_phrasing_content(child):
            if p is not None:
                p.append(child)
            elif not is_whitespace(child):
                p = ctx.doc.new_tag("p")
                child.replace_with(p)
                p.append(child)
        elif p is not None:
            while p.contents and is_whitespace(p.contents[-1]):
                p.contents[-1].extract()
            p = None
        child = next_sibling


def _collect_elements_to_score(ctx: ParseContext) -> List[Tag]:
    """Walk the document once, pruning as we go; returns the elements to score."""
    elements_to_score: List[Tag] = []
    should_remove_title_header = True
    node: Optional[Tag] = first_element_child(ctx.doc)

    while node is not None:
        if node.name == "html":
            ctx.article_lang = attr_value(node, "lang")

        matched = match_string(node)

        if not is_probably_visible(node):
            ctx.logger.debug("removing hidden node", node=describe_node(node))
            node = remove_and_get_next(node)
            continue

        if attr_value(node, "aria-modal") == "true" and attr_value(node, "role") == "dialog":
            node = remove_and_get_next(node)
            continue

        if not ctx.article_byline:
            byline = find_byline(node, matched)
            if byline is not None:
                ctx.article_byline = byline
                ctx.logger.debug("found byline", node=describe_node(node), byline=byline)
                node = remove_and_get_next(node)
                continue

        if should_remove_title_header and header_duplicates_title(ctx, node):
            ctx.logger.debug("removing header duplicating the title", node=describe_node(node))
            should_remove_title_header = False
            node = remove_and_get_next(node)
            continue

        if ctx.flags.strip_unlikely_candidates:
            if _is_unlikely_candidate(node, matched):
                ctx.logger.debug("removing unlikely candidate", node=describe_node(node))
                node = remove_and_get_next(node)
                continue
            if attr_value(node, "role") in UNLIKELY_ROLES:
                ctx.logger.debug("removing node with unlikely role", node=describe_node(node))
                node = remove_and_get_next(node)
                continue

        if node.name in EMPTY_CONTAINER_TAGS and is_element_without_content(node):
            node = remove_and_get_next(node)
            continue

        if node.name in TAGS_TO_SCORE:
            elements_to_score.append(node)

        if node.name == "div":
            _wrap_phrasing_content(ctx, node)

            # A div holding a single paragraph is that paragraph.
            if has_single_tag_inside(node, "p") and get_link_density(node) < 0.25:
                new_node = element_children(node)[0]
                node.replace_with(new_node.extract())
                node = new_node
                elements_to_score.append(node)
            elif not has_child_block_element(node):
                set_node_tag(node, "p")
                elements_to_score.append(node)

        node = get_next_node(node)

    return elements_to_score


def _score_elements(ctx: ParseContext, elements_to_score: List[Tag]) -> List[Tag]:
    """Spread paragraph scores to ancestors; returns the new candidates in order."""
    candidates: List[Tag] = []
    for element in elements_to_score:
        parent = element.parent
        if parent is None or _is_document(parent):
            continue

        inner_text = get_inner_text(element)
        if len(inner_text) < MIN_PARAGRAPH_LENGTH:
            continue

        ancestors = get_node_ancestors(element, ANCESTOR_DEPTH)
        if not ancestors:
            continue

        content_score = 1.0
        content_score += len(COMMAS.split(inner_text))
        content_score += min(len(inner_text) // 100, 3)

        for level, ancestor in enumerate(ancestors):
            if _is_document(ancestor) or ancestor.parent is None or _is_document(ancestor.parent):
                continue
            if not ctx.has_score(ancestor):
                initialize_node(ctx, ancestor)
                candidates.append(ancestor)
            if level == 0:
                divider = 1
            elif level == 1:
                divider = 2
            else:
                divider = level * 3
            ctx.add_score(ancestor, content_score / divider)
    return candidates


def _select_top_candidates(ctx: ParseContext, candidates: List[Tag]) -> List[Tag]:
    limit = ctx.config.n_top_candidates
    top_candidates: List[Tag] = []
    for candidate in candidates:
        score = ctx.get_score(candidate) * (1 - get_link_density(candidate))
        ctx.set_score(candidate, score)
        ctx.logger.debug("candidate scored", node=describe_node(candidate), score=round(score, 2))

        for index in range(limit):
            if index >= len(top_candidates) or score > ctx.get_score(top_candidates[index]):
                top_candidates.insert(index, candidate)
                if len(top_candidates) > limit:
                    top_candidates.pop()
                break
    return top_candidates


def _promote_top_candidate(ctx: ParseContext, top_candidates: List[Tag]) -> Tag:
    top_candidate = top_candidates[0]
    top_score = ctx.get_score(top_candidate)

    # Several strong candidates sharing an ancestor means the article is that ancestor.
    alternative_ancestors = [
        get_node_ancestors(candidate)
        for candidate in top_candidates[1:]
        if top_score and ctx.get_score(candidate) / top_score >= 0.75
    ]
    if len(alternative_ancestors) >= MIN_TOP_CANDIDATES:
        parent = top_candidate.parent
        while not _is_body_or_root(parent):
            containing = 0
            for ancestors in alternative_ancestors:
                if containing >= MIN_TOP_CANDIDATES:
                    break
                if any(ancestor is parent for ancestor in ancestors):
                    containing += 1
            if containing >= MIN_TOP_CANDIDATES:
                top_candidate = parent
                break
            parent = parent.parent

    if not ctx.has_score(top_candidate):
        initialize_node(ctx, top_candidate)

    # Climb while the parent scores better; stop once scores fall off.
    parent = top_candidate.parent
    last_score = ctx.get_score(top_candidate)
    score_threshold = last_score / 3
    while not _is_body_or_root(parent):
        if not ctx.has_score(parent):
            parent = parent.parent
            continue
        parent_score = ctx.get_score(parent)
        if parent_score < score_threshold:
            break
        if parent_score > last_score:
            top_candidate = parent
            break
        last_score = parent_score
        parent = parent.parent

    parent = top_candidate.parent
    while not _is_body_or_root(parent) and len(element_children(parent)) == 1:
        top_candidate = parent
        parent = top_candidate.parent

    if not ctx.has_score(top_candidate):
        initialize_node(ctx, top_candidate)
    return top_candidate


def _should_merge_sibling(ctx: ParseContext, sibling: Tag, top_candidate: Tag, threshold: float) -> bool:
    if sibling is top_candidate:
        return True

    bonus = 0.0
    top_class = class_name(top_candidate)
    if top_class and class_name(sibling) == top_class:
        bonus += ctx.get_score(top_candidate) * 0.2

    if ctx.has_score(sibling) and ctx.get_score(sibling) + bonus >= threshold:
        return True

    if sibling.name == "p":
        link_density = get_link_density(sibling)
        content = get_inner_text(sibling)
        length = len(content)
        if length > 80 and link_density < 0.25:
            return True
        if 0 < length < 80 and link_density == 0 and SENTENCE_END.search(content):
            return True
    return False


def _find_direction(ctx: ParseContext, parent: Optional[Tag], top_candidate: Optional[Tag]) -> None:
    nodes = [parent, top_candidate] + (get_node_ancestors(parent) if parent is not None else [])
    for node in nodes:
        if node is None or _is_document(node):
            continue
        direction = attr_value(node, "dir")
        if direction:
            ctx.article_dir = direction
            return


def _restore_body(body: Tag, snapshot: Tag) -> None:
    body.clear()
    move_children(copy.copy(snapshot), body)


def grab_article(ctx: ParseContext) -> Optional[Tag]:
    """
    Return a detached ``<div>`` holding the article, or None.

    The document body is left in the state of the last pass.
    """
    doc = ctx.doc
    body = doc.body
    if body is None:
        ctx.logger.debug("no body found in document, aborting")
        return None

    snapshot = copy.copy(body)

    while True:
        ctx.reset_scores()
        ctx.logger.debug(
            "starting grab article pass",
            strip_unlikely_candidates=ctx.flags.strip_unlikely_candidates,
            use_weight_classes=ctx.flags.use_weight_classes,
            clean_conditionally=ctx.flags.clean_conditionally,
        )

        elements_to_score = _collect_elements_to_score(ctx)
        candidates = _score_elements(ctx, elements_to_score)
        top_candidates = _select_top_candidates(ctx, candidates)

        needed_to_create_top_candidate = False
        if not top_candidates or top_candidates[0].name == "body":
            # Nothing stood out: take the whole body.
            top_candidate = doc.new_tag("div")
            needed_to_create_top_candidate = True
            move_children(body, top_candidate)
            body.append(top_candidate)
            initialize_node(ctx, top_candidate)
        else:
            top_candidate = _promote_top_candidate(ctx, top_candidates)
        ctx.logger.debug(
            "top candidate selected",
            node=describe_node(top_candidate),
            score=round(ctx.get_score(top_candidate), 2),
            created=needed_to_create_top_candidate,
        )

        article = doc.new_tag("div")
        sibling_threshold = max(10.0, ctx.get_score(top_candidate) * 0.2)
        parent_of_top_candidate = top_candidate.parent
        for sibling in element_children(parent_of_top_candidate):
            if not _should_merge_sibling(ctx, sibling, top_candidate, sibling_threshold):
                continue
            ctx.logger.debug("appending sibling", node=describe_node(sibling), score=ctx.get_score(sibling))
            if sibling.name not in ALTER_TO_DIV_EXCEPTIONS:
                set_node_tag(sibling, "div")
            article.append(sibling.extract())

        prep_article(ctx, article)

        if needed_to_create_top_candidate:
            top_candidate["id"] = PAGE_ID
            top_candidate["class"] = PAGE_CLASS
        else:
            page = doc.new_tag("div", attrs={"id": PAGE_ID, "class": PAGE_CLASS})
            move_children(article, page)
            article.append(page)

        text_length = len(get_inner_text(article))
        if text_length >= ctx.config.char_threshold:
            _find_direction(ctx, parent_of_top_candidate, top_candidate)
            return article

        ctx.attempts.append(Attempt(flags=ctx.flags, article=article, text_length=text_length))
        ctx.logger.debug("article too short, retrying", text_length=text_length)
        _restore_body(body, snapshot)

        relaxed = ctx.flags.relax()
        if relaxed is not None:
            ctx.flags = relaxed
            continue

        best = ctx.attempts[0]
        for attempt in ctx.attempts[1:]:
            if attempt.text_length > best.text_length:
                best = attempt
        if not best.text_length:
            return None
        _find_direction(ctx, parent_of_top_candidate, top_candidate)
        return best.article
