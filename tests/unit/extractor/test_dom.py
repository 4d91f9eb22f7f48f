"""
Unit tests for the DOM helpers.
"""

import pytest

from readerview.exceptions import HTMLParseError
from readerview.extractor import dom
from readerview.extractor.dom import parse_html


class TestParsing:
    """Test cases for parsing, copying and serialization."""

    def test_parse_bytes_and_str(self):
        """Both bytes and text are accepted."""
        assert parse_html(b"<p>bytes</p>").p.string == "bytes"
        assert parse_html("<p>text</p>").p.string == "text"

    def test_parse_rejected_markup_is_wrapped(self, monkeypatch):
        """Parser rejections surface as HTMLParseError."""

        def reject(*args, **kwargs):
            raise dom.ParserRejectedMarkup("nope")

        monkeypatch.setattr(dom, "BeautifulSoup", reject)
        with pytest.raises(HTMLParseError):
            parse_html("<p>x</p>")

    def test_clone_is_independent(self):
        """Mutating the clone leaves the original alone."""
        doc = parse_html("<div><p>one</p></div>")
        clone = dom.clone_document(doc)
        clone.p.extract()
        assert doc.p is not None
        assert clone.p is None

    def test_serialization_keeps_attribute_order(self):
        """Attributes serialize in source order, not sorted."""
        doc = parse_html('<div id="b" class="a" data-z="1"><img src="x.png" alt="x"></div>')
        assert dom.outer_html(doc.div) == '<div id="b" class="a" data-z="1"><img src="x.png" alt="x"/></div>'
        assert dom.inner_html(doc.div) == '<img src="x.png" alt="x"/>'

    def test_count_elements(self):
        """Every element counts, including the implied html and body."""
        doc = parse_html("<p>a</p><p>b</p>")
        assert dom.count_elements(doc) == 4


class TestAttributes:
    """Test cases for attribute access."""

    def test_attr_value_joins_lists(self):
        """Multi-valued attributes come back as one string."""
        doc = parse_html('<div class="one two" rel="author"></div>')
        assert dom.attr_value(doc.div, "class") == "one two"
        assert dom.attr_value(doc.div, "missing") == ""
        assert dom.match_string(doc.div) == "one two "

    @pytest.mark.parametrize(
        "markup,visible",
        [
            ("<div>x</div>", True),
            ('<div style="display: none">x</div>', False),
            ('<div style="visibility:hidden">x</div>', False),
            ("<div hidden>x</div>", False),
            ('<div aria-hidden="true">x</div>', False),
            ('<div aria-hidden="true" class="fallback-image">x</div>', True),
        ],
    )
    def test_is_probably_visible(self, markup, visible):
        """Hidden elements are recognized from style and attributes."""
        assert dom.is_probably_visible(parse_html(markup).div) is visible


class TestNavigation:
    """Test cases for document-order traversal."""

    def test_get_next_node_walks_depth_first(self):
        """Elements are visited in document order."""
        doc = parse_html("<div id='a'><p id='b'><span id='c'></span></p></div><div id='d'></div>")
        node = doc.find(id="a")
        seen = []
        while node is not None:
            seen.append(dom.node_id(node))
            node = dom.get_next_node(node)
        assert seen == ["a", "b", "c", "d"]

    def test_get_next_node_skips_children(self):
        """Skipping a subtree goes to the next sibling."""
        doc = parse_html("<div id='a'><p id='b'></p></div><div id='d'></div>")
        assert dom.node_id(dom.get_next_node(doc.find(id="a"), ignore_self_and_kids=True)) == "d"

    def test_remove_and_get_next(self):
        """Removal returns the following element."""
        doc = parse_html("<div id='a'><p id='b'></p></div><div id='d'></div>")
        following = dom.remove_and_get_next(doc.find(id="a"))
        assert dom.node_id(following) == "d"
        assert doc.find(id="b") is None

    def test_ancestors_and_has_ancestor_tag(self):
        """Ancestors are listed nearest first, bounded by depth."""
        doc = parse_html("<table><tr><td><p><span>x</span></p></td></tr></table>")
        span = doc.span
        assert [a.name for a in dom.get_node_ancestors(span, 2)] == ["p", "td"]
        assert dom.has_ancestor_tag(span, "td")
        assert not dom.has_ancestor_tag(span, "table", max_depth=1)
        assert dom.has_ancestor_tag(span, "table", max_depth=0)


class TestMeasures:
    """Test cases for text measures and structure tests."""

    def test_inner_text_normalizes_spaces(self):
        """Whitespace runs collapse to one space."""
        doc = parse_html("<p>  a \n\n b  </p>")
        assert dom.get_inner_text(doc.p) == "a b"
        assert dom.get_inner_text(doc.p, normalize_spaces=False) == "a \n\n b"

    def test_link_density(self):
        """Fragment links weigh less than real ones."""
        doc = parse_html('<p><a href="/x">0123456789</a>0123456789</p><div><a href="#top">0123456789</a>0123456789</div>')
        assert dom.get_link_density(doc.p) == pytest.approx(0.5)
        assert dom.get_link_density(doc.div) == pytest.approx(0.15)

    def test_class_weight(self):
        """Positive and negative keywords in class and id add up."""
        doc = parse_html('<div class="article-body" id="comment-list"></div>')
        assert dom.get_class_weight(doc.div) == 0
        assert dom.get_class_weight(parse_html('<div class="sidebar"></div>').div) == -25
        assert dom.get_class_weight(parse_html('<div id="content"></div>').div) == 25
        assert dom.get_class_weight(parse_html('<div id="content"></div>').div, use_weight_classes=False) == 0

    def test_element_without_content(self):
        """Only whitespace and line breaks count as empty."""
        assert dom.is_element_without_content(parse_html("<div> <br><hr> </div>").div)
        assert not dom.is_element_without_content(parse_html("<div><img src='a.png'></div>").div)
        assert not dom.is_element_without_content(parse_html("<div>text</div>").div)

    def test_single_tag_inside(self):
        """A lone child with no text beside it qualifies."""
        assert dom.has_single_tag_inside(parse_html("<div> <p>x</p> </div>").div, "p")
        assert not dom.has_single_tag_inside(parse_html("<div>y <p>x</p></div>").div, "p")
        assert not dom.has_single_tag_inside(parse_html("<div><p>x</p><p>z</p></div>").div, "p")

    def test_phrasing_content(self):
        """Links count as phrasing only when their children do."""
        doc = parse_html("<div><a id='inline'><b>x</b></a><a id='block'><div>y</div></a></div>")
        assert dom.is_phrasing_content(doc.find(id="inline"))
        assert not dom.is_phrasing_content(doc.find(id="block"))


class TestDescribeNode:
    """Test cases for log previews."""

    def test_describe_hides_payloads(self):
        """Data URIs and scripts are elided."""
        doc = parse_html('<img class="hero" src="data:image/png;base64,AAAA" width="10">')
        assert dom.describe_node(doc.img) == '<img class="hero" src="data:image/png;base64,***" .../>'

    def test_describe_none(self):
        """A missing node still renders."""
        assert dom.describe_node(None) == "<none>"
