"""
Unit tests for meta tag metadata and its merge with JSON-LD.
"""

from readerview.extractor.dom import parse_html
from readerview.extractor.models import Metadata
from readerview.metadata.metadata_extractor import (
    collect_meta_values,
    get_article_metadata,
    get_favicon,
    get_language,
)


def head(*tags, html_attrs=""):
    return f"<html {html_attrs}><head>{''.join(tags)}</head><body></body></html>"


class TestCollectMetaValues:
    """Test cases for meta key normalization."""

    def test_keys(self):
        """property and name keys are normalized; unrelated tags are ignored."""
        doc = parse_html(
            head(
                '<meta property="og:title" content=" OG Title ">',
                '<meta property="og : site_name" content="Site">',
                '<meta name="dc.creator" content="Ana">',
                '<meta name="twitter:description" content="Tweet">',
                '<meta name="viewport" content="width=device-width">',
                '<meta name="author" content="">',
            )
        )
        assert collect_meta_values(doc) == {
            "og:title": "OG Title",
            "og:site_name": "Site",
            "dc:creator": "Ana",
            "twitter:description": "Tweet",
        }


class TestGetArticleMetadata:
    """Test cases for get_article_metadata."""

    def test_meta_tags(self, make_context):
        ctx = make_context(
            head(
                "<title>Ignored | Site</title>",
                '<meta property="og:title" content="Fish &amp;amp; Chips">',
                '<meta name="author" content="Ana Ruiz">',
                '<meta name="description" content="Plain description">',
                '<meta property="og:site_name" content="Daily">',
                '<meta property="og:image" content="/lead.png">',
                '<meta name="parsely-pub-date" content="2024-05-01">',
            )
        )
        metadata = get_article_metadata(ctx)
        assert metadata.title == "Fish & Chips"
        assert metadata.byline == "Ana Ruiz"
        assert metadata.excerpt == "Plain description"
        assert metadata.site_name == "Daily"
        assert metadata.image == "http://example.com/lead.png"
        assert metadata.published_time == "2024-05-01"

    def test_meta_tags_win_over_json_ld(self, make_context):
        """JSON-LD only fills fields the meta tags leave empty."""
        ctx = make_context(head('<meta property="og:title" content="Meta Title">'))
        json_ld = Metadata(title="LD Title", byline="LD Author", site_name="LD Site")
        metadata = get_article_metadata(ctx, json_ld)
        assert metadata.title == "Meta Title"
        assert metadata.byline == "LD Author"
        assert metadata.site_name == "LD Site"

    def test_title_falls_back_to_document(self, make_context):
        ctx = make_context(head("<title>A Document Title Here</title>"))
        assert get_article_metadata(ctx).title == "A Document Title Here"

    def test_article_author(self, make_context):
        """article:author is a byline only when it is not a profile URL."""
        ctx = make_context(head('<meta property="article:author" content="Tom Berg">'))
        assert get_article_metadata(ctx).byline == "Tom Berg"
        ctx = make_context(head('<meta property="article:author" content="https://social.example/tom">'))
        assert get_article_metadata(ctx).byline == ""

    def test_document_untouched(self, make_context):
        ctx = make_context(head("<title>T</title>", '<meta name="author" content="A">'))
        before = str(ctx.doc)
        get_article_metadata(ctx)
        assert str(ctx.doc) == before

    def test_malformed_article_author_url(self, make_context):
        """A broken URL is not a profile link, so it is kept as text."""
        ctx = make_context(head('<meta property="article:author" content="http://[oops">'))
        assert get_article_metadata(ctx).byline == "http://[oops"

    def test_malformed_base_href(self, make_context):
        """An unusable base leaves relative image URLs unresolved."""
        ctx = make_context(
            head('<base href="http://[bad">', '<meta property="og:image" content="/lead.png">'),
            page_url=None,
        )
        assert get_article_metadata(ctx).image == "/lead.png"


class TestFavicon:
    """Test cases for get_favicon."""

    def test_largest_square_png(self):
        doc = parse_html(
            head(
                '<link rel="shortcut icon" href="/favicon.ico">',
                '<link rel="icon" href="/small.png" sizes="16x16">',
                '<link rel="icon" type="image/png" href="/big.png" sizes="192x192">',
                '<link rel="icon" href="/wide.png" sizes="300x100">',
            )
        )
        assert get_favicon(doc, "http://example.com/a/") == "http://example.com/big.png"

    def test_size_from_href(self):
        doc = parse_html(head('<link rel="icon" href="/i-16x16.png">', '<link rel="icon" href="/i-32x32.png">'))
        assert get_favicon(doc, "http://example.com/") == "http://example.com/i-32x32.png"

    def test_first_icon_fallback(self):
        """Without PNG icons the first icon of any kind is used."""
        doc = parse_html(head('<link rel="stylesheet" href="/s.css">', '<link rel="icon" href="/favicon.ico">'))
        assert get_favicon(doc, "http://example.com/") == "http://example.com/favicon.ico"

    def test_no_icon(self):
        assert get_favicon(parse_html(head()), "http://example.com/") == ""


class TestLanguage:
    """Test cases for get_language."""

    def test_html_lang(self):
        assert get_language(parse_html(head(html_attrs='lang="de-AT"'))) == "de-AT"

    def test_content_language(self):
        doc = parse_html(head('<meta http-equiv="Content-Language" content="nl">'))
        assert get_language(doc) == "nl"

    def test_og_locale(self):
        doc = parse_html(head('<meta property="og:locale" content="pt_BR">'))
        assert get_language(doc) == "pt_BR"

    def test_unknown(self):
        assert get_language(parse_html(head())) == ""
