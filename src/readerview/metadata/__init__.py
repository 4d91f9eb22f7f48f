"""
Metadata extraction for readerview.

Components:
- get_article_metadata: meta tags merged with JSON-LD (meta tags win)
- extract_json_ld: schema.org Article blocks
- get_article_title: title heuristic over ``<title>`` and ``<h1>``
- find_byline: author elements in the page body
- parse_date: timestamps through dateutil
"""

from .author_extractor import find_byline, is_valid_byline
from .date_extractor import parse_date
from .metadata_extractor import collect_meta_values, get_article_metadata, get_favicon, get_language
from .structured_data_parser import SchemaOrgParser, extract_json_ld
from .title_extractor import get_article_title, text_similarity, word_count

__all__ = [
    "SchemaOrgParser",
    "collect_meta_values",
    "extract_json_ld",
    "find_byline",
    "get_article_metadata",
    "get_article_title",
    "get_favicon",
    "get_language",
    "is_valid_byline",
    "parse_date",
    "text_similarity",
    "word_count",
]
