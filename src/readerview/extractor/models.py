"""
Data models for extraction state and results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

if TYPE_CHECKING:
    from ..config.config import ParserConfig


@dataclass(slots=True, frozen=True)
class Flags:
    """Strictness switches of one scoring pass."""

    strip_unlikely_candidates: bool = True
    use_weight_classes: bool = True
    clean_conditionally: bool = True

    def relax(self) -> Optional[Flags]:
        """Copy with the next switch turned off, or None once all are off."""
        if self.strip_unlikely_candidates:
            return replace(self, strip_unlikely_candidates=False)
        if self.use_weight_classes:
            return replace(self, use_weight_classes=False)
        if self.clean_conditionally:
            return replace(self, clean_conditionally=False)
        return None


@dataclass(slots=True, frozen=True)
class Attempt:
    """Outcome of a scoring pass that fell short of the length threshold."""

    flags: Flags
    article: Optional[Tag]
    text_length: int


@dataclass(slots=True)
class Metadata:
    """Page metadata gathered from meta tags and JSON-LD."""

    title: str = ""
    byline: str = ""
    excerpt: str = ""
    site_name: str = ""
    image: str = ""
    favicon: str = ""
    published_time: str = ""
    modified_time: str = ""
    language: str = ""


@dataclass(slots=True, frozen=True)
class Article:
    """Result of a parse call."""

    title: str = ""
    byline: str = ""
    content: str = ""
    text_content: str = ""
    length: int = 0
    excerpt: str = ""
    site_name: str = ""
    image: str = ""
    favicon: str = ""
    language: str = ""
    direction: str = ""
    published_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None
    # First element of the article subtree; tied to the parsed document.
    node: Optional[Tag] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly mapping of every field except the node."""
        return {
            "title": self.title,
            "byline": self.byline,
            "content": self.content,
            "text_content": self.text_content,
            "length": self.length,
            "excerpt": self.excerpt,
            "site_name": self.site_name,
            "image": self.image,
            "favicon": self.favicon,
            "language": self.language,
            "direction": self.direction,
            "published_time": self.published_time.isoformat() if self.published_time else None,
            "modified_time": self.modified_time.isoformat() if self.modified_time else None,
        }


@dataclass
class ParseContext:
    """
    Mutable state of one parse call.

    Scores and data-table marks live in side tables keyed by ``id(node)``;
    each entry keeps a reference to its node so the id cannot be reused while
    the entry exists.
    """

    doc: BeautifulSoup
    config: ParserConfig
    logger: Any
    page_url: Optional[str] = None
    flags: Flags = field(default_factory=Flags)
    attempts: List[Attempt] = field(default_factory=list)
    article_title: str = ""
    article_byline: str = ""
    article_dir: str = ""
    article_lang: str = ""
    _scores: Dict[int, Tuple[Tag, float]] = field(default_factory=dict, repr=False)
    _data_tables: Dict[int, Tuple[Tag, bool]] = field(default_factory=dict, repr=False)

    # --- content scores ---

    def has_score(self, node: Tag) -> bool:
        return id(node) in self._scores

    def get_score(self, node: Tag) -> float:
        entry = self._scores.get(id(node))
        return entry[1] if entry is not None else 0.0

    def set_score(self, node: Tag, score: float) -> None:
        self._scores[id(node)] = (node, score)

    def add_score(self, node: Tag, delta: float) -> None:
        self.set_score(node, self.get_score(node) + delta)

    def reset_scores(self) -> None:
        self._scores.clear()

    # --- data tables ---

    def mark_data_table(self, table: Tag, is_data: bool) -> None:
        self._data_tables[id(table)] = (table, is_data)

    def is_data_table(self, table: Tag) -> bool:
        entry = self._data_tables.get(id(table))
        return entry is not None and entry[1]
