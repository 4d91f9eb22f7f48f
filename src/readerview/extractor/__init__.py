"""
Article extraction engine.

The pipeline runs over a BeautifulSoup document (lxml tree builder):
1. Preprocessing: noscript images, scripts, styles, ``<br>`` chains, ``<font>``
2. Metadata: meta tags, JSON-LD, title heuristics
3. Candidate scoring with up to four passes of decreasing strictness
4. Cleanup and post-processing of the chosen subtree
5. Rendering of the article text
"""

from .models import Article, Metadata, ParseContext
from .parser import Parser
from .readerable import is_probably_readerable
from .render import inner_text

__all__ = [
    "Article",
    "Metadata",
    "ParseContext",
    "Parser",
    "inner_text",
    "is_probably_readerable",
]
