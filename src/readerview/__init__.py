"""
readerview - Reader-mode article extraction for HTML pages.
"""

from __future__ import annotations

import logging

__version__ = "0.1.0"

# Silent until the application configures logging.
logging.getLogger("readerview").addHandler(logging.NullHandler())

from .extractor.parser import Parser  # noqa: E402
from .extractor.models import Article  # noqa: E402
from .extractor.readerable import is_probably_readerable  # noqa: E402
from .config import Config, ParserConfig  # noqa: E402
from .exceptions import ReaderViewError  # noqa: E402

__all__ = [
    "__version__",
    "Article",
    "Config",
    "Parser",
    "ParserConfig",
    "ReaderViewError",
    "is_probably_readerable",
]
