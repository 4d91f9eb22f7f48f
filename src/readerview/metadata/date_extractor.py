"""
Date Extractor - Publication and modification timestamps

Date strings come from meta tags or JSON-LD in whatever format the site
uses; dateutil handles the format guessing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


def parse_date(value: str, field: str, log: Any = None) -> Optional[datetime]:
    """Parse `value`; a failure is logged as a warning and yields None."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError) as e:
        if log is not None:
            log.warning("failed to parse date", field=field, value=value, error=str(e))
        else:
            logger.warning("failed to parse %s %r: %s", field, value, e)
        return None
