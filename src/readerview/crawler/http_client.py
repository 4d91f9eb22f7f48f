"""
Fetches remote pages for the CLI and web front ends.
"""

from __future__ import annotations

from typing import Optional, Tuple

import httpx
from httpx import HTTPError, HTTPStatusError

from ..config.config import HTTPConfig
from ..exceptions import FetchError
from ..observability.logging import get_logger

logger = get_logger(__name__)


class PageFetcher:
    """
    Synchronous page fetcher built on :class:`httpx.Client`.

    Redirects are followed and a browser-like User-Agent is sent. Transport
    failures and non-2xx responses are raised as :class:`FetchError`.
    """

    def __init__(self, config: Optional[HTTPConfig] = None, client: Optional[httpx.Client] = None) -> None:
        """
        Args:
            config: Timeout, User-Agent and redirect limit
            client: An optional httpx.Client; one is created if not given
        """
        self.config = config or HTTPConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            timeout=self.config.timeout,
            headers={"User-Agent": self.config.user_agent},
        )

    def fetch(self, url: str) -> Tuple[bytes, str]:
        """Return the response body and the URL after redirects."""
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("page fetch failed", url=url, status_code=status)
            raise FetchError(url, f"{status} {e.response.reason_phrase}".strip(), status_code=status) from e
        except HTTPError as e:
            logger.warning("page fetch failed", url=url, error=str(e))
            raise FetchError(url, str(e) or type(e).__name__) from e

        final_url = str(response.url)
        logger.debug("page fetched", url=url, final_url=final_url, size=len(response.content))
        return response.content, final_url

    def close(self) -> None:
        """Closes the underlying HTTP client if it was created internally."""
        if self._owns_client and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> PageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
