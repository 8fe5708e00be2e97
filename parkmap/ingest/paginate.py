"""
Drain a page-parameterized JSON endpoint.

The NTPC datasets return a JSON array per page and an empty array (or a
non-array error object) once past the end.
"""

import logging
import time
from typing import Any, Callable, List
from urllib.parse import urlencode

from ..constants import MAX_PAGES, PAGE_SIZE
from ..errors import FetchExhausted
from .fetch import ResilientFetcher

logger = logging.getLogger(__name__)


def page_url(base_url: str, page: int, size: int, timestamp: int) -> str:
    """Build the URL for one page, with a cache-busting timestamp."""
    query = urlencode({'page': page, 'size': size, '_t': timestamp})
    separator = '&' if '?' in base_url else '?'
    return f"{base_url}{separator}{query}"


class Paginator:
    """Fetch pages sequentially until an empty page, a failure, or the ceiling."""

    def __init__(
        self,
        fetcher: ResilientFetcher,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
        clock: Callable[[], float] = time.time
    ):
        self.fetcher = fetcher
        self.page_size = page_size
        self.max_pages = max_pages
        self.clock = clock

    def fetch_all_pages(self, base_url: str) -> List[Any]:
        """
        Fetch and concatenate every page of base_url.

        A failed page ends the drain; pages already collected are kept.
        """
        all_data: List[Any] = []
        timestamp = int(self.clock() * 1000)

        for page in range(self.max_pages):
            url = page_url(base_url, page, self.page_size, timestamp)
            try:
                data = self.fetcher.fetch(url)
            except FetchExhausted as e:
                logger.warning(f"Stopping pagination at page {page}: {e}")
                break

            if not isinstance(data, list) or not data:
                break

            all_data.extend(data)
            logger.debug(f"  Page {page}: {len(data)} records ({len(all_data)} so far)")
        else:
            logger.warning(f"Reached page limit ({self.max_pages}) for {base_url}")

        return all_data
