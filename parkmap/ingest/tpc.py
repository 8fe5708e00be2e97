"""
Taipei City (TPC) parking lot ingestor.

Downloads the lot description and live availability feeds published by
the Taipei City Government. Both feeds share the shape
{"data": {"park": [...]}} with lowercase keys.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from ..constants import SOURCE_TPC, TPC_AVAIL_URL, TPC_DESC_URL
from ..errors import MalformedResponse
from .base import BaseIngestor, RawFeed
from .fetch import ResilientFetcher


def extract_parks(payload: Any, url: str) -> List[Dict]:
    """Return payload['data']['park'], or raise MalformedResponse."""
    try:
        parks = payload['data']['park']
    except (KeyError, TypeError, IndexError):
        raise MalformedResponse(f"{url}: missing data.park") from None
    if not isinstance(parks, list):
        raise MalformedResponse(f"{url}: data.park is not a list")
    return [p for p in parks if isinstance(p, dict)]


class Ingestor(BaseIngestor):
    """TPC description + availability ingestor."""

    DESC_URL = TPC_DESC_URL
    AVAIL_URL = TPC_AVAIL_URL

    def __init__(self, fetcher: Optional[ResilientFetcher] = None):
        super().__init__(SOURCE_TPC, fetcher)

    def fetch_raw(self) -> RawFeed:
        # Both feeds are independent; fetch them together and join
        with ThreadPoolExecutor(max_workers=2) as executor:
            desc_future = executor.submit(self.fetcher.fetch, self.DESC_URL)
            avail_future = executor.submit(self.fetcher.fetch, self.AVAIL_URL)
            desc_json = desc_future.result()
            avail_json = avail_future.result()

        return RawFeed(
            descriptions=extract_parks(desc_json, self.DESC_URL),
            availability=extract_parks(avail_json, self.AVAIL_URL)
        )
