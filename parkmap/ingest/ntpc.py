"""
New Taipei City (NTPC) parking lot ingestor.

The NTPC open data API is paginated (page/size query parameters) and
returns flat JSON arrays whose key casing varies between deployments.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..constants import NTPC_AVAIL_BASE_URL, NTPC_DESC_BASE_URL, SOURCE_NTPC
from .base import BaseIngestor, RawFeed
from .fetch import ResilientFetcher
from .paginate import Paginator


class Ingestor(BaseIngestor):
    """NTPC paginated description + availability ingestor."""

    DESC_BASE_URL = NTPC_DESC_BASE_URL
    AVAIL_BASE_URL = NTPC_AVAIL_BASE_URL

    def __init__(
        self,
        fetcher: Optional[ResilientFetcher] = None,
        paginator: Optional[Paginator] = None
    ):
        super().__init__(SOURCE_NTPC, fetcher)
        self.paginator = paginator or Paginator(self.fetcher)

    def fetch_raw(self) -> RawFeed:
        # Pagination keeps partial results and never raises
        with ThreadPoolExecutor(max_workers=2) as executor:
            desc_future = executor.submit(self.paginator.fetch_all_pages, self.DESC_BASE_URL)
            avail_future = executor.submit(self.paginator.fetch_all_pages, self.AVAIL_BASE_URL)
            descriptions = desc_future.result()
            availability = avail_future.result()

        return RawFeed(
            descriptions=[d for d in descriptions if isinstance(d, dict)],
            availability=[a for a in availability if isinstance(a, dict)]
        )
