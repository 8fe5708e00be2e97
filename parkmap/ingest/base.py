"""
Base class for data ingestion.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Optional

from .fetch import ResilientFetcher

logger = logging.getLogger(__name__)


class RawFeed(NamedTuple):
    """Raw description and availability records of one source."""
    descriptions: List[Dict]
    availability: List[Dict]


class BaseIngestor(ABC):
    """Base class for source-specific data ingestors."""

    def __init__(self, source_id: str, fetcher: Optional[ResilientFetcher] = None):
        self.source_id = source_id
        self.fetcher = fetcher or ResilientFetcher()

    @abstractmethod
    def fetch_raw(self) -> RawFeed:
        """
        Fetch the raw feeds of this source.

        Raises:
            FetchExhausted: a required endpoint could not be fetched
            MalformedResponse: a payload did not have the expected shape
        """
        pass

    def run(self) -> RawFeed:
        """Fetch and report raw record counts."""
        logger.info(f"Ingesting {self.source_id}...")
        feed = self.fetch_raw()
        logger.info(
            f"  {self.source_id}: {len(feed.descriptions)} descriptions, "
            f"{len(feed.availability)} availability records"
        )
        return feed
