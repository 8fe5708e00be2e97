"""
Base class for data normalization.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import FetchExhausted, MalformedResponse
from ..ingest.base import BaseIngestor, RawFeed
from ..models import ParkingLot
from .coords import convert_twd97_to_wgs84
from .value_utils import as_text, normalize_availability, normalize_capacity

logger = logging.getLogger(__name__)


class BaseNormalizer(ABC):
    """Base class for source-specific data normalizers."""

    # Drop records with an empty identifier
    REQUIRE_ID = False

    def __init__(self, source_id: str, ingestor: BaseIngestor):
        self.source_id = source_id
        self.ingestor = ingestor
        self.skipped: Counter = Counter()

    def create_lot(
        self,
        lot_id: Any,
        x: float,
        y: float,
        name: Any = None,
        address: Any = None,
        payex: Any = None,
        totalcar: Any = None,
        availablecar: Any = None,
        timestamp: Optional[datetime] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> ParkingLot:
        """
        Create a ParkingLot from raw field values.

        Args:
            lot_id: Source-specific ID
            x: TWD97 X coordinate
            y: TWD97 Y coordinate
            name: Lot name
            address: Street address
            payex: Pay rule summary
            totalcar: Car capacity (unparsable -> 0)
            availablecar: Free car spaces or sentinel (unparsable -> -9)
            timestamp: Normalization time
            extra: Additional upstream fields to carry along

        Returns:
            ParkingLot (possibly without a location)
        """
        lat, lng = convert_twd97_to_wgs84(x, y)
        return ParkingLot(
            id=as_text(lot_id),
            name=as_text(name),
            address=as_text(address),
            payex=as_text(payex),
            totalcar=normalize_capacity(totalcar),
            availablecar=normalize_availability(availablecar),
            lat=lat,
            lng=lng,
            source=self.source_id,
            last_updated=timestamp or datetime.now(timezone.utc),
            extra={k: v for k, v in (extra or {}).items() if v is not None}
        )

    def accept(self, lot: ParkingLot) -> bool:
        """Check a lot against the emit rules, counting rejections."""
        if self.REQUIRE_ID and not lot.id:
            self.skipped['no_id'] += 1
            return False
        if not lot.has_location:
            self.skipped['no_location'] += 1
            return False
        return True

    @abstractmethod
    def normalize(self, feed: RawFeed) -> List[ParkingLot]:
        """
        Normalize raw feeds to ParkingLot records.

        Returns:
            List of lots that passed accept()
        """
        pass

    def run(self) -> List[ParkingLot]:
        """Fetch, normalize and report. A failed source yields no lots."""
        self.skipped = Counter()

        try:
            feed = self.ingestor.run()
        except (FetchExhausted, MalformedResponse) as e:
            logger.error(f"{self.source_id} data error: {e}")
            return []

        lots = self.normalize(feed)

        logger.info(f"  {self.source_id}: {len(lots)} lots normalized")
        if self.skipped:
            logger.info(f"  Skipped: {sum(self.skipped.values())} records")
            for reason, count in sorted(self.skipped.items()):
                logger.info(f"    - {reason}: {count}")

        return lots
