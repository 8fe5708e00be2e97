"""
Taipei City (TPC) parking data normalization.

TPC feeds use a stable schema with lowercase keys. Coordinates are
TWD97 strings in tw97x / tw97y; counts are JSON numbers.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..constants import AVAILABLE_UNKNOWN, SOURCE_TPC
from ..ingest.base import RawFeed
from ..ingest.fetch import ResilientFetcher
from ..ingest.tpc import Ingestor
from ..models import ParkingLot
from .base import BaseNormalizer
from .value_utils import parse_float

# Descriptive fields kept alongside the canonical ones
EXTRA_FIELDS = ['area', 'type', 'summary', 'tel', 'serviceTime', 'totalmotor', 'totalbike']


class Normalizer(BaseNormalizer):
    """TPC description + availability normalizer."""

    def __init__(self, fetcher: Optional[ResilientFetcher] = None, ingestor: Optional[Ingestor] = None):
        super().__init__(SOURCE_TPC, ingestor or Ingestor(fetcher))

    def normalize(self, feed: RawFeed) -> List[ParkingLot]:
        """Join availability onto descriptions by id."""
        avail_map: Dict[str, object] = {}
        for p in feed.availability:
            if p.get('id') is not None:
                avail_map[str(p['id'])] = p.get('availablecar')

        timestamp = datetime.now(timezone.utc)
        lots = []

        for desc in feed.descriptions:
            lot_id = desc.get('id')
            lot = self.create_lot(
                lot_id=lot_id,
                x=parse_float(desc.get('tw97x')),
                y=parse_float(desc.get('tw97y')),
                name=desc.get('name'),
                address=desc.get('address'),
                payex=desc.get('payex'),
                totalcar=desc.get('totalcar'),
                availablecar=avail_map.get(str(lot_id), AVAILABLE_UNKNOWN),
                timestamp=timestamp,
                extra={f: desc.get(f) for f in EXTRA_FIELDS}
            )
            if self.accept(lot):
                lots.append(lot)

        return lots
