"""
New Taipei City (NTPC) parking data normalization.

NTPC records are flat objects whose keys arrive as ID or id (and other
casings) depending on the deployment. Counts are string-encoded.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..constants import AVAILABLE_UNKNOWN, SOURCE_NTPC
from ..ingest.base import RawFeed
from ..ingest.fetch import ResilientFetcher
from ..ingest.ntpc import Ingestor
from ..models import ParkingLot
from .base import BaseNormalizer
from .value_utils import as_text, get_field, normalize_availability, parse_float

# Descriptive fields kept alongside the canonical ones (output key -> upstream key)
EXTRA_FIELDS = {
    'area': 'AREA',
    'type': 'TYPE',
    'serviceTime': 'SERVICETIME',
    'totalmotor': 'TOTALMOTOR',
}


class Normalizer(BaseNormalizer):
    """NTPC case-tolerant normalizer."""

    REQUIRE_ID = True

    def __init__(self, fetcher: Optional[ResilientFetcher] = None, ingestor: Optional[Ingestor] = None):
        super().__init__(SOURCE_NTPC, ingestor or Ingestor(fetcher))

    def build_availability_map(self, records: List[Dict]) -> Dict[str, int]:
        avail_map = {}
        for p in records:
            lot_id = as_text(get_field(p, 'ID'))
            if lot_id:
                avail_map[lot_id] = normalize_availability(get_field(p, 'AVAILABLECAR'))
        return avail_map

    def normalize(self, feed: RawFeed) -> List[ParkingLot]:
        avail_map = self.build_availability_map(feed.availability)
        timestamp = datetime.now(timezone.utc)
        lots = []

        for desc in feed.descriptions:
            lot_id = as_text(get_field(desc, 'ID'))
            lot = self.create_lot(
                lot_id=lot_id,
                x=parse_float(get_field(desc, 'TW97X')),
                y=parse_float(get_field(desc, 'TW97Y')),
                name=get_field(desc, 'NAME'),
                address=get_field(desc, 'ADDRESS'),
                payex=get_field(desc, 'PAYEX'),
                totalcar=get_field(desc, 'TOTALCAR'),
                availablecar=avail_map.get(lot_id, AVAILABLE_UNKNOWN),
                timestamp=timestamp,
                extra={out: get_field(desc, key) for out, key in EXTRA_FIELDS.items()}
            )
            if self.accept(lot):
                lots.append(lot)

        return lots
